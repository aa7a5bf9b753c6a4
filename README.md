# nirvana

Fixed-point token arithmetic and protocol accounting for a token system built
around three tokens: **ANA**, **NIRV** and **ALMS**.

## What is in the package

- `nirvana.numbers`: fixed-point amounts. `ANA`, `NIRV` and `ALMS` (all
  subclasses of `TokenAmount`) have six decimals, `PreciseNumber` has twelve,
  `CoarseNumber` has six, and `ArbitraryNumber` carries its own scale. Each
  converts to `decimal.Decimal` with `to_decimal()`; most build from one with
  `from_decimal()`, and `whole(n)` gives `n` whole units. Arithmetic that
  would leave the unsigned 64-bit range raises `OverflowError` instead of
  wrapping.
- `nirvana.price_math`: the abstract `PriceCalculator` curve interface,
  `calc_price` (price at a supply scaled by a risk-free-value factor) and
  `calc_total_cost_for_amount`. Results are rounded to twelve decimals, up
  for buys and down for sells.
- `nirvana.price_field`: `PriceFieldV1` and `PriceFieldV2`, a three-segment
  price curve: a flat floor below `ramp_start`, a linear ramp of
  `ramp_width` and `ramp_height`, then `main_slope` beyond the ramp.
  `liquidity()` always returns 0.
- `nirvana.commitment`: pre-bootstrap spending commitments (`Commitment`)
  and the period they belong to (`CommitmentMeta`, whose `get_rate` gives
  the early-bird, regular or zero reward rate).
- `nirvana.accounts`: `FeeCollector`, `FeeConfig`, `GlobalHistory`,
  `History`, `MoneyMarket`, `TranaMeta` and `UserTranaContract` (linear
  vesting, with remainders of up to 100 base units released with the last
  redemption).
- `nirvana.center`: `NirvCenter`, and the checks `admin` (raises
  `Unauthorized` unless the signer is the policy owner) and `is_debug`
  (raises `DebugRequired` unless debug mode is on).
- `nirvana.center_config`: `NirvCenterConfig` and `NirvCenterConfigV3`,
  holding the bootstrap window, fee rates and fee/reward indexes. They split
  fees off swaps, unstakes, trANA buys and NIRV loans, and drop prANA
  rewards onto the reward index. `NirvCenterConfigV3` adds prANA fee
  collection and the NIRV debt fee.
- `nirvana.user_reward`: `UserReward` and `UserRewardV2`, a user's staked
  ANA, borrowed NIRV and staged prANA rewards. Refused operations raise
  subclasses of `RewardError`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from decimal import Decimal

from nirvana.numbers import ANA, CoarseNumber, PreciseNumber
from nirvana.price_field import PriceFieldV2
from nirvana.price_math import calc_price

curve = PriceFieldV2(
    ramp_start=ANA.whole(100),
    ramp_width=ANA.whole(100),
    ramp_height=PreciseNumber.from_decimal(Decimal(100)),
    floor_price=PreciseNumber.from_decimal(Decimal(1)),
)

print(curve.price_for_supply(ANA.whole(150)))   # 51, halfway up the ramp

full_value = CoarseNumber(1_000_000)             # risk-free value factor of 1.0
print(calc_price(ANA.whole(150), full_value, curve, is_buy=True))
```

Staking and borrowing:

```python
from nirvana.center_config import NirvCenterConfigV3
from nirvana.numbers import ANA, NIRV
from nirvana.user_reward import UserRewardV2

config = NirvCenterConfigV3()
reward = UserRewardV2()
reward.stake_ana(ANA.whole(100), config, curve)
reward.borrow_nirv(NIRV.whole(50), curve)   # raises if above the borrow limit
reward.repay_nirv(NIRV.whole(50))
```

The borrow limit is the staked ANA valued at the curve's floor price.

## What the package does not do

This is a library of in-memory records and calculations only. It has no
command-line tool, does not store or serialise its records, and does not
sign or check transactions: keys and account addresses are plain `bytes`
fields that it only compares. Messages about reward drops go to the
`nirvana.center_config` logger at debug level.