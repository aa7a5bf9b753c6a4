"""Fee, history, money-market and vesting account records."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from nirvana.numbers import (
    ALMS,
    ANA,
    DECIMAL_CONTEXT,
    NIRV,
    U64_MAX,
    ArbitraryNumber,
    CoarseNumber,
    PreciseNumber,
)

REDEEM_DUST = 100
"""Vesting remainders this small are released with the final redemption."""


def _u64(value: int, what: str) -> int:
    if not 0 <= value <= U64_MAX:
        raise OverflowError(f"{what} {value} does not fit in an unsigned 64-bit integer")
    return value


@dataclass
class FeeCollector:
    """A user's share of collected fees, earned by staking ALMS."""

    nirv_fee_index: PreciseNumber = field(default_factory=PreciseNumber)
    ana_fee_index: PreciseNumber = field(default_factory=PreciseNumber)
    prana_fee_index: PreciseNumber = field(default_factory=PreciseNumber)
    owner: bytes = bytes(32)
    staked_alms: ALMS = field(default_factory=ALMS)
    staged_ana: ANA = field(default_factory=ANA)
    staged_nirv: NIRV = field(default_factory=NIRV)
    staged_pre_ana: ANA = field(default_factory=ANA)
    bump: int = 0

    def stake_alms(self, amount: ALMS) -> None:
        self.staked_alms = self.staked_alms + amount

    def unstake_alms(self, amount: ALMS) -> None:
        self.staked_alms = self.staked_alms - amount


@dataclass
class FeeConfig:
    """Fee coefficients charged on the various operations."""

    unstake_fee: CoarseNumber = field(default_factory=CoarseNumber)
    sell_fee: CoarseNumber = field(default_factory=CoarseNumber)
    instant_buy_fee: CoarseNumber = field(default_factory=CoarseNumber)
    trana_buy_fee: CoarseNumber = field(default_factory=CoarseNumber)
    nirv_loan_origination_fee: CoarseNumber = field(default_factory=CoarseNumber)
    nirv_debt_fee: CoarseNumber = field(default_factory=CoarseNumber)
    bump: int = 0


@dataclass
class GlobalHistory:
    """Protocol-wide running totals."""

    volume_usd: int = 0
    net_purchased_ana: ANA = field(default_factory=ANA)
    all_time_high_ana_supply: ANA = field(default_factory=ANA)
    prana_minted: ANA = field(default_factory=ANA)
    total_prana_rewards: ANA = field(default_factory=ANA)
    staged_prana_rewards: ANA = field(default_factory=ANA)
    prana_executed: ANA = field(default_factory=ANA)
    prana_purchased: ANA = field(default_factory=ANA)
    nirv_minted: NIRV = field(default_factory=NIRV)
    nirv_repaid: NIRV = field(default_factory=NIRV)
    bump: int = 0

    def buy_ana(self, round_dollars: int, amount_ana: ANA, current_supply_ana: ANA) -> None:
        """Record a purchase and raise the supply high watermark if reached."""
        self.volume_usd = _u64(self.volume_usd + round_dollars, "volume")
        self.net_purchased_ana = self.net_purchased_ana + amount_ana
        new_supply = current_supply_ana + amount_ana
        self.all_time_high_ana_supply = ANA(
            max(self.all_time_high_ana_supply.val, new_supply.val)
        )

    def sell_ana(self, round_dollars: int, amount_ana: ANA) -> None:
        self.volume_usd = _u64(self.volume_usd + round_dollars, "volume")
        self.net_purchased_ana = self.net_purchased_ana - amount_ana


@dataclass
class History:
    """Aggregated trading history of one user."""

    nirv_center: bytes = bytes(32)
    authority: bytes = bytes(32)
    total_volume_usd: int = 0
    net_spent_usd: int = 0
    total_prana_earned: int = 0
    bootstrap_net_spent_usd: int = 0
    bootstrap_net_ana: ANA = field(default_factory=ANA)
    total_nirv_borrowed: NIRV = field(default_factory=NIRV)
    total_nirv_repaid: NIRV = field(default_factory=NIRV)
    bump: int = 0

    def buy(self, usd_amount: int) -> None:
        self.net_spent_usd = _u64(self.net_spent_usd + usd_amount, "net spend")
        self.total_volume_usd = _u64(self.total_volume_usd + usd_amount, "volume")

    def sell(self, usd_amount: int) -> None:
        self.net_spent_usd = _u64(self.net_spent_usd - usd_amount, "net spend")
        self.total_volume_usd = _u64(self.total_volume_usd + usd_amount, "volume")

    def buy_during_bootstrap(self, usd_amount: int, ana_amount: ANA) -> None:
        self.buy(usd_amount)
        self.bootstrap_net_spent_usd = _u64(
            self.bootstrap_net_spent_usd + usd_amount, "bootstrap spend"
        )
        self.bootstrap_net_ana = self.bootstrap_net_ana + ana_amount

    def sell_during_bootstrap(self, usd_amount: int, ana_amount: ANA) -> None:
        self.sell(usd_amount)
        self.bootstrap_net_spent_usd = _u64(
            self.bootstrap_net_spent_usd - usd_amount, "bootstrap spend"
        )
        self.bootstrap_net_ana = self.bootstrap_net_ana - ana_amount

    def bootstrap_avg_price(self) -> Decimal:
        """Average USD price paid per ANA during the bootstrap."""
        ana_bought = self.bootstrap_net_ana.to_decimal()
        if ana_bought == 0:
            raise ZeroDivisionError("no ANA was bought during the bootstrap")
        return DECIMAL_CONTEXT.divide(Decimal(self.bootstrap_net_spent_usd), ana_bought)


@dataclass
class MoneyMarket:
    """A token accepted by the protocol and how it may be used."""

    nirv_center: bytes = bytes(32)
    for_amm: bool = False
    for_prana: bool = False
    for_trana: bool = False
    enabled: bool = False
    risk_free_value_coefficient: CoarseNumber = field(default_factory=CoarseNumber)
    pyth_oracle_price: bytes = bytes(32)
    pyth_oracle_metadata: bytes = bytes(32)
    mint: bytes = bytes(32)
    decimals: int = 0
    token_account: bytes = bytes(32)
    bump: int = 0

    def rfv_coefficient_into_decimal(self) -> Decimal:
        return self.risk_free_value_coefficient.to_decimal()


@dataclass
class TranaMeta:
    """Settings and totals for vesting ANA bought with one money market."""

    nirv_center: bytes = bytes(32)
    enabled: bool = False
    sensitivity: PreciseNumber = field(default_factory=PreciseNumber)
    max_discount_ratio: PreciseNumber = field(default_factory=PreciseNumber)
    money_market: bytes = bytes(32)
    ana_outstanding: ANA = field(default_factory=ANA)
    total_bought: ArbitraryNumber = field(default_factory=ArbitraryNumber)
    vesting_length_seconds: int = 0

    def sub_ana_outstanding(self, a: ANA) -> None:
        self.ana_outstanding = self.ana_outstanding - a


@dataclass
class UserTranaContract:
    """A user's vesting ANA contract."""

    user: bytes = bytes(32)
    available: bool = False
    trana_meta: bytes = bytes(32)
    amount_ana: ANA = field(default_factory=ANA)
    redeemed_amount: ANA = field(default_factory=ANA)
    price_in_underlying: ArbitraryNumber = field(default_factory=ArbitraryNumber)
    start_time: int = 0
    end_time: int = 0

    def get_left_to_redeem(self, now: int) -> ANA:
        """ANA vested by ``now`` that has not been redeemed yet."""
        if self.available:
            return ANA.ZERO
        amount = self.amount_ana
        if amount == self.redeemed_amount:
            return ANA.ZERO

        progress = abs(now - self.start_time)
        span = abs(self.end_time - self.start_time)
        if span == 0:
            raise ZeroDivisionError("vesting span is zero")
        redeemable = _u64(amount.val * progress, "vested product") // span

        if redeemable + REDEEM_DUST > amount.val:
            redeemable = amount.val
        return ANA(max(redeemable - self.redeemed_amount.val, 0))

    def update_redeemed(self, left_to_redeem: ANA) -> None:
        """Record a redemption, freeing the contract once fully redeemed."""
        self.redeemed_amount = self.redeemed_amount + left_to_redeem
        if self.redeemed_amount == self.amount_ana:
            self.available = True