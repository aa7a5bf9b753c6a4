"""Protocol configuration: fee indexes, bootstrap window and reward drops."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Context, Decimal

from nirvana.numbers import (
    ALMS,
    ANA,
    DECIMAL_CONTEXT,
    NIRV,
    U64_MAX,
    CoarseNumber,
    PreciseNumber,
    TokenAmount,
)

SECONDS_IN_DAY = 24 * 60 * 60

_log = logging.getLogger(__name__)
_WIDE = Context(prec=120)


def _round_down(value: Decimal, dp: int) -> Decimal:
    """Round toward zero to ``dp`` places, leaving shorter values alone."""
    exponent = value.as_tuple().exponent
    if isinstance(exponent, int) and exponent >= -dp:
        return value
    return value.quantize(Decimal(1).scaleb(-dp), rounding=ROUND_DOWN, context=_WIDE)


def _index_increase(fee_amount: TokenAmount, total_alms_staked: ALMS) -> PreciseNumber:
    """Fee per staked ALMS, truncated to the index precision."""
    per_alms = DECIMAL_CONTEXT.divide(fee_amount.to_decimal(), total_alms_staked.to_decimal())
    return PreciseNumber.from_decimal(_round_down(per_alms, PreciseNumber.SCALE))


def _split_fee(amount: TokenAmount, rate: Decimal) -> tuple[Decimal, Decimal]:
    """Return ``(amount less fee, fee)`` with the fee truncated to token precision."""
    value = amount.to_decimal()
    fee = _round_down(DECIMAL_CONTEXT.multiply(value, rate), amount.SCALE)
    return DECIMAL_CONTEXT.subtract(value, fee), fee


@dataclass
class _CenterConfigBase:
    """Fields and private helpers shared by every configuration revision."""

    mint_ana: bytes = bytes(32)
    mint_pre_ana: bytes = bytes(32)
    mint_nirv: bytes = bytes(32)
    mint_alms: bytes = bytes(32)
    treasury_ana: bytes = bytes(32)
    ana_fee_account: bytes = bytes(32)
    prana_fee_account: bytes = bytes(32)
    nirv_fee_account: bytes = bytes(32)
    nirv_fee_index: PreciseNumber = field(default_factory=PreciseNumber)
    ana_fee_index: PreciseNumber = field(default_factory=PreciseNumber)
    prana_fee_index: PreciseNumber = field(default_factory=PreciseNumber)
    reward_index: PreciseNumber = field(default_factory=PreciseNumber)
    stake_pool_ana: bytes = bytes(32)
    stake_pool_alms: bytes = bytes(32)
    prana_reward_interval_seconds: int = 0
    bs_start_offset: PreciseNumber = field(default_factory=PreciseNumber)
    bs_duration_seconds: int = 0
    bs_start_time_seconds: int = 0
    current_ana_price_usd: PreciseNumber = field(default_factory=PreciseNumber)
    unstake_fee: CoarseNumber = field(default_factory=CoarseNumber)
    sell_fee: CoarseNumber = field(default_factory=CoarseNumber)
    instant_buy_fee: CoarseNumber = field(default_factory=CoarseNumber)
    trana_buy_fee: CoarseNumber = field(default_factory=CoarseNumber)
    nirv_loan_origination_fee: CoarseNumber = field(default_factory=CoarseNumber)
    nirv_debt_fee: CoarseNumber = field(default_factory=CoarseNumber)
    max_prana_per_hour: int = 0
    max_nirv_loan_ratio: CoarseNumber = field(default_factory=CoarseNumber)
    price_curve: bytes = bytes(32)
    bump: int = 0

    def _collect_ana_at_rate(
        self, amount: ANA, rate: CoarseNumber, total_alms_staked: ALMS
    ) -> tuple[ANA, ANA]:
        less, fee = _split_fee(amount, rate.to_decimal())
        fee_amount = ANA.from_decimal(fee)
        self.collect_ana_fee(fee_amount, total_alms_staked)  # type: ignore[attr-defined]
        return ANA.from_decimal(less), fee_amount

    def _drop_reward(
        self,
        rate: PreciseNumber,
        ana_supply: ANA,
        total_ana_staked: ANA,
        reward_interval_seconds: int,
    ) -> None:
        ctx = DECIMAL_CONTEXT
        interval_ratio = ctx.divide(Decimal(reward_interval_seconds), Decimal(SECONDS_IN_DAY))
        reward = ctx.multiply(ctx.multiply(rate.to_decimal(), interval_ratio), ana_supply.to_decimal())
        dropped = ANA.from_decimal(_round_down(reward, ANA.SCALE))
        _log.debug("Dropped amount: %d", dropped.val)

        if total_ana_staked.val == 0:
            return

        per_ana = ctx.divide(dropped.to_decimal(), total_ana_staked.to_decimal())
        delta = _round_down(per_ana, PreciseNumber.SCALE)
        _log.debug("Reward index delta: %s", delta)
        self.reward_index = self.reward_index + PreciseNumber.from_decimal(delta)


@dataclass
class NirvCenterConfig(_CenterConfigBase):
    """Protocol configuration, first revision."""

    reward_rate: PreciseNumber = field(default_factory=PreciseNumber)
    time_of_last_reward: int = 0

    def start_bootstrap(self, now: int, duration: int, price_offset: PreciseNumber) -> None:
        """Open the bootstrap window at ``now`` for ``duration`` seconds."""
        self.bs_start_time_seconds = now
        self.bs_duration_seconds = duration
        self.bs_start_offset = price_offset

    def bs_end_time_seconds(self) -> int:
        end = self.bs_duration_seconds + self.bs_start_time_seconds
        if end > U64_MAX:
            raise OverflowError(f"bootstrap end time {end} overflows")
        return end

    def bootstrapping_ended(self, now: int) -> bool:
        return now > self.bs_end_time_seconds()

    def is_bootstrapping(self, now: int) -> bool:
        return self.bs_start_time_seconds < now < self.bs_end_time_seconds()

    def collect_ana_fee(self, fee_amount: ANA, total_alms_staked: ALMS) -> None:
        """Spread an ANA fee over the staked ALMS."""
        if total_alms_staked == ALMS.ZERO:
            return
        self.ana_fee_index = self.ana_fee_index + _index_increase(fee_amount, total_alms_staked)

    def collect_ana_swap_fee(
        self, is_buy: bool, swap_amount: ANA, total_alms_staked: ALMS
    ) -> tuple[ANA, ANA]:
        """Charge the buy or sell fee; returns ``(amount less fee, fee)``."""
        rate = self.instant_buy_fee if is_buy else self.sell_fee
        return self._collect_ana_at_rate(swap_amount, rate, total_alms_staked)

    def collect_trana_buy_fee(
        self, buy_amount: ANA, total_alms_staked: ALMS
    ) -> tuple[ANA, ANA]:
        """Charge the trANA buy fee; returns ``(amount less fee, fee)``."""
        return self._collect_ana_at_rate(buy_amount, self.trana_buy_fee, total_alms_staked)

    def collect_ana_unstake_fee(
        self, unstake_amount: ANA, total_alms_staked: ALMS
    ) -> tuple[ANA, ANA]:
        """Charge the unstake fee; returns ``(amount less fee, fee)``."""
        return self._collect_ana_at_rate(unstake_amount, self.unstake_fee, total_alms_staked)

    def collect_nirv_fee(self, fee_amount: NIRV, total_alms_staked: ALMS) -> None:
        """Spread a NIRV fee over the staked ALMS."""
        if total_alms_staked == ALMS.ZERO:
            return
        self.nirv_fee_index = self.nirv_fee_index + _index_increase(fee_amount, total_alms_staked)

    def collect_nirv_origination_fee(
        self, requested_amount: NIRV, total_alms_staked: ALMS
    ) -> tuple[NIRV, NIRV]:
        """Charge the loan origination fee; returns ``(amount less fee, fee)``."""
        less, fee = _split_fee(requested_amount, self.nirv_loan_origination_fee.to_decimal())
        fee_amount = NIRV.from_decimal(fee)
        self.collect_nirv_fee(fee_amount, total_alms_staked)
        return NIRV.from_decimal(less), fee_amount

    def drop_prana_reward(
        self, ana_supply: ANA, total_ana_staked: ANA, reward_interval_seconds: int
    ) -> None:
        """Mint a prANA reward for the interval and raise the reward index."""
        self._drop_reward(self.reward_rate, ana_supply, total_ana_staked, reward_interval_seconds)


@dataclass
class NirvCenterConfigV3(_CenterConfigBase):
    """Protocol configuration with prANA fee collection and NIRV debt fees."""

    prana_reward_rate: PreciseNumber = field(default_factory=PreciseNumber)
    time_of_last_prana_reward: int = 0

    start_bootstrap = NirvCenterConfig.start_bootstrap
    bs_end_time_seconds = NirvCenterConfig.bs_end_time_seconds
    bootstrapping_ended = NirvCenterConfig.bootstrapping_ended
    is_bootstrapping = NirvCenterConfig.is_bootstrapping
    collect_ana_fee = NirvCenterConfig.collect_ana_fee
    collect_ana_swap_fee = NirvCenterConfig.collect_ana_swap_fee
    collect_trana_buy_fee = NirvCenterConfig.collect_trana_buy_fee
    collect_ana_unstake_fee = NirvCenterConfig.collect_ana_unstake_fee
    collect_nirv_fee = NirvCenterConfig.collect_nirv_fee
    collect_nirv_origination_fee = NirvCenterConfig.collect_nirv_origination_fee

    def collect_prana_fee(self, fee_amount: ANA, total_alms_staked: ALMS) -> None:
        """Spread a prANA fee over the staked ALMS."""
        if total_alms_staked == ALMS.ZERO:
            return
        self.prana_fee_index = self.prana_fee_index + _index_increase(
            fee_amount, total_alms_staked
        )

    def calc_nirv_debt_fee(
        self, total_reward: ANA, borrow_utilization: Decimal
    ) -> tuple[ANA, ANA]:
        """Fee on prANA rewards, scaled by borrow utilization.

        Returns ``(reward less fee, fee)``.
        """
        ctx = DECIMAL_CONTEXT
        reward = total_reward.to_decimal()
        fee = ctx.multiply(
            ctx.multiply(reward, self.nirv_debt_fee.to_decimal()), Decimal(borrow_utilization)
        )
        fee = _round_down(fee, ANA.SCALE)
        return ANA.from_decimal(ctx.subtract(reward, fee)), ANA.from_decimal(fee)

    def drop_prana_reward(
        self, ana_supply: ANA, total_ana_staked: ANA, reward_interval_seconds: int
    ) -> None:
        """Mint a prANA reward for the interval and raise the reward index."""
        self._drop_reward(
            self.prana_reward_rate, ana_supply, total_ana_staked, reward_interval_seconds
        )