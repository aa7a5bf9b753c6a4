"""Per-user ANA staking, prANA reward accrual and NIRV borrowing."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Context, Decimal

from nirvana.center_config import NirvCenterConfigV3
from nirvana.numbers import ALMS, ANA, DECIMAL_CONTEXT, NIRV, PreciseNumber
from nirvana.price_field import PriceFieldV2

_WIDE = Context(prec=120)
_ZERO = Decimal(0)


class RewardError(Exception):
    """A staking or borrowing operation was refused."""


class InsufficientStakedANAToBackBorrowedNIRV(RewardError):
    """Unstaking would leave the borrowed NIRV without enough collateral."""


class InsufficientStakedANAToBorrowNIRV(RewardError):
    """Not enough ANA is staked to borrow the requested NIRV."""


class BorrowedAmountLargerThanLimit(RewardError):
    """The borrowed NIRV already exceeds the borrow limit."""


class InvalidBorrowUtilization(RewardError):
    """The borrow utilization could not be computed."""


class RepayNIRVMoreThanBorrowed(RewardError):
    """The repayment is larger than the outstanding NIRV debt."""


def _truncate(value: Decimal, dp: int) -> Decimal:
    """Round toward zero to ``dp`` places, leaving shorter values alone."""
    exponent = value.as_tuple().exponent
    if isinstance(exponent, int) and exponent >= -dp:
        return value
    return value.quantize(Decimal(1).scaleb(-dp), rounding=ROUND_DOWN, context=_WIDE)


@dataclass
class UserReward:
    """A user's staked ANA, borrowed NIRV and accrued prANA rewards."""

    index: PreciseNumber = field(default_factory=PreciseNumber)
    owner: bytes = bytes(32)
    staked_amount: ANA = field(default_factory=ANA)
    borrowed_nirv: NIRV = field(default_factory=NIRV)
    staged_pre_ana_rewards: ANA = field(default_factory=ANA)
    staged_pre_ana_fees: ANA = field(default_factory=ANA)

    def calc_rewards_before_fees(self, central_reward_index: PreciseNumber) -> ANA:
        """Rewards accrued since the user's index, before any debt fee."""
        index_delta = central_reward_index - self.index
        share = DECIMAL_CONTEXT.multiply(
            self.staked_amount.to_decimal(), index_delta.to_decimal()
        )
        return ANA.from_decimal(_truncate(share, ANA.SCALE))

    def calc_rewards_and_fees(
        self, config: NirvCenterConfigV3, price_field: PriceFieldV2
    ) -> tuple[ANA, ANA]:
        """New rewards split into ``(rewards less fees, fees)``."""
        borrow_utilization = self.get_nirv_borrow_utilization(price_field)
        total_rewards = self.calc_rewards_before_fees(config.reward_index)
        return config.calc_nirv_debt_fee(total_rewards, borrow_utilization)

    def claim_prana_rewards(
        self,
        config: NirvCenterConfigV3,
        price_field: PriceFieldV2,
        total_alms_staked: ALMS,
    ) -> tuple[ANA, ANA]:
        """Claim staged and new rewards; returns ``(rewards, fees)``."""
        new_rewards, new_fees = self.calc_rewards_and_fees(config, price_field)
        total_rewards = new_rewards + self.staged_pre_ana_rewards
        total_fees = new_fees + self.staged_pre_ana_fees

        config.collect_prana_fee(total_fees, total_alms_staked)
        self.reset_rewards(config.reward_index)
        return total_rewards, total_fees

    def stage_rewards(self, config: NirvCenterConfigV3, price_field: PriceFieldV2) -> None:
        """Move rewards accrued since the user's index into the staged totals."""
        central_reward_index = config.reward_index
        new_rewards, new_fees = self.calc_rewards_and_fees(config, price_field)
        self.staged_pre_ana_rewards = self.staged_pre_ana_rewards + new_rewards
        self.staged_pre_ana_fees = self.staged_pre_ana_fees + new_fees
        self.index = central_reward_index

    def stake_ana(
        self, amount: ANA, config: NirvCenterConfigV3, price_field: PriceFieldV2
    ) -> None:
        """Stage pending rewards, then add ``amount`` to the stake."""
        self.stage_rewards(config, price_field)
        self.staked_amount = self.staked_amount + amount

    def unstake_ana(
        self,
        amount: ANA,
        config: NirvCenterConfigV3,
        price_field: PriceFieldV2,
        total_alms_staked: ALMS,
    ) -> tuple[ANA, ANA]:
        """Withdraw ``amount`` from the stake; returns ``(amount less fee, fee)``."""
        self.stage_rewards(config, price_field)

        remaining = self.staked_amount - amount
        limit = self._borrow_limit_for(remaining, price_field)
        if self.borrowed_nirv.to_decimal() > limit:
            raise InsufficientStakedANAToBackBorrowedNIRV(
                "remaining staked ANA cannot back the borrowed NIRV"
            )
        self.staked_amount = remaining
        return config.collect_ana_unstake_fee(amount, total_alms_staked)

    @staticmethod
    def _borrow_limit_for(staked: ANA, price_field: PriceFieldV2) -> Decimal:
        value = DECIMAL_CONTEXT.multiply(staked.to_decimal(), price_field.floor_price.to_decimal())
        return value.quantize(Decimal(1).scaleb(-NIRV.SCALE), rounding=ROUND_DOWN, context=_WIDE)

    def get_nirv_borrow_limit(self, price_field: PriceFieldV2) -> Decimal:
        """The most NIRV that may be borrowed: staked ANA at the floor price."""
        return self._borrow_limit_for(self.staked_amount, price_field)

    def get_nirv_borrow_utilization(self, price_field: PriceFieldV2) -> Decimal:
        """Borrowed NIRV as a fraction of the borrow limit."""
        borrowed = self.borrowed_nirv.to_decimal()
        if borrowed == 0:
            return _ZERO

        limit = self.get_nirv_borrow_limit(price_field)
        if borrowed > limit:
            raise BorrowedAmountLargerThanLimit("borrowed NIRV exceeds the borrow limit")
        if limit == 0:
            raise InvalidBorrowUtilization("borrow limit is zero")
        return DECIMAL_CONTEXT.divide(borrowed, limit)

    def borrow_nirv(self, amount: NIRV, price_field: PriceFieldV2) -> None:
        """Add ``amount`` to the NIRV debt if the stake can back it."""
        borrowed = self.borrowed_nirv + amount
        if borrowed.to_decimal() > self.get_nirv_borrow_limit(price_field):
            raise InsufficientStakedANAToBorrowNIRV("not enough staked ANA to borrow NIRV")
        self.borrowed_nirv = borrowed

    def repay_nirv(self, amount: NIRV) -> None:
        """Reduce the NIRV debt by ``amount``."""
        if amount.to_decimal() > self.borrowed_nirv.to_decimal():
            raise RepayNIRVMoreThanBorrowed("repayment exceeds the borrowed NIRV")
        self.borrowed_nirv = self.borrowed_nirv - amount

    def reset_rewards(self, central_reward_index: PreciseNumber) -> None:
        """Move the user's index to ``central_reward_index`` and clear staged totals."""
        self.index = central_reward_index
        self.staged_pre_ana_rewards = ANA.ZERO
        self.staged_pre_ana_fees = ANA.ZERO


@dataclass
class UserRewardV2(UserReward):
    """The same staking record, with a stored bump seed."""

    bump: int = 0