"""Pre-bootstrap spending commitments and their shared metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from nirvana.numbers import ANA, DECIMAL_CONTEXT, U64_MAX, PreciseNumber

EARLY_BIRD_RATE = PreciseNumber(200_000_000_000)
REGULAR_RATE = PreciseNumber(150_000_000_000)


def _u64(value: int, what: str) -> int:
    if not 0 <= value <= U64_MAX:
        raise OverflowError(f"{what} {value} does not fit in an unsigned 64-bit integer")
    return value


@dataclass
class Commitment:
    """A pre-bootstrap target of USD to spend, earning a reward rate."""

    owner: bytes = bytes(32)
    commitment_meta: bytes = bytes(32)
    reward_index: PreciseNumber = field(default_factory=PreciseNumber)
    target_spend_usd: int = 0
    claimed_and_dead: bool = False
    bump: int = 0

    def update_reward_rate(self, delta: int, new_rate: PreciseNumber) -> None:
        """Blend ``new_rate`` for ``delta`` more dollars into the reward index."""
        if delta == 0:
            return
        ctx = DECIMAL_CONTEXT
        old_spend = Decimal(self.target_spend_usd)
        new_spend = Decimal(delta)
        weighted = ctx.add(
            ctx.multiply(self.reward_index.to_decimal(), old_spend),
            ctx.multiply(new_rate.to_decimal(), new_spend),
        )
        total = ctx.add(old_spend, new_spend)
        self.reward_index = PreciseNumber.from_decimal(ctx.divide(weighted, total))

    def escrow_amount(self) -> int:
        """The escrowed share of the target spend: one percent."""
        return self.target_spend_usd // 100

    def reward_amount(self, bootstrap_avg_price: Decimal) -> ANA:
        """ANA rewarded given the average bootstrap price."""
        price = Decimal(bootstrap_avg_price)
        if price == 0:
            raise ZeroDivisionError("bootstrap average price is zero")
        ctx = DECIMAL_CONTEXT
        bought = ctx.divide(Decimal(self.target_spend_usd), price)
        return ANA.from_decimal(ctx.multiply(bought, self.reward_index.to_decimal()))


@dataclass
class CommitmentMeta:
    """Shared state for the commitment period."""

    nirv_center: bytes = bytes(32)
    usdc_escrow_token_account: bytes = bytes(32)
    escrow_decimals: int = 0
    total_in_round_dollars: int = 0
    start_time: int = 0
    early_bird_end: int = 0
    end: int = 0
    bump: int = 0

    def add(self, amount: int) -> None:
        self.total_in_round_dollars = _u64(self.total_in_round_dollars + amount, "total")

    def sub(self, amount: int) -> None:
        self.total_in_round_dollars = _u64(self.total_in_round_dollars - amount, "total")

    def usdc_denominator(self) -> int:
        return _u64(10**self.escrow_decimals, "denominator")

    def get_rate(self, now: int) -> PreciseNumber:
        """Reward rate for a commitment made at ``now``."""
        if now < self.early_bird_end:
            return EARLY_BIRD_RATE
        if now < self.end:
            return REGULAR_RATE
        return PreciseNumber.ZERO