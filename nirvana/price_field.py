"""Three-segment price curves: a flat floor, a ramp, then a main slope."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_UP, Context, Decimal

from nirvana.numbers import ANA, DECIMAL_CONTEXT, PreciseNumber
from nirvana.price_math import PriceCalculator

_RAMP_PRICE_DECIMALS = 12
_WIDE = Context(prec=120)


def _round_up(value: Decimal, dp: int) -> Decimal:
    """Round away from zero to ``dp`` places, leaving shorter values alone."""
    exponent = value.as_tuple().exponent
    if isinstance(exponent, int) and exponent >= -dp:
        return value
    return value.quantize(Decimal(1).scaleb(-dp), rounding=ROUND_UP, context=_WIDE)


@dataclass
class PriceFieldV1(PriceCalculator):
    """A price curve in three segments.

    Below ``ramp_start`` the price is the flat floor; over the next
    ``ramp_width`` tokens it rises linearly by ``ramp_height``; beyond the
    ramp it rises with ``main_slope``.
    """

    ramp_width: ANA = field(default_factory=ANA)
    ramp_height: PreciseNumber = field(default_factory=PreciseNumber)
    ramp_start: ANA = field(default_factory=ANA)
    main_slope: PreciseNumber = field(default_factory=PreciseNumber)
    floor_price: PreciseNumber = field(default_factory=PreciseNumber)
    nirv_center: bytes = bytes(32)

    def increase_supply_with_no_price_impact(self, token_amount: ANA) -> None:
        self.ramp_start = self.ramp_start + token_amount

    def decrease_supply_with_no_price_impact(self, token_amount: ANA) -> None:
        self.ramp_start = self.ramp_start - token_amount

    def liquidity(self, supply: ANA) -> int:
        return 0

    def reset_slippage_start_point_if_needed(self, supply: ANA) -> bool:
        if self.at_floor(supply):
            self.ramp_start = supply
            return True
        return False

    def at_floor(self, supply: ANA) -> bool:
        return self.price_for_supply(supply) == self.floor_price.to_decimal()

    def price_for_supply(self, supply: ANA) -> Decimal:
        floor = self.floor_price.to_decimal()
        if supply.val < self.ramp_start.val:
            return floor

        offset = (supply - self.ramp_start).to_decimal()
        ramp_width = self.ramp_width.to_decimal()
        ramp_height = self.ramp_height.to_decimal()

        if offset <= ramp_width and ramp_width > 0:
            ramp_slope = DECIMAL_CONTEXT.divide(ramp_height, ramp_width)
            price = DECIMAL_CONTEXT.add(DECIMAL_CONTEXT.multiply(offset, ramp_slope), floor)
            return _round_up(price, _RAMP_PRICE_DECIMALS)

        vert_offset = DECIMAL_CONTEXT.add(floor, ramp_height)
        offset_after_ramp_end = DECIMAL_CONTEXT.subtract(offset, ramp_width)
        return DECIMAL_CONTEXT.add(
            DECIMAL_CONTEXT.multiply(offset_after_ramp_end, self.main_slope.to_decimal()),
            vert_offset,
        )


@dataclass
class PriceFieldV2(PriceFieldV1):
    """The same curve as :class:`PriceFieldV1`, with a stored bump seed."""

    bump: int = 0