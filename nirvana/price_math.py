"""Pricing along a price curve, scaled by a risk-free-value factor."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import ROUND_DOWN, ROUND_UP, Context, Decimal

from nirvana.numbers import ANA, DECIMAL_CONTEXT, CoarseNumber

PRICE_DECIMALS = 12

_WIDE = Context(prec=120)


class PriceCalculator(ABC):
    """A price curve over the ANA supply."""

    @abstractmethod
    def liquidity(self, supply: ANA) -> int:
        """Total liquidity in the pool for the given supply."""

    @abstractmethod
    def price_for_supply(self, supply: ANA) -> Decimal:
        """Price at the given supply point, in risk-free value."""

    @abstractmethod
    def at_floor(self, supply: ANA) -> bool:
        """Whether the given supply sits at the floor price."""

    @abstractmethod
    def reset_slippage_start_point_if_needed(self, supply: ANA) -> bool:
        """Move the slippage start to ``supply`` if at the floor; True if moved."""

    @abstractmethod
    def increase_supply_with_no_price_impact(self, token_amount: ANA) -> None:
        """Shift the curve forward by ``token_amount``."""

    @abstractmethod
    def decrease_supply_with_no_price_impact(self, token_amount: ANA) -> None:
        """Shift the curve back by ``token_amount``."""


def _round_dp(value: Decimal, dp: int, is_buy: bool) -> Decimal:
    """Round to ``dp`` places: away from zero for buys, toward zero for sells."""
    exponent = value.as_tuple().exponent
    if isinstance(exponent, int) and exponent >= -dp:
        return value
    rounding = ROUND_UP if is_buy else ROUND_DOWN
    return value.quantize(Decimal(1).scaleb(-dp), rounding=rounding, context=_WIDE)


def calc_total_cost_for_amount(
    current_supply: ANA,
    amount: ANA,
    money_risk_free_value_factor: CoarseNumber,
    price_field: PriceCalculator,
    is_buy: bool,
    bootstrap_offset: Decimal,
) -> Decimal:
    """Total cost of buying or selling ``amount`` from ``current_supply``."""
    target_supply = current_supply + amount if is_buy else current_supply - amount
    price = calc_price(target_supply, money_risk_free_value_factor, price_field, is_buy)
    total = DECIMAL_CONTEXT.multiply(
        DECIMAL_CONTEXT.add(price, bootstrap_offset), amount.to_decimal()
    )
    return _round_dp(total, PRICE_DECIMALS, is_buy)


def calc_price(
    target_supply: ANA,
    money_risk_free_value_factor: CoarseNumber,
    price_field: PriceCalculator,
    is_buy: bool,
) -> Decimal:
    """Price at ``target_supply`` scaled by the risk-free-value factor."""
    price = price_field.price_for_supply(target_supply)
    scaled = DECIMAL_CONTEXT.multiply(price, money_risk_free_value_factor.to_decimal())
    return _round_dp(scaled, PRICE_DECIMALS, is_buy)