"""Fixed-point token amounts, ratios and fee coefficients."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Context, Decimal
from typing import ClassVar

U64_MAX = 2**64 - 1
I64_MAX = 2**63 - 1
MAX_DECIMAL_SCALE = 28

DECIMAL_CONTEXT = Context(prec=28, rounding=ROUND_HALF_EVEN)
"""Context used for all decimal arithmetic on amounts and prices."""

_EXACT = Context(prec=120, rounding=ROUND_HALF_UP)


def _check_u64(value: int, what: str = "value") -> int:
    if not 0 <= value <= U64_MAX:
        raise OverflowError(f"{what} {value} does not fit in an unsigned 64-bit integer")
    return value


def _checked_mul(a: int, b: int) -> int:
    return _check_u64(a * b, "product")


def _mantissa_at_scale(d: Decimal | int | str, scale: int) -> int:
    """Rescale ``d`` to ``scale`` decimal places and return the integer mantissa."""
    d = Decimal(d)
    if not d.is_finite():
        raise ValueError(f"cannot represent {d} as a fixed-point amount")
    scaled = _EXACT.scaleb(d, scale).to_integral_value(rounding=ROUND_HALF_UP, context=_EXACT)
    return _check_u64(int(scaled), "mantissa")


def _to_decimal(val: int, scale: int) -> Decimal:
    if val > I64_MAX:
        raise OverflowError(f"value {val} does not fit in a signed 64-bit integer")
    if scale > MAX_DECIMAL_SCALE:
        raise ValueError(f"scale {scale} exceeds the maximum of {MAX_DECIMAL_SCALE}")
    return _EXACT.scaleb(Decimal(val), -scale)


@dataclass(frozen=True)
class ArbitraryNumber:
    """An unsigned fixed-point number carrying its own scale."""

    val: int = 0
    scale: int = 0

    def __post_init__(self) -> None:
        _check_u64(self.val)
        if not 0 <= self.scale <= 255:
            raise OverflowError(f"scale {self.scale} does not fit in an unsigned 8-bit integer")

    @classmethod
    def from_decimal(cls, d: Decimal, scale: int) -> ArbitraryNumber:
        return cls(_mantissa_at_scale(d, scale), scale)

    def to_decimal(self) -> Decimal:
        return _to_decimal(self.val, self.scale)


@dataclass(frozen=True)
class PreciseNumber:
    """An unsigned fixed-point ratio with twelve decimal places."""

    SCALE: ClassVar[int] = 12
    DENOMINATOR: ClassVar[int] = 10**12
    ZERO: ClassVar[PreciseNumber]

    val: int = 0

    def __post_init__(self) -> None:
        _check_u64(self.val)

    @classmethod
    def from_decimal(cls, d: Decimal) -> PreciseNumber:
        return cls(_mantissa_at_scale(d, cls.SCALE))

    @classmethod
    def whole(cls, n: int) -> PreciseNumber:
        """The number ``n`` expressed with twelve decimal places."""
        return cls(_checked_mul(n, cls.DENOMINATOR))

    def to_decimal(self) -> Decimal:
        return _to_decimal(self.val, self.SCALE)

    def __add__(self, other: PreciseNumber) -> PreciseNumber:
        if type(other) is not PreciseNumber:
            return NotImplemented
        return PreciseNumber(_check_u64(self.val + other.val, "sum"))

    def __sub__(self, other: PreciseNumber) -> PreciseNumber:
        if type(other) is not PreciseNumber:
            return NotImplemented
        return PreciseNumber(_check_u64(self.val - other.val, "difference"))

    def __int__(self) -> int:
        return self.val


PreciseNumber.ZERO = PreciseNumber(0)


@dataclass(frozen=True)
class CoarseNumber:
    """An unsigned fixed-point coefficient with six decimal places."""

    SCALE: ClassVar[int] = 6
    DENOMINATOR: ClassVar[int] = 10**6

    val: int = 0

    def __post_init__(self) -> None:
        _check_u64(self.val)

    def to_decimal(self) -> Decimal:
        return _to_decimal(self.val, self.SCALE)

    def __mul__(self, rhs: int) -> CoarseNumber:
        if isinstance(rhs, bool) or not isinstance(rhs, int):
            return NotImplemented
        _check_u64(rhs)
        return CoarseNumber(_checked_mul(self.val, rhs) // self.DENOMINATOR)

    def __add__(self, other: CoarseNumber) -> CoarseNumber:
        if type(other) is not CoarseNumber:
            return NotImplemented
        return CoarseNumber(_check_u64(self.val + other.val, "sum"))


@dataclass(frozen=True)
class TokenAmount:
    """An unsigned token amount with six decimal places."""

    SCALE: ClassVar[int] = 6
    DENOM: ClassVar[int] = 10**6
    ZERO: ClassVar[TokenAmount]
    ONE: ClassVar[TokenAmount]

    val: int = 0

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        cls.ZERO = cls(0)
        cls.ONE = cls(cls.DENOM)

    def __post_init__(self) -> None:
        _check_u64(self.val)

    @classmethod
    def from_decimal(cls, d: Decimal):
        return cls(_mantissa_at_scale(d, cls.SCALE))

    @classmethod
    def whole(cls, n: int):
        """The amount of ``n`` whole tokens."""
        return cls(_checked_mul(n, cls.DENOM))

    def to_decimal(self) -> Decimal:
        return _to_decimal(self.val, self.SCALE)

    def __add__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return type(self)(_check_u64(self.val + other.val, "sum"))

    def __sub__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return type(self)(_check_u64(self.val - other.val, "difference"))

    def __int__(self) -> int:
        return self.val


class ANA(TokenAmount):
    """An amount of ANA."""

    def __mul__(self, rhs: CoarseNumber | PreciseNumber) -> ANA:
        if isinstance(rhs, CoarseNumber):
            denominator = CoarseNumber.DENOMINATOR
        elif isinstance(rhs, PreciseNumber):
            denominator = PreciseNumber.DENOMINATOR
        else:
            return NotImplemented
        return ANA(_checked_mul(self.val, rhs.val) // denominator)

    def __truediv__(self, rhs: PreciseNumber) -> ANA:
        if not isinstance(rhs, PreciseNumber):
            return NotImplemented
        if rhs.val == 0:
            raise ZeroDivisionError("division by a zero PreciseNumber")
        return ANA.whole(_checked_mul(self.val, PreciseNumber.DENOMINATOR) // rhs.val)


class NIRV(TokenAmount):
    """An amount of NIRV."""


class ALMS(TokenAmount):
    """An amount of ALMS."""