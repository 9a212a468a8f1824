"""Integer fixed-point arithmetic for LMSR pricing.

All values are unsigned integers scaled by PRECISION (1.0 == 1_000_000_000).
No float, no Decimal. Products and quotients are computed in a 128-bit
intermediate domain and narrowed back to 64 bits, so every operation is
bit-reproducible and fails loudly instead of wrapping.
"""

from src.pm_common.errors import (
    ArithmeticOverflowError,
    ArithmeticUnderflowError,
    DivisionByZeroError,
)

PRECISION = 1_000_000_000
U64_MAX = 2**64 - 1
U128_MAX = 2**128 - 1


def _narrow(value: int, op: str) -> int:
    if value > U64_MAX:
        raise ArithmeticOverflowError(f"in {op}: {value} exceeds u64")
    return value


def mul(a: int, b: int) -> int:
    """Fixed-point multiply: a * b / PRECISION, floored."""
    product = a * b
    if product > U128_MAX:
        raise ArithmeticOverflowError(f"in mul: {a} * {b}")
    return _narrow(product // PRECISION, "mul")


def div(a: int, b: int) -> int:
    """Fixed-point divide: a * PRECISION / b, floored."""
    if b == 0:
        raise DivisionByZeroError()
    scaled = a * PRECISION
    if scaled > U128_MAX:
        raise ArithmeticOverflowError(f"in div: {a} * PRECISION")
    return _narrow(scaled // b, "div")


def checked_add(a: int, b: int) -> int:
    return _narrow(a + b, "add")


def checked_sub(a: int, b: int) -> int:
    if b > a:
        raise ArithmeticUnderflowError(f"in sub: {a} - {b}")
    return a - b


def mul_div(a: int, b: int, c: int) -> int:
    """a * b / c with a 128-bit intermediate, floored. Used for pro-rata splits."""
    if c == 0:
        raise DivisionByZeroError()
    product = a * b
    if product > U128_MAX:
        raise ArithmeticOverflowError(f"in mul_div: {a} * {b}")
    return _narrow(product // c, "mul_div")


def from_int(n: int) -> int:
    """Whole number -> fixed-point."""
    return _narrow(n * PRECISION, "from_int")


def to_display(value: int, places: int = 4) -> str:
    """Fixed-point -> display string: 1_500_000_000 -> '1.5000', -250_000_000 -> '-0.2500'."""
    sign = "-" if value < 0 else ""
    abs_value = -value if value < 0 else value
    whole, frac = divmod(abs_value, PRECISION)
    frac_digits = f"{frac:09d}"[:places]
    if places == 0:
        return f"{sign}{whole:,}"
    return f"{sign}{whole:,}.{frac_digits}"
