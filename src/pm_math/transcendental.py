"""Fixed-point exp / ln / log-sum-exp approximations.

exp:  Padé(2,2) rational form on x / 2^k in [0, 0.5], squared k times;
      domain [0, MAX_EXP].
ln:   range reduction into [0.5, 2.0] by halving/doubling, then
      ln(x) = 2 * (y + y^3/3 + y^5/5), y = (x - 1) / (x + 1), plus k * ln(2).
lse:  ln(e^x + e^y) = max(x, y) + ln(1 + e^-|x - y|).

ln returns a signed fixed-point value; everything else is unsigned.
"""

from src.pm_common.errors import (
    ExponentTooLargeError,
    InvalidLogarithmError,
)
from src.pm_math.fixed_point import PRECISION, checked_add, div, mul

LN_2 = 693_147_180
MAX_EXP = 20 * PRECISION

_TWO = 2 * PRECISION
_HALF = PRECISION // 2


def _pade(x: int) -> int:
    x2_12 = mul(x, x) // 12
    half = x // 2
    num = PRECISION + half + x2_12
    # 1 - x/2 + x^2/12 has no real roots, so the denominator stays positive
    den = PRECISION + x2_12 - half
    return div(num, den)


def exp(x: int) -> int:
    """e^x for 0 <= x <= MAX_EXP.

    The rational form is only increasing below sqrt(12), so x is halved k
    times into [0, 0.5] and the result squared k times: e^x = (e^(x/2^k))^(2^k).
    """
    if x < 0 or x > MAX_EXP:
        raise ExponentTooLargeError(x)
    reduced = x
    k = 0
    while reduced > _HALF:
        reduced //= 2
        k += 1
    result = _pade(reduced)
    for _ in range(k):
        result = mul(result, result)
    return result


def exp_neg(x: int) -> int:
    """e^-x = 1 / e^x."""
    return div(PRECISION, exp(x))


def _series(y: int) -> int:
    y2 = mul(y, y)
    y3 = mul(y2, y)
    y5 = mul(y3, y2)
    return 2 * (y + y3 // 3 + y5 // 5)


def ln(x: int) -> int:
    """Natural log of a positive fixed-point value. Negative for x < 1.0."""
    if x <= 0:
        raise InvalidLogarithmError(x)
    if x == PRECISION:
        return 0

    reduced = x
    k = 0
    while reduced > _TWO:
        reduced //= 2
        k += 1
    while reduced < _HALF:
        reduced *= 2
        k -= 1

    if reduced >= PRECISION:
        series = _series(div(reduced - PRECISION, reduced + PRECISION))
    else:
        series = -_series(div(PRECISION - reduced, PRECISION + reduced))
    return series + k * LN_2


def log_sum_exp(x: int, y: int) -> int:
    """ln(e^x + e^y) without ever evaluating e^max(x, y)."""
    if x >= y:
        hi, diff = x, x - y
    else:
        hi, diff = y, y - x
    # argument lies in (1, 2], so the log term is never negative
    return checked_add(hi, ln(PRECISION + exp_neg(diff)))
