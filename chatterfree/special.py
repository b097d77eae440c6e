"""Principal branch of the Lambert W function."""

from __future__ import annotations

import math

from scipy.special import lambertw

BRANCH_POINT = -1.0 / math.e
BRANCH_TOL = 1e-12


class SpecialFunctionDomainError(ValueError):
    pass


def lambert_w0(x: float) -> float:
    """W0(x), the real solution w >= -1 of w * exp(w) = x.

    Defined for x >= -1/e. The branch point itself, and arguments below it by
    less than `BRANCH_TOL` (round-off), return -1.
    """
    x = float(x)
    if math.isnan(x):
        raise SpecialFunctionDomainError("Lambert W0 argument is NaN.")
    if x <= BRANCH_POINT:
        if BRANCH_POINT - x > BRANCH_TOL:
            raise SpecialFunctionDomainError(f"Lambert W0 argument {x!r} is below -1/e.")
        return -1.0
    w = lambertw(x, 0)
    if not (math.isfinite(w.real) and w.imag == 0.0):
        raise SpecialFunctionDomainError(f"Lambert W0 is not real-valued at {x!r}: {w!r}")
    return float(w.real)
