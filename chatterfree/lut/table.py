"""Look-up table (LUT) for fast evaluation of expensive scalar functions.

On `create`, `f` is evaluated at `x_i = min + i * step` for
`i = 0 .. floor((max - min) / step)`. Queries inside `[min, max]` are answered by
linear interpolation between neighbouring samples. `f(min)` is always stored,
`f(max)` only when `max` is reached by a whole number of steps; queries past the
last sample return the last sample value.

Outside `[min, max]` the table behaves as configured by `OutOfBounds`:
- FAIL: raise `OutOfDomainError`
- BOUND_VALUE: value at the nearest boundary sample
- ZERO: zero
"""

from __future__ import annotations

import enum
import logging
import math
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

import numpy as np

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OutOfBounds(enum.Enum):
    FAIL = "fail"
    BOUND_VALUE = "bound_value"
    ZERO = "zero"


class LookUpTableError(IndexError):
    """Base class for table query errors."""


class UninitializedTableError(LookUpTableError):
    pass


class OutOfDomainError(LookUpTableError):
    pass


class LookUpTable(Generic[T]):
    def __init__(
        self,
        min: Optional[T] = None,
        max: Optional[T] = None,
        step: Optional[T] = None,
        f: Optional[Callable[[T], T]] = None,
        outbounds: OutOfBounds = OutOfBounds.ZERO,
    ) -> None:
        self._outbounds = OutOfBounds(outbounds)
        self._xs: List[T] = []
        self._ys: List[T] = []
        self._min: Optional[T] = None
        self._max: Optional[T] = None
        self._step: Optional[T] = None
        if f is not None:
            if min is None or max is None or step is None:
                raise ValueError("min, max and step are required together with f.")
            self.create(min, max, step, f)

    def create(self, min: T, max: T, step: T, f: Callable[[T], T]) -> bool:
        """Sample `f` over `[min, max]`.

        Returns False, leaving the table untouched, if `min > max`, `step` is
        not positive, or any bound is not finite.
        """
        if not all(math.isfinite(v) for v in (min, max, step)) or min > max or not step > 0:
            logger.debug("rejected table domain min=%r max=%r step=%r", min, max, step)
            return False

        size = int(math.floor((max - min) / step)) + 1
        xs: List[T] = []
        ys: List[T] = []
        for i in range(size):
            x = min + i * step
            xs.append(x)
            ys.append(f(x))

        self._xs, self._ys = xs, ys
        self._min, self._max, self._step = min, max, step
        logger.debug("built table with %d samples over [%r, %r]", size, min, max)
        return True

    def empty(self) -> bool:
        return not self._xs

    def __len__(self) -> int:
        return len(self._xs)

    @property
    def outbounds(self) -> OutOfBounds:
        return self._outbounds

    @property
    def min(self) -> Optional[T]:
        return self._min

    @property
    def max(self) -> Optional[T]:
        return self._max

    @property
    def step(self) -> Optional[T]:
        return self._step

    @property
    def xs(self) -> Sequence[T]:
        return tuple(self._xs)

    @property
    def ys(self) -> Sequence[T]:
        return tuple(self._ys)

    def _index(self, x: T) -> int:
        last = len(self._xs) - 1
        i = int(math.floor((x - self._min) / self._step))
        i = max(0, min(i, last))
        # floor() of the scaled offset can land one bucket off around a knot.
        if i < last and x >= self._xs[i + 1]:
            i += 1
        elif i > 0 and x < self._xs[i]:
            i -= 1
        return i

    def evaluate(self, x: T) -> T:
        """Return the interpolated value of `f(x)`.

        Raises `UninitializedTableError` before a successful `create`, and
        `OutOfDomainError` for `x` outside `[min, max]` with the FAIL policy.
        A NaN query raises `OutOfDomainError` under every policy.
        """
        if not self._xs:
            raise UninitializedTableError("Uninitialized table. Call create() before use.")
        if math.isnan(x):
            raise OutOfDomainError("Out of bound access: NaN query")

        ys = self._ys
        if x < self._min or x > self._max:
            if self._outbounds is OutOfBounds.ZERO:
                return ys[0] * 0
            if self._outbounds is OutOfBounds.BOUND_VALUE:
                return ys[0] if x < self._min else ys[-1]
            raise OutOfDomainError(f"Out of bound access: {x!r} not in [{self._min!r}, {self._max!r}]")

        i = self._index(x)
        if i >= len(ys) - 1:
            return ys[-1]
        x0, x1 = self._xs[i], self._xs[i + 1]
        return ys[i] + (ys[i + 1] - ys[i]) * (x - x0) / (x1 - x0)

    __call__ = evaluate

    def evaluate_many(self, xs: Sequence[float]) -> np.ndarray:
        xs = np.asarray(xs, dtype=float)
        out = np.empty_like(xs)
        flat = out.reshape(-1)
        for k, x in enumerate(xs.reshape(-1)):
            flat[k] = self.evaluate(float(x))
        return out
