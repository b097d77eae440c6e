from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Optional

# Lambert W argument at which the dry friction curve is taken as saturated.
# It fixes the upper bound of the tabulated domain; the value comes from the
# reference joint setup and has no closed-form derivation.
LAMBERT_ARG_THRESHOLD = -0.001


@dataclass(frozen=True)
class StictionParams:
    """Chattering-free stiction model params (single joint).

    Z = 1 / (Kf*dt + Bf), den = 1 + Z*Tv
    dry(w) = -(wbrk/Z) * W0(-(Z/wbrk) * (Tsc/den) * exp((Z*Tc - w) / (wbrk*den)))
    """

    ts: float = 2.5  # static friction
    tc: float = 0.2  # Coulomb friction
    tv: float = 4.5  # viscous coefficient
    wbrk: float = 0.04  # break-away velocity
    kf: float = 5000.0  # spring constant
    bf: float = 50.0  # damper constant
    dt: float = 0.001
    lut_step: float = 0.001

    def __post_init__(self) -> None:
        if self.dt <= 0:
            raise ValueError("dt must be positive.")
        if self.wbrk <= 0:
            raise ValueError("wbrk must be positive.")
        if self.lut_step <= 0:
            raise ValueError("lut_step must be positive.")
        if self.kf < 0 or self.bf < 0 or self.tv < 0 or self.tc < 0:
            raise ValueError("Friction constants and gains must be non-negative.")
        if self.kf * self.dt + self.bf <= 0:
            raise ValueError("Kf*dt + Bf must be positive.")
        if self.ts <= self.tc:
            raise ValueError("Static friction ts must exceed Coulomb friction tc.")

    @property
    def tsc(self) -> float:
        return self.ts - self.tc

    @property
    def z(self) -> float:
        return 1.0 / (self.kf * self.dt + self.bf)

    @property
    def den(self) -> float:
        return 1.0 + self.z * self.tv

    @property
    def table_min(self) -> float:
        return self.z * self.ts

    @property
    def table_max(self) -> float:
        z, den = self.z, self.den
        return z * self.tc - self.wbrk * den * math.log(-self.wbrk / z * den / self.tsc * LAMBERT_ARG_THRESHOLD)


class Regime(enum.Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    STICK = "stick"


@dataclass
class JointFrictionState:
    """Per-joint memory. Only `e` and `p_prev` carry over between steps."""

    value: float = 0.0
    p_prev: float = 0.0
    e: float = 0.0
    w_ast: float = 0.0
    t_ast: float = 0.0
    tf: float = 0.0
    torque_force: float = 0.0
    first_time: bool = True
    regime: Optional[Regime] = None
