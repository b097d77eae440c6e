from __future__ import annotations

from typing import Optional, Tuple

from .types import JointFrictionState, Regime, StictionParams


class ViscousCoulombFriction:
    """Switching baseline on the same joint constants: Tf = Tc * sign(w) + Tv * w.

    No stiction and no memory, so the torque flips sign with every velocity
    reversal and chatters around w = 0. Steps like `ChatterFreeFriction`.
    """

    def __init__(self, params: Optional[StictionParams] = None, v_eps: float = 1e-4) -> None:
        if v_eps < 0:
            raise ValueError("v_eps must be non-negative.")
        self.params = params if params is not None else StictionParams()
        self.v_eps = v_eps
        self.state = JointFrictionState()

    def reset(self) -> None:
        self.state = JointFrictionState()

    def friction_torque(self, w: float) -> Tuple[float, Regime]:
        p = self.params
        if abs(w) < self.v_eps:
            return p.tv * w, Regime.STICK
        if w > 0:
            return p.tc + p.tv * w, Regime.POSITIVE
        return -p.tc + p.tv * w, Regime.NEGATIVE

    def step(self, value: float, torque: Optional[float] = None) -> float:
        s = self.state
        if torque is not None:
            s.torque_force = float(torque)
        s.value = float(value)

        w = 0.0 if s.first_time else (s.value - s.p_prev) / self.params.dt
        s.first_time = False
        s.w_ast = w
        s.tf, s.regime = self.friction_torque(w)
        s.p_prev = s.value

        s.torque_force -= s.tf
        return s.torque_force
