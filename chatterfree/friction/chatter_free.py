"""Chattering-free simulation of friction torque in joints with high stiction.

A spring-damper error state `e` predicts the torque needed to keep the joint
stuck. While that predictor stays within +-Ts it is returned as the friction
torque; beyond it the dry friction curve (Lambert W closed form, tabulated) plus
the Coulomb and viscous terms take over.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional, Tuple

from chatterfree.lut import LookUpTable, OutOfBounds
from chatterfree.special import lambert_w0

from .types import JointFrictionState, Regime, StictionParams

logger = logging.getLogger(__name__)


def dry_friction_curve(params: StictionParams) -> Callable[[float], float]:
    tsc, tc, z, den, wbrk = params.tsc, params.tc, params.z, params.den, params.wbrk

    def dry(w_ast: float) -> float:
        arg = -z / wbrk * tsc / den * math.exp((z * tc - w_ast) / (wbrk * den))
        return -(wbrk / z) * lambert_w0(arg)

    return dry


def build_table(params: StictionParams) -> LookUpTable[float]:
    """Tabulate the dry friction curve over `[table_min, table_max]`.

    Out-of-domain queries return zero: past `table_max` the curve has decayed.
    """
    lo, hi = params.table_min, params.table_max
    if params.z * params.tsc / (params.wbrk * params.den) > 1.0:
        # W0 no longer returns -Z*Tsc/(wbrk*den) at table_min, so Tf jumps at break-away.
        logger.warning("dry friction curve is discontinuous at break-away for %s", params)
    table: LookUpTable[float] = LookUpTable(outbounds=OutOfBounds.ZERO)
    if not table.create(lo, hi, params.lut_step, dry_friction_curve(params)):
        raise ValueError(f"Invalid dry friction table domain [{lo}, {hi}] with step {params.lut_step}.")
    logger.debug("dry friction table: %d samples over [%.6g, %.6g]", len(table), lo, hi)
    return table


class ChatterFreeFriction:
    def __init__(self, params: Optional[StictionParams] = None, table: Optional[LookUpTable[float]] = None) -> None:
        self.params = params if params is not None else StictionParams()
        self.state = JointFrictionState()
        self._table = table

    @property
    def table(self) -> LookUpTable[float]:
        if self._table is None:
            self.build_table()
        return self._table

    def build_table(self) -> LookUpTable[float]:
        self._table = build_table(self.params)
        return self._table

    def reset(self) -> None:
        self.state = JointFrictionState()

    def friction_torque(self, w_ast: float) -> Tuple[float, Regime]:
        """Friction torque for the auxiliary velocity `w_ast`, without touching state."""
        p = self.params
        t_ast = w_ast / p.z
        if t_ast > p.ts:
            return self.table(w_ast) + (p.tc + p.tv * w_ast) / p.den, Regime.POSITIVE
        if t_ast < -p.ts:
            # Odd symmetry: the table only covers positive velocities.
            return -self.table(-w_ast) + (-p.tc + p.tv * w_ast) / p.den, Regime.NEGATIVE
        return t_ast, Regime.STICK

    def step(self, value: float, torque: Optional[float] = None) -> float:
        """Advance one tick at joint position `value`.

        `torque`, when given, replaces the stored torque before the friction
        torque is subtracted. Returns the corrected torque.
        """
        if self._table is None:
            self.build_table()
        p = self.params
        s = self.state
        if torque is not None:
            s.torque_force = float(torque)
        s.value = float(value)

        w = 0.0 if s.first_time else (s.value - s.p_prev) / p.dt
        s.first_time = False

        s.w_ast = w + p.z * p.kf * s.e
        s.t_ast = s.w_ast / p.z
        tf, regime = self.friction_torque(s.w_ast)

        s.e = p.z * (p.bf * s.e + tf * p.dt)
        s.p_prev = s.value
        s.tf = tf
        s.regime = regime

        s.torque_force -= tf
        return s.torque_force
