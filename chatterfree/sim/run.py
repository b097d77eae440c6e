from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

import numpy as np

from chatterfree.friction.bank import ChatterFreeFrictionBank
from chatterfree.friction.chatter_free import ChatterFreeFriction
from chatterfree.friction.viscous_coulomb import ViscousCoulombFriction
from chatterfree.friction.types import Regime

REGIME_CODES = {None: 0, Regime.STICK: 0, Regime.POSITIVE: 1, Regime.NEGATIVE: -1}


@dataclass
class SimLog:
    t: np.ndarray
    q: np.ndarray
    qd: np.ndarray
    tau_cmd: np.ndarray
    tau_fric: np.ndarray
    regime: np.ndarray

    def to_npz_dict(self) -> Dict[str, np.ndarray]:
        return {
            "t": self.t,
            "q": self.q,
            "qd": self.qd,
            "tau_cmd": self.tau_cmd,
            "tau_fric": self.tau_fric,
            "regime": self.regime,
        }


def _num_steps(duration: float, dt: float) -> int:
    if dt <= 0:
        raise ValueError("Timestep must be positive.")
    steps = int(math.ceil(duration / dt))
    if steps <= 0:
        raise ValueError("duration too small.")
    return steps


def run_single_joint(
    friction: Optional[Union[ChatterFreeFriction, ViscousCoulombFriction]],
    duration: float,
    inertia: float,
    tau_cmd_fn: Callable[[float, float, float], float],
    dt: Optional[float] = None,
    damping: float = 0.0,
    q0: float = 0.0,
) -> SimLog:
    """Integrate one rigid joint (semi-implicit Euler) under command + friction torque.

    Regime codes in the log: 1 positive slip, -1 negative slip, 0 stick.
    """
    if inertia <= 0:
        raise ValueError("inertia must be positive.")
    if friction is not None:
        if dt is not None and not math.isclose(dt, friction.params.dt):
            raise ValueError("dt must match the friction model timestep.")
        dt = friction.params.dt
    if dt is None:
        raise ValueError("dt is required without a friction model.")
    steps = _num_steps(duration, dt)

    t = np.zeros(steps, dtype=float)
    q = np.zeros(steps, dtype=float)
    qd = np.zeros(steps, dtype=float)
    tau_cmd = np.zeros(steps, dtype=float)
    tau_fric = np.zeros(steps, dtype=float)
    regime = np.zeros(steps, dtype=int)

    pos, vel = float(q0), 0.0
    for k in range(steps):
        now = k * dt
        cmd = float(tau_cmd_fn(now, pos, vel))
        tau = cmd if friction is None else friction.step(pos, cmd)

        t[k], q[k], qd[k] = now, pos, vel
        tau_cmd[k] = cmd
        tau_fric[k] = tau - cmd
        if friction is not None:
            regime[k] = REGIME_CODES[friction.state.regime]

        vel += dt * (tau - damping * vel) / inertia
        pos += dt * vel

    return SimLog(t=t, q=q, qd=qd, tau_cmd=tau_cmd, tau_fric=tau_fric, regime=regime)


def run_mujoco_demo(
    mjm: "object",
    mjd: "object",
    duration: float,
    tau_cmd_fn: Callable[[float, np.ndarray, np.ndarray], np.ndarray],
    bank: Optional[ChatterFreeFrictionBank] = None,
    qpos0: Optional[np.ndarray] = None,
) -> SimLog:
    """Run a torque-driven MuJoCo simulation with the stiction model per joint.

    The friction torque is applied through `data.qfrc_applied`. Joints are assumed
    to be hinges/slides so that qpos and qvel share indices.
    """
    import mujoco

    dt = float(mjm.opt.timestep)
    steps = _num_steps(duration, dt)
    nq = int(mjm.nq)
    if int(mjm.nv) != nq:
        raise ValueError("Only models with nq == nv are supported.")
    if bank is not None:
        if len(bank) != nq:
            raise ValueError("Friction bank size must match model nq.")
        for joint in bank.joints:
            if not math.isclose(joint.params.dt, dt):
                raise ValueError("Friction params dt must match model timestep.")

    if qpos0 is not None:
        mjd.qpos[:] = qpos0
        mujoco.mj_forward(mjm, mjd)

    t = np.zeros(steps, dtype=float)
    q = np.zeros((steps, nq), dtype=float)
    qd = np.zeros((steps, nq), dtype=float)
    tau_cmd = np.zeros((steps, nq), dtype=float)
    tau_fric = np.zeros((steps, nq), dtype=float)
    regime = np.zeros((steps, nq), dtype=int)

    for k in range(steps):
        now = float(mjd.time)
        t[k] = now
        q[k] = mjd.qpos.copy()
        qd[k] = mjd.qvel.copy()

        cmd = np.asarray(tau_cmd_fn(now, mjd.qpos, mjd.qvel), dtype=float)
        if cmd.shape != (nq,):
            raise ValueError("tau_cmd_fn must return shape (nq,).")
        tau_cmd[k] = cmd

        fric = np.zeros(nq, dtype=float)
        if bank is not None:
            fric = bank.step(q[k], cmd) - cmd
            regime[k] = [REGIME_CODES[r] for r in bank.regimes]
        tau_fric[k] = fric

        mjd.qfrc_applied[:] = cmd + fric
        mujoco.mj_step(mjm, mjd)

    return SimLog(t=t, q=q, qd=qd, tau_cmd=tau_cmd, tau_fric=tau_fric, regime=regime)
