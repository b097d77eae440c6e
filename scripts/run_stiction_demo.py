#!/usr/bin/env python3
"""Run a stiction friction demo and export plots/data.

- apply a sinusoidal torque on one joint (single rigid joint, or a MuJoCo model)
- optionally compare the chattering-free stiction model with the viscous + Coulomb baseline
- export curves for q, qd, tau_cmd, tau_fric and the tabulated dry friction curve
"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

import numpy as np


def _plot(out_png: Path, x: np.ndarray, curves: dict[str, np.ndarray], title: str, xlabel: str = "t [s]") -> None:
    import matplotlib.pyplot as plt

    fig, axes = plt.subplots(len(curves), 1, figsize=(10, 2.6 * len(curves)), sharex=True)
    if len(curves) == 1:
        axes = [axes]
    for ax, (name, y) in zip(axes, curves.items(), strict=True):
        ax.plot(x, y, linewidth=1.2)
        ax.set_ylabel(name)
        ax.grid(True, alpha=0.3)
    axes[-1].set_xlabel(xlabel)
    fig.suptitle(title)
    fig.tight_layout()
    fig.savefig(out_png, dpi=150)
    plt.close(fig)


def main() -> int:
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))

    ap = argparse.ArgumentParser()
    ap.add_argument("--mjcf", default=None, help="MuJoCo model; a single rigid joint is simulated if omitted")
    ap.add_argument("--duration", type=float, default=4.0)
    ap.add_argument("--joint", type=int, default=1, help="1-based joint index for excitation")
    ap.add_argument("--amp", type=float, default=4.0, help="sinusoidal torque amplitude [N*m]")
    ap.add_argument("--freq", type=float, default=0.5, help="sinusoidal frequency [Hz]")
    ap.add_argument("--inertia", type=float, default=0.05, help="single-joint inertia [kg*m^2]")
    ap.add_argument("--model", choices=["vc", "stiction"], default=None, help="Overrides tunable.friction.model")
    ap.add_argument("--params", default="params/stiction.params.json", help="Central params file")
    ap.add_argument("--timestep", type=float, default=None, help="Override timestep [s] (takes precedence)")
    ap.add_argument("--outdir", default="artifacts/stiction_demo")
    args = ap.parse_args()

    from chatterfree.friction import ChatterFreeFriction, ChatterFreeFrictionBank, ViscousCoulombFriction
    from chatterfree.params.friction import (
        baseline_v_eps_from_payload,
        friction_model_from_payload,
        stiction_params_from_payload,
    )
    from chatterfree.params.io import load_params
    from chatterfree.sim.run import run_mujoco_demo, run_single_joint

    payload: dict = {}
    try:
        payload = load_params(args.params)
    except FileNotFoundError:
        print(f"warning: params file not found: {args.params} (using built-in defaults)")
    if args.timestep is not None:
        payload.setdefault("tunable", {}).setdefault("sim", {})["timestep_override"] = float(args.timestep)
    model = args.model if args.model is not None else friction_model_from_payload(payload)

    mjm = None
    nq = 1
    if args.mjcf is not None:
        import mujoco

        mjm = mujoco.MjModel.from_xml_path(str(Path(args.mjcf)))
        nq = int(mjm.nq)
    j = int(args.joint) - 1
    if j < 0 or j >= nq:
        raise SystemExit(f"--joint out of range: 1..{nq}")

    params = stiction_params_from_payload(payload, nq)
    dt = params[0].dt
    if mjm is not None:
        mjm.opt.timestep = dt

    def tau_cmd(t: float) -> float:
        return float(args.amp) * np.sin(2.0 * np.pi * float(args.freq) * t)

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    if mjm is not None:
        import mujoco

        def tau_cmd_fn(t: float, _q: np.ndarray, _qd: np.ndarray) -> np.ndarray:
            tau = np.zeros(nq, dtype=float)
            tau[j] = tau_cmd(t)
            return tau

        if model == "vc":
            raise SystemExit("--model vc is only available for the single-joint demo")
        bank = ChatterFreeFrictionBank(params)
        bank.build_tables()
        log = run_mujoco_demo(mjm, mujoco.MjData(mjm), float(args.duration), tau_cmd_fn, bank=bank)
        t, q, qd, cmd, fric = log.t, log.q[:, j], log.qd[:, j], log.tau_cmd[:, j], log.tau_fric[:, j]
        table = bank.joints[j].table
    else:
        stiction = ChatterFreeFriction(params[0])
        stiction.build_table()
        table = stiction.table
        fric_model = stiction
        if model == "vc":
            fric_model = ViscousCoulombFriction(params[0], v_eps=baseline_v_eps_from_payload(payload))
        log = run_single_joint(fric_model, float(args.duration), float(args.inertia), lambda t, _q, _qd: tau_cmd(t))
        t, q, qd, cmd, fric = log.t, log.q, log.qd, log.tau_cmd, log.tau_fric

    out_npz = outdir / f"demo_{model}_joint{args.joint}.npz"
    np.savez(out_npz, **log.to_npz_dict(), meta=np.array([str(params[j])], dtype=object))

    _plot(
        out_png=outdir / f"joint{args.joint}_motion.png",
        x=t,
        curves={f"q[{args.joint}] [rad]": q, f"qd[{args.joint}] [rad/s]": qd},
        title=f"Joint motion ({model})",
    )
    _plot(
        out_png=outdir / f"joint{args.joint}_tau.png",
        x=t,
        curves={"tau_cmd [N*m]": cmd, "tau_fric [N*m]": fric, "tau_applied [N*m]": cmd + fric},
        title=f"Torques ({model})",
    )

    w = np.linspace(float(table.min), float(table.max), 400)
    _plot(
        out_png=outdir / f"joint{args.joint}_dry_table.png",
        x=w,
        curves={"dry(w_ast) [N*m]": table.evaluate_many(w)},
        title="Tabulated dry friction curve",
        xlabel="w_ast [rad/s]",
    )

    print(f"wrote: {out_npz}")
    print(f"wrote: {outdir / f'joint{args.joint}_motion.png'}")
    print(f"wrote: {outdir / f'joint{args.joint}_tau.png'}")
    print(f"wrote: {outdir / f'joint{args.joint}_dry_table.png'}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
