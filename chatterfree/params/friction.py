from __future__ import annotations

from dataclasses import fields
from typing import Any, Dict, List, Optional

from chatterfree.friction.types import StictionParams

STICTION_FIELDS = tuple(f.name for f in fields(StictionParams))
FRICTION_MODELS = ("stiction", "vc")
DEFAULT_V_EPS = 1e-4


def default_tunable(nq: int) -> Dict[str, Any]:
    defaults = StictionParams()
    return {
        "sim": {
            "timestep_override": defaults.dt,
        },
        "friction": {
            "model": FRICTION_MODELS[0],
            "vc": {"v_eps": DEFAULT_V_EPS},
            "stiction": {name: [getattr(defaults, name)] * nq for name in STICTION_FIELDS if name != "dt"},
        },
    }


def merge_defaults(existing: object, defaults: object) -> object:
    if isinstance(existing, dict) and isinstance(defaults, dict):
        merged = dict(existing)
        for k, v in defaults.items():
            if k not in merged:
                merged[k] = v
            else:
                merged[k] = merge_defaults(merged[k], v)
        return merged
    return existing


def _section(payload: Dict[str, Any], *keys: str) -> Dict[str, Any]:
    node: Any = payload
    for key in keys:
        node = node.get(key) if isinstance(node, dict) else None
    return node if isinstance(node, dict) else {}


def timestep_override(payload: Dict[str, Any]) -> Optional[float]:
    value = _section(payload, "tunable", "sim").get("timestep_override")
    return None if value is None else float(value)


def stiction_params_from_payload(payload: Dict[str, Any], nq: int) -> List[StictionParams]:
    """Per-joint `StictionParams` from `tunable.friction.stiction`.

    Each field may be a scalar (used for all joints) or a list of length nq.
    """
    section = _section(payload, "tunable", "friction", "stiction")
    unknown = sorted(set(section) - set(STICTION_FIELDS))
    if unknown:
        raise ValueError(f"Unknown stiction params: {', '.join(unknown)}")

    columns: Dict[str, List[float]] = {}
    for name, value in section.items():
        if isinstance(value, (list, tuple)):
            if len(value) != nq:
                raise ValueError(f"stiction.{name} has {len(value)} entries, expected {nq}.")
            columns[name] = [float(v) for v in value]
        else:
            columns[name] = [float(value)] * nq

    dt = timestep_override(payload)
    if dt is not None:
        columns["dt"] = [dt] * nq

    return [StictionParams(**{name: col[k] for name, col in columns.items()}) for k in range(nq)]


def friction_model_from_payload(payload: Dict[str, Any]) -> str:
    model = _section(payload, "tunable", "friction").get("model", FRICTION_MODELS[0])
    if model not in FRICTION_MODELS:
        raise ValueError(f"Unknown friction model: {model!r}")
    return model


def baseline_v_eps_from_payload(payload: Dict[str, Any]) -> float:
    v_eps = float(_section(payload, "tunable", "friction", "vc").get("v_eps", DEFAULT_V_EPS))
    if v_eps < 0:
        raise ValueError("vc.v_eps must be non-negative.")
    return v_eps
