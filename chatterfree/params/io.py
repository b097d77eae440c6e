from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict


def load_params(path: str | Path) -> Dict[str, Any]:
    """Read a params file; the top level must be a JSON object."""
    p = Path(path)
    payload = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"Params file must hold a JSON object: {p}")
    return payload


def save_params(path: str | Path, payload: Dict[str, Any]) -> Path:
    """Write `payload` with sorted keys, creating parent directories."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(payload, indent=2, ensure_ascii=False, sort_keys=True)
    p.write_text(text + "\n", encoding="utf-8")
    return p
