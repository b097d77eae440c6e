#!/usr/bin/env python3
"""Write (or refresh) a stiction params file.

Policy:
- missing `tunable` entries are filled with the built-in defaults.
- existing `tunable` values are preserved.
"""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
from pathlib import Path
import sys


def main() -> int:
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))

    ap = argparse.ArgumentParser()
    ap.add_argument("--nq", type=int, default=1, help="number of joints")
    ap.add_argument("--out", default="params/stiction.params.json")
    args = ap.parse_args()
    if args.nq <= 0:
        raise SystemExit("--nq must be positive")

    from chatterfree.params.friction import default_tunable, merge_defaults, stiction_params_from_payload
    from chatterfree.params.io import load_params, save_params

    out_path = Path(args.out)
    existing = load_params(out_path) if out_path.exists() else None

    tunable_existing = existing.get("tunable") if isinstance(existing, dict) else None
    if isinstance(tunable_existing, dict):
        tunable = merge_defaults(tunable_existing, default_tunable(args.nq))
    else:
        tunable = default_tunable(args.nq)

    payload = {
        "version": 1,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "nq": args.nq,
        "tunable": tunable,
    }
    # Fail before writing if the merged values are not a valid model.
    stiction_params_from_payload(payload, args.nq)

    save_params(out_path, payload)
    print(f"wrote: {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
