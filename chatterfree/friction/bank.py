from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

from .chatter_free import ChatterFreeFriction
from .types import Regime, StictionParams


class ChatterFreeFrictionBank:
    """One chattering-free friction model per joint, stepped with numpy arrays.

    Every joint builds its own table since the constants differ per joint.
    """

    def __init__(self, params: Sequence[StictionParams]) -> None:
        if not params:
            raise ValueError("At least one joint is required.")
        self.joints: List[ChatterFreeFriction] = [ChatterFreeFriction(p) for p in params]

    def __len__(self) -> int:
        return len(self.joints)

    def build_tables(self) -> None:
        for joint in self.joints:
            joint.build_table()

    def reset(self) -> None:
        for joint in self.joints:
            joint.reset()

    def _check(self, a: np.ndarray, name: str) -> np.ndarray:
        a = np.asarray(a, dtype=float)
        if a.shape != (len(self.joints),):
            raise ValueError(f"{name} shape mismatch with friction bank.")
        return a

    def step(self, q: np.ndarray, tau: Optional[np.ndarray] = None) -> np.ndarray:
        """Return tau - Tf per joint (tau defaults to the stored torques)."""
        q = self._check(q, "q")
        if tau is not None:
            tau = self._check(tau, "tau")
        out = np.zeros(len(self.joints), dtype=float)
        for k, joint in enumerate(self.joints):
            out[k] = joint.step(q[k], None if tau is None else tau[k])
        return out

    def friction(self, q: np.ndarray) -> np.ndarray:
        """Step every joint and return the friction contribution -Tf."""
        q = self._check(q, "q")
        out = np.zeros(len(self.joints), dtype=float)
        for k, joint in enumerate(self.joints):
            out[k] = joint.step(q[k], 0.0)
        return out

    @property
    def regimes(self) -> List[Optional[Regime]]:
        return [joint.state.regime for joint in self.joints]
