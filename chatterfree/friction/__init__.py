"""Joint friction models."""

from .types import LAMBERT_ARG_THRESHOLD, JointFrictionState, Regime, StictionParams  # noqa: F401
from .chatter_free import ChatterFreeFriction, build_table, dry_friction_curve  # noqa: F401
from .bank import ChatterFreeFrictionBank  # noqa: F401
from .viscous_coulomb import ViscousCoulombFriction  # noqa: F401
