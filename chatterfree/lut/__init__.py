"""Sampled-function look-up tables with linear interpolation."""

from .table import (  # noqa: F401
    LookUpTable,
    LookUpTableError,
    OutOfBounds,
    OutOfDomainError,
    UninitializedTableError,
)
