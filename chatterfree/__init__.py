"""chatterfree: look-up tables and chattering-free stiction torque for simulated joints.

The friction model follows "Reliable chattering-free simulation of friction
torque in joints presenting high stiction" (R. Cisneros).
"""

from . import friction, lut  # noqa: F401
