"""Lockstep real-time strategy game server, unit simulation and wire formats."""

__version__ = "0.1.0"