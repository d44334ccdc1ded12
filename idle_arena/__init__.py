"""Idle arena combat backend: deterministic combat resolution and log storage."""

__version__ = "0.1.0"
