"""Raspi-Writer: writing and publishing workstation installer for Raspberry Pi.

Core design goals:
- Resumable, state-driven steps
- Latest upstream releases resolved at install time, never silently substituted
- One failed package never stops the rest of the batch
- Centralized logging
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
