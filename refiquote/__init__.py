"""Refinance pricing engine.

This module also exposes the package version for runtime display."""

__all__ = ["__version__", "compute_scenario"]

# Keep in sync with the version declared in ``pyproject.toml``
__version__ = "0.1.0"

from refiquote.engine import compute_scenario  # noqa: E402
