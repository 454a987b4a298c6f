"""Utility helpers."""

from holder_intel.utils.logging import setup_logging

__all__ = [
    "setup_logging",
]
