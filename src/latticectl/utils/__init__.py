"""Utility helpers."""

from latticectl.utils.logging_setup import JSONFormatter, setup_logging

__all__ = ["JSONFormatter", "setup_logging"]
