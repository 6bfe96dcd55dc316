"""Utilities — logging setup."""

from pricing_desk.utils.logger import setup_logging

__all__ = ["setup_logging"]
