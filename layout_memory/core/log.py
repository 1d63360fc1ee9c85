"""Re-export of the package logger for modules under ``core``."""

from ..log import logger

__all__ = ["logger"]
