"""
Logging configuration and utilities for the fasting core.
"""
from .config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
