"""
FastPath - Fasting Session Tracker Core

State-management core for a personal fasting tracker. Coordinates user
intent, a once-per-second timer, asynchronous persistence and a best-effort
live status surface through a single reducer-style state machine.
"""

__version__ = "0.1.0"
__author__ = "FastPath Team"
