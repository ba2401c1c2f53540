"""
Configuration module.

Defaults, YAML-file overrides and validation for storage, timer, goal,
live surface and logging parameters.
"""
