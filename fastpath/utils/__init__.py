"""
Utility functions module.

Time Semantics:
- All timestamps are timezone-aware UTC
- Elapsed time is recomputed as now - start_time on every tick
- Formatting helpers render intervals for publishers and scripts
"""
