"""
Analysis lifecycle.

Responsibilities:
- Record each recommendation event as an analysis, ephemeral unless saving was requested.
- Apply the 24-hour validity window to past-analysis queries.
- Sweep expired, unsaved analyses on demand.
"""
