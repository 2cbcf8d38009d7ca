"""State/store layer.

This package is the single source of truth for how decoded notifications
are turned into per-slot state: identity resolution, smoothing, history,
the event log and slot configuration.
"""
