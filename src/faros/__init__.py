"""Faros GitTrackObject reconciliation support."""

__version__ = "0.1.0"
