"""Recurrence expansion engine for calendar events."""

__version__ = "1.0.0"
