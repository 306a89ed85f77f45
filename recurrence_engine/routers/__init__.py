"""Routers package for the recurrence engine API."""

from .exceptions import router as exceptions_router
from .occurrences import router as occurrences_router
from .rules import router as rules_router

__all__ = ["exceptions_router", "occurrences_router", "rules_router"]
