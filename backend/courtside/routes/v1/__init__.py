# backend/courtside/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import alerts, availability, blocks, bookings, holidays, monthly_passes

__all__ = [
    "alerts",
    "availability",
    "blocks",
    "bookings",
    "holidays",
    "monthly_passes",
]
