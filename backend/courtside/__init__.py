"""Courtside: court availability and scheduling engine."""

__version__ = "0.1.0"
