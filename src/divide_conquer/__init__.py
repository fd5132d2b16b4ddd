"""Divide-and-conquer task checklist server."""

__version__ = "1.1.1"
