"""Realtime room synchronization backend for collaborative screen editing."""

__version__ = "0.1.0"
