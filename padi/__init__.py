"""Padi: client-side account and transcript synchronization core."""

__version__ = "0.1.0"
