"""Monitoring module: keep-alive endpoint and cycle status."""

from .health import CycleStatus, KeepAliveServer

__all__ = ["CycleStatus", "KeepAliveServer"]
