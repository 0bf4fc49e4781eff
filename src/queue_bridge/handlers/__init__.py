"""Handlers package."""

from queue_bridge.handlers.bridge import run_bridge

__all__ = ["run_bridge"]
