"""In-memory adapters for testing and simple wiring."""

from __future__ import annotations

from .registry import InMemoryHandlerRegistry

__all__ = ["InMemoryHandlerRegistry"]
