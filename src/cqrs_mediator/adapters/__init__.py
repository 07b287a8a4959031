"""Adapters: concrete implementations of the ports."""

from __future__ import annotations

from .memory import InMemoryHandlerRegistry

__all__ = ["InMemoryHandlerRegistry"]
