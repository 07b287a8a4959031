"""Ports: protocols the mediator exposes and consumes."""

from __future__ import annotations

from .mediator import IMediator
from .resolution import MultiInstanceFactory, SingleInstanceFactory

__all__ = [
    "IMediator",
    "MultiInstanceFactory",
    "SingleInstanceFactory",
]
