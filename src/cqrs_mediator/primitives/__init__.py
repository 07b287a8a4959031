"""Primitives: exceptions."""

from __future__ import annotations

from .exceptions import (
    HandlerError,
    HandlerInvocationError,
    HandlerNotRegisteredError,
    HandlerRegistrationError,
    HandlerResolutionError,
    MediatorError,
    MessageDeclarationError,
)

__all__ = [
    "HandlerError",
    "HandlerInvocationError",
    "HandlerNotRegisteredError",
    "HandlerRegistrationError",
    "HandlerResolutionError",
    "MediatorError",
    "MessageDeclarationError",
]
