"""Exceptions raised by cqrs-mediator."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..cqrs.contract import HandlerContract


class MediatorError(Exception):
    """Root exception for the entire cqrs-mediator package."""


class MessageDeclarationError(MediatorError, TypeError):
    """Raised when a message class declares more than one message family.

    Usage: a class deriving from both ``Command`` and ``Event`` is rejected
    at class creation time.
    """


class HandlerError(MediatorError):
    """Base class for all handler related errors (registration, lookup, execution)."""


class HandlerRegistrationError(HandlerError):
    """Raised when a handler registration conflict is detected.

    Usage: InMemoryHandlerRegistry raises this when trying to register a
    second handler for a command or query type, or when the message type
    does not belong to the family of the registration method.
    """


class HandlerNotRegisteredError(HandlerError, LookupError):
    """Raised by the in-memory registry when no handler is bound to a contract."""

    def __init__(self, contract: HandlerContract) -> None:
        self.contract = contract
        super().__init__(f"No handler registered for {contract}")


class HandlerResolutionError(HandlerError):
    """Raised when the mediator cannot obtain a handler for a command or query.

    Wraps whatever the resolution port raised (available as ``__cause__``).
    Never raised for events without subscribers. Retrying does not help:
    the root cause is a missing or broken registration.
    """

    def __init__(self, contract: HandlerContract, reason: str | None = None) -> None:
        self.contract = contract
        self.message_type = contract.message_type
        msg = (
            f"Handler was not found for request of type "
            f"{contract.message_type.__name__} ({contract}). "
            "Container or service locator not configured properly or "
            "handlers not registered with your container."
        )
        if reason:
            msg += f" - {reason}"
        super().__init__(msg)


class HandlerInvocationError(HandlerError):
    """Raised when a handler breaks its contract while being invoked.

    Usage: a coroutine function registered against a synchronous contract
    returns an awaitable that the synchronous dispatch path cannot drive.
    """
