"""cqrs-mediator — in-process dispatch of commands, queries and events.

Zero infrastructure dependencies. Handlers are supplied by injected
resolution ports; pydantic models the messages.
"""

from __future__ import annotations

# ── Adapters ────────────────────────────────────────────────────
from .adapters.memory import InMemoryHandlerRegistry

# ── CQRS ─────────────────────────────────────────────────────────
from .cqrs import (
    AsyncCommand,
    AsyncCommandHandler,
    AsyncEvent,
    AsyncEventHandler,
    AsyncQuery,
    AsyncQueryHandler,
    Command,
    CommandHandler,
    Event,
    EventHandler,
    HandlerContract,
    HandlerWrapper,
    Mediator,
    Message,
    MessageKind,
    Query,
    QueryHandler,
    declared_contract,
    handled_message_type,
    kind_of,
    response_type_of,
    wrap_handler,
)

# ── Ports ────────────────────────────────────────────────────────
from .ports import IMediator, MultiInstanceFactory, SingleInstanceFactory

# ── Primitives ──────────────────────────────────────────────────
from .primitives import (
    HandlerError,
    HandlerInvocationError,
    HandlerNotRegisteredError,
    HandlerRegistrationError,
    HandlerResolutionError,
    MediatorError,
    MessageDeclarationError,
)

__all__: list[str] = [
    # Messages
    "AsyncCommand",
    "AsyncEvent",
    "AsyncQuery",
    "Command",
    "Event",
    "Message",
    "MessageKind",
    "Query",
    "kind_of",
    "response_type_of",
    # Handlers
    "AsyncCommandHandler",
    "AsyncEventHandler",
    "AsyncQueryHandler",
    "CommandHandler",
    "EventHandler",
    "QueryHandler",
    "declared_contract",
    "handled_message_type",
    # Dispatch
    "HandlerContract",
    "HandlerWrapper",
    "Mediator",
    "wrap_handler",
    # Ports
    "IMediator",
    "MultiInstanceFactory",
    "SingleInstanceFactory",
    # Adapters
    "InMemoryHandlerRegistry",
    # Primitives
    "HandlerError",
    "HandlerInvocationError",
    "HandlerNotRegisteredError",
    "HandlerRegistrationError",
    "HandlerResolutionError",
    "MediatorError",
    "MessageDeclarationError",
]
