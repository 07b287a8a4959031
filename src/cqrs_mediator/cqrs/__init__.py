"""CQRS primitives: messages, handlers, contracts, wrappers, mediator."""

from __future__ import annotations

from .contract import HandlerContract
from .handler import (
    AsyncCommandHandler,
    AsyncEventHandler,
    AsyncQueryHandler,
    CommandHandler,
    EventHandler,
    QueryHandler,
    declared_contract,
    handled_message_type,
)
from .mediator import Mediator
from .messages import (
    AsyncCommand,
    AsyncEvent,
    AsyncQuery,
    Command,
    Event,
    Message,
    MessageKind,
    Query,
    kind_of,
    response_type_of,
)
from .wrappers import HandlerWrapper, wrap_handler

__all__ = [
    "AsyncCommand",
    "AsyncCommandHandler",
    "AsyncEvent",
    "AsyncEventHandler",
    "AsyncQuery",
    "AsyncQueryHandler",
    "Command",
    "CommandHandler",
    "Event",
    "EventHandler",
    "HandlerContract",
    "HandlerWrapper",
    "Mediator",
    "Message",
    "MessageKind",
    "Query",
    "QueryHandler",
    "declared_contract",
    "handled_message_type",
    "kind_of",
    "response_type_of",
    "wrap_handler",
]
