"""Handler contracts — one abstract base per message family."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar, get_args, get_origin

from ..primitives.exceptions import HandlerRegistrationError
from .messages import (
    AsyncCommand,
    AsyncEvent,
    AsyncQuery,
    Command,
    Event,
    MessageKind,
    Query,
)

TCommand = TypeVar("TCommand", bound=Command)
TAsyncCommand = TypeVar("TAsyncCommand", bound=AsyncCommand)
TQuery = TypeVar("TQuery", bound=Query[Any])
TAsyncQuery = TypeVar("TAsyncQuery", bound=AsyncQuery[Any])
TEvent = TypeVar("TEvent", bound=Event)
TAsyncEvent = TypeVar("TAsyncEvent", bound=AsyncEvent)
TResult = TypeVar("TResult")


class CommandHandler(ABC, Generic[TCommand]):
    """Base class for command handlers.

    Usage::

        class RenameUserHandler(CommandHandler[RenameUser]):
            def handle(self, message: RenameUser) -> None:
                ...
    """

    @abstractmethod
    def handle(self, message: TCommand) -> None:
        """Execute the command."""
        ...


class AsyncCommandHandler(ABC, Generic[TAsyncCommand]):
    """Base class for asynchronous command handlers."""

    @abstractmethod
    async def handle(self, message: TAsyncCommand) -> None:
        """Execute the command."""
        ...


class QueryHandler(ABC, Generic[TQuery, TResult]):
    """Base class for query handlers.

    Usage::

        class GetUserNameHandler(QueryHandler[GetUserName, str]):
            def handle(self, message: GetUserName) -> str:
                ...
    """

    @abstractmethod
    def handle(self, message: TQuery) -> TResult:
        """Answer the query."""
        ...


class AsyncQueryHandler(ABC, Generic[TAsyncQuery, TResult]):
    """Base class for asynchronous query handlers."""

    @abstractmethod
    async def handle(self, message: TAsyncQuery) -> TResult:
        """Answer the query."""
        ...


class EventHandler(ABC, Generic[TEvent]):
    """Base class for event handlers. Any number may subscribe to one event type."""

    @abstractmethod
    def handle(self, message: TEvent) -> None:
        """React to the event."""
        ...


class AsyncEventHandler(ABC, Generic[TAsyncEvent]):
    """Base class for asynchronous event handlers."""

    @abstractmethod
    async def handle(self, message: TAsyncEvent) -> None:
        """React to the event."""
        ...


CONTRACT_TYPES: dict[MessageKind, type[Any]] = {
    MessageKind.COMMAND: CommandHandler,
    MessageKind.ASYNC_COMMAND: AsyncCommandHandler,
    MessageKind.QUERY: QueryHandler,
    MessageKind.ASYNC_QUERY: AsyncQueryHandler,
    MessageKind.EVENT: EventHandler,
    MessageKind.ASYNC_EVENT: AsyncEventHandler,
}


def declared_contract(handler: Any) -> tuple[type[Any], type[Any]]:
    """Return ``(contract base, message type)`` a handler class is declared for.

    Reads the parametrized contract base, e.g. ``(QueryHandler, Ping)`` for
    ``class PingHandler(QueryHandler[Ping, str])``. TypeVars bound by a
    generic intermediate base are followed::

        class CachedQueryHandler(QueryHandler[TQuery, str], Generic[TQuery]): ...
        class PingHandler(CachedQueryHandler[Ping]): ...
    """
    handler_cls = handler if isinstance(handler, type) else type(handler)
    contract_bases = tuple(CONTRACT_TYPES.values())

    bound: dict[Any, Any] = {}
    for klass in handler_cls.__mro__:
        for base in klass.__dict__.get("__orig_bases__", ()):
            origin = get_origin(base)
            if origin is None:
                continue
            args = tuple(
                bound.get(arg, arg) if isinstance(arg, TypeVar) else arg
                for arg in get_args(base)
            )
            if origin in contract_bases:
                if args and isinstance(args[0], type):
                    return origin, args[0]
                continue
            bound.update(zip(getattr(origin, "__parameters__", ()), args))

    msg = (
        f"Cannot infer the message type handled by {handler_cls.__name__}; "
        "parametrize its contract (e.g. CommandHandler[MyCommand]) or register "
        "it with an explicit message type"
    )
    raise HandlerRegistrationError(msg)


def handled_message_type(handler: Any) -> type[Any]:
    """Return the message type a handler class (or instance) is declared for."""
    return declared_contract(handler)[1]


__all__ = [
    "CONTRACT_TYPES",
    "AsyncCommandHandler",
    "AsyncEventHandler",
    "AsyncQueryHandler",
    "CommandHandler",
    "EventHandler",
    "QueryHandler",
    "declared_contract",
    "handled_message_type",
]
