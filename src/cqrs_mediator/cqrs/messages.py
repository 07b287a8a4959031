"""Message taxonomy — six marker base classes (command/query/event x sync/async)."""

from __future__ import annotations

import typing
from enum import Enum
from typing import Any, Generic

from pydantic import BaseModel, ConfigDict
from typing_extensions import TypeVar

from ..primitives.exceptions import MessageDeclarationError

TResult = TypeVar("TResult", default=Any)


class MessageKind(str, Enum):
    """The family a message belongs to, which fixes its handler contract."""

    COMMAND = "command"
    ASYNC_COMMAND = "async_command"
    QUERY = "query"
    ASYNC_QUERY = "async_query"
    EVENT = "event"
    ASYNC_EVENT = "async_event"

    @property
    def is_async(self) -> bool:
        return self in _ASYNC_KINDS

    @property
    def is_query(self) -> bool:
        return self in (MessageKind.QUERY, MessageKind.ASYNC_QUERY)

    @property
    def is_multicast(self) -> bool:
        """Events fan out to zero or more handlers; everything else has one."""
        return self in (MessageKind.EVENT, MessageKind.ASYNC_EVENT)

    @property
    def marker(self) -> type[Message]:
        return _MARKERS[self]


_ASYNC_KINDS = frozenset(
    {MessageKind.ASYNC_COMMAND, MessageKind.ASYNC_QUERY, MessageKind.ASYNC_EVENT}
)

# Filled in once the markers below exist.
_MARKERS: dict[MessageKind, type[Message]] = {}


class Message(BaseModel):
    """Common base of the six markers.

    Messages are immutable. A concrete message class must derive from
    exactly one marker; deriving from two raises
    :class:`~cqrs_mediator.primitives.exceptions.MessageDeclarationError`.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        families = [
            kind for kind, marker in _MARKERS.items() if issubclass(cls, marker)
        ]
        if len(families) > 1:
            names = ", ".join(kind.marker.__name__ for kind in families)
            msg = (
                f"{cls.__name__} declares more than one message family ({names}); "
                "a message must be exactly one of Command, AsyncCommand, Query, "
                "AsyncQuery, Event or AsyncEvent"
            )
            raise MessageDeclarationError(msg)


class Command(Message):
    """Marker for a request to change state, handled by exactly one handler.

    Usage::

        class RenameUser(Command):
            user_id: str
            name: str
    """


class AsyncCommand(Message):
    """Marker for a command whose handler runs as a coroutine."""


class Query(Message, Generic[TResult]):
    """Marker for a request for data, handled by exactly one handler.

    The generic argument is the response type and is part of the handler
    contract::

        class GetUserName(Query[str]):
            user_id: str
    """


class AsyncQuery(Message, Generic[TResult]):
    """Marker for a query whose handler runs as a coroutine."""


class Event(Message):
    """Marker for a notification that something happened (zero or more handlers)."""


class AsyncEvent(Message):
    """Marker for an event whose handlers run as coroutines."""


_MARKERS.update(
    {
        MessageKind.COMMAND: Command,
        MessageKind.ASYNC_COMMAND: AsyncCommand,
        MessageKind.QUERY: Query,
        MessageKind.ASYNC_QUERY: AsyncQuery,
        MessageKind.EVENT: Event,
        MessageKind.ASYNC_EVENT: AsyncEvent,
    }
)


def kind_of(message_type: type[Any]) -> MessageKind:
    """Return the family *message_type* declares.

    Raises ``TypeError`` when the type is not a message at all.
    """
    if isinstance(message_type, type):
        for kind, marker in _MARKERS.items():
            if issubclass(message_type, marker):
                return kind
    name = getattr(message_type, "__name__", repr(message_type))
    raise TypeError(
        f"{name} is not a message type; derive it from Command, AsyncCommand, "
        "Query, AsyncQuery, Event or AsyncEvent"
    )


def _substitute(arg: Any, bound: dict[Any, Any]) -> Any:
    if isinstance(arg, typing.TypeVar):
        return bound.get(arg, arg)
    # Generic aliases such as list[T]
    parameters = getattr(arg, "__parameters__", ())
    if isinstance(parameters, tuple) and any(p in bound for p in parameters):
        return arg[tuple(bound.get(p, p) for p in parameters)]
    return arg


def response_type_of(message_type: type[Any]) -> Any:
    """Return the response type a query declares through its generic argument.

    ``None`` for commands and events. A query subclassing an unparametrized
    ``Query`` answers with the TypeVar default (``Any``).

    Generic intermediate bases are followed, so ``ListUsers`` answers ``int``
    in::

        class PagedQuery(Query[T], Generic[T]): ...
        class ListUsers(PagedQuery[int]): ...
    """
    kind = kind_of(message_type)
    if not kind.is_query:
        return None

    marker = kind.marker
    # Most-derived first: a parametrized base binds the TypeVars its own
    # bases are parametrized with.
    bound: dict[Any, Any] = {}
    for klass in message_type.__mro__:
        metadata = getattr(klass, "__pydantic_generic_metadata__", None)
        if not metadata or metadata.get("origin") is None:
            continue
        origin = metadata["origin"]
        args = tuple(_substitute(arg, bound) for arg in metadata.get("args") or ())
        if origin is marker:
            if args and not isinstance(args[0], typing.TypeVar):
                return args[0]
            return Any
        parameters = origin.__pydantic_generic_metadata__.get("parameters") or ()
        bound.update(zip(parameters, args))
    return Any


__all__ = [
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
]
