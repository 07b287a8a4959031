"""Type-erasing dispatch adapters.

The mediator only knows a message by its family marker (``Command``,
``Query[R]``...). Each wrapper closes over one resolved handler and the
contract it was resolved for, so the call site can invoke it through a
uniform ``handle(message)`` without knowing the concrete message type.
Wrappers live for a single dispatch and are never cached.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from ..primitives.exceptions import HandlerInvocationError, HandlerResolutionError
from .messages import MessageKind

if TYPE_CHECKING:
    from collections.abc import Callable

    from .contract import HandlerContract
    from .messages import AsyncCommand, AsyncEvent, AsyncQuery, Command, Event, Query

TResult = TypeVar("TResult")


def _bind(contract: HandlerContract, handler: Any) -> Callable[[Any], Any]:
    """Return the callable that performs ``handler.handle(message)``."""
    if isinstance(handler, type):
        raise HandlerResolutionError(
            contract,
            reason=f"resolved the class {handler.__name__} instead of an instance",
        )
    handle = getattr(handler, "handle", None)
    if callable(handle):
        return handle
    if callable(handler):
        return handler
    raise HandlerResolutionError(
        contract,
        reason=(
            f"{type(handler).__name__} has no handle() method and is not callable"
        ),
    )


class HandlerWrapper(ABC):
    """Uniform invocation surface over one resolved handler instance."""

    kind: ClassVar[MessageKind]

    def __init__(self, contract: HandlerContract, handler: Any) -> None:
        self.contract = contract
        self.handler = handler
        self._handle = _bind(contract, handler)

    @property
    def handler_name(self) -> str:
        return type(self.handler).__name__

    @abstractmethod
    def handle(self, message: Any) -> Any:
        """Invoke the wrapped handler with *message*."""
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.contract} -> {self.handler_name}>"


class _SyncHandlerWrapper(HandlerWrapper):
    def _call(self, message: Any) -> Any:
        result = self._handle(message)
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            msg = (
                f"{self.handler_name} returned an awaitable for the synchronous "
                f"contract {self.contract}; register it against the async variant"
            )
            raise HandlerInvocationError(msg)
        return result


class _AsyncHandlerWrapper(HandlerWrapper):
    async def _call(self, message: Any) -> Any:
        result = self._handle(message)
        if inspect.isawaitable(result):
            return await result
        return result


class CommandHandlerWrapper(_SyncHandlerWrapper):
    kind = MessageKind.COMMAND

    def handle(self, message: Command) -> None:
        self._call(message)


class AsyncCommandHandlerWrapper(_AsyncHandlerWrapper):
    kind = MessageKind.ASYNC_COMMAND

    async def handle(self, message: AsyncCommand) -> None:
        await self._call(message)


class QueryHandlerWrapper(_SyncHandlerWrapper, Generic[TResult]):
    kind = MessageKind.QUERY

    def handle(self, message: Query[TResult]) -> TResult:
        return self._call(message)  # type: ignore[no-any-return]


class AsyncQueryHandlerWrapper(_AsyncHandlerWrapper, Generic[TResult]):
    kind = MessageKind.ASYNC_QUERY

    async def handle(self, message: AsyncQuery[TResult]) -> TResult:
        return await self._call(message)  # type: ignore[no-any-return]


class EventHandlerWrapper(_SyncHandlerWrapper):
    kind = MessageKind.EVENT

    def handle(self, message: Event) -> None:
        self._call(message)


class AsyncEventHandlerWrapper(_AsyncHandlerWrapper):
    kind = MessageKind.ASYNC_EVENT

    async def handle(self, message: AsyncEvent) -> None:
        await self._call(message)


WRAPPER_TYPES: dict[MessageKind, type[HandlerWrapper]] = {
    wrapper.kind: wrapper
    for wrapper in (
        CommandHandlerWrapper,
        AsyncCommandHandlerWrapper,
        QueryHandlerWrapper,
        AsyncQueryHandlerWrapper,
        EventHandlerWrapper,
        AsyncEventHandlerWrapper,
    )
}


def wrap_handler(contract: HandlerContract, handler: Any) -> HandlerWrapper:
    """Build the wrapper matching *contract*'s family around *handler*."""
    return WRAPPER_TYPES[contract.kind](contract, handler)


__all__ = [
    "WRAPPER_TYPES",
    "AsyncCommandHandlerWrapper",
    "AsyncEventHandlerWrapper",
    "AsyncQueryHandlerWrapper",
    "CommandHandlerWrapper",
    "EventHandlerWrapper",
    "HandlerWrapper",
    "QueryHandlerWrapper",
    "wrap_handler",
]
