"""IMediator — the public dispatch surface."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeVar

if TYPE_CHECKING:
    from ..cqrs.messages import (
        AsyncCommand,
        AsyncEvent,
        AsyncQuery,
        Command,
        Event,
        Query,
    )

TResult = TypeVar("TResult")


class IMediator(Protocol):
    """
    Interface for sending commands and queries to a single handler and
    publishing events to any number of handlers.
    """

    def send_command(self, command: Command) -> None: ...

    async def send_command_async(self, command: AsyncCommand) -> None: ...

    def send_query(self, query: Query[TResult]) -> TResult: ...

    async def send_query_async(self, query: AsyncQuery[TResult]) -> TResult: ...

    def publish_event(self, event: Event) -> None: ...

    async def publish_event_async(self, event: AsyncEvent) -> None: ...
