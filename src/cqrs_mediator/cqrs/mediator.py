"""Mediator — resolves and invokes the handler(s) registered for a message."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar, cast

from ..ports.mediator import IMediator
from ..primitives.exceptions import HandlerResolutionError
from .contract import HandlerContract
from .messages import AsyncCommand, AsyncQuery, Command, MessageKind, Query
from .wrappers import wrap_handler

if TYPE_CHECKING:
    from ..ports.resolution import MultiInstanceFactory, SingleInstanceFactory
    from .messages import AsyncEvent, Event
    from .wrappers import (
        AsyncCommandHandlerWrapper,
        AsyncEventHandlerWrapper,
        AsyncQueryHandlerWrapper,
        CommandHandlerWrapper,
        EventHandlerWrapper,
        HandlerWrapper,
        QueryHandlerWrapper,
    )

logger = logging.getLogger(__name__)

TResult = TypeVar("TResult")


class Mediator(IMediator):
    """Dispatches commands, queries and events to their handlers.

    For every dispatch the mediator computes the handler contract from the
    message's runtime type (and the response type for queries), asks the
    injected resolution port for the handler instance(s), wraps each one in
    a per-family adapter and invokes it. It keeps no state besides the two
    ports, so one instance can be shared by concurrent callers.

    Parameters
    ----------
    single_instance_factory:
        ``(contract) -> handler`` used for command and query contracts.
        Raising or returning ``None`` is reported as
        :class:`~cqrs_mediator.primitives.exceptions.HandlerResolutionError`.
    multi_instance_factory:
        ``(contract) -> iterable of handlers`` used for event contracts.
        An empty result is valid (no subscribers).
    """

    def __init__(
        self,
        single_instance_factory: SingleInstanceFactory,
        multi_instance_factory: MultiInstanceFactory,
    ) -> None:
        self._single_instance_factory = single_instance_factory
        self._multi_instance_factory = multi_instance_factory

    # ── Commands ─────────────────────────────────────────────────

    def send_command(self, command: Command) -> None:
        """Send a command to its single handler."""
        handler = cast(
            "CommandHandlerWrapper", self._get_handler(command, MessageKind.COMMAND)
        )
        handler.handle(command)

    async def send_command_async(self, command: AsyncCommand) -> None:
        """Send a command to its single asynchronous handler and await it."""
        handler = cast(
            "AsyncCommandHandlerWrapper",
            self._get_handler(command, MessageKind.ASYNC_COMMAND),
        )
        await handler.handle(command)

    # ── Queries ──────────────────────────────────────────────────

    def send_query(self, query: Query[TResult]) -> TResult:
        """Send a query to its single handler and return the response unchanged."""
        handler = cast(
            "QueryHandlerWrapper[TResult]",
            self._get_handler(query, MessageKind.QUERY),
        )
        return handler.handle(query)

    async def send_query_async(self, query: AsyncQuery[TResult]) -> TResult:
        """Send a query to its single asynchronous handler and await the response."""
        handler = cast(
            "AsyncQueryHandlerWrapper[TResult]",
            self._get_handler(query, MessageKind.ASYNC_QUERY),
        )
        return await handler.handle(query)

    # ── Events ───────────────────────────────────────────────────

    def publish_event(self, event: Event) -> None:
        """Publish an event to every subscribed handler, in resolution order.

        A failing handler stops the publication; the remaining handlers are
        not invoked and the error reaches the caller.
        """
        handlers = cast(
            "list[EventHandlerWrapper]", self._get_handlers(event, MessageKind.EVENT)
        )
        for handler in handlers:
            try:
                handler.handle(event)
            except Exception:
                logger.exception(
                    "Error executing handler %s for event %s",
                    handler.handler_name,
                    type(event).__name__,
                )
                raise

    async def publish_event_async(self, event: AsyncEvent) -> None:
        """Publish an event to every subscribed handler, one after the other.

        Each handler is awaited to completion before the next one starts.
        """
        handlers = cast(
            "list[AsyncEventHandlerWrapper]",
            self._get_handlers(event, MessageKind.ASYNC_EVENT),
        )
        for handler in handlers:
            try:
                await handler.handle(event)
            except Exception:
                logger.exception(
                    "Error executing handler %s for event %s",
                    handler.handler_name,
                    type(event).__name__,
                )
                raise

    # ── Family routing ───────────────────────────────────────────

    def send(self, request: Command | Query[TResult]) -> TResult | None:
        """Send a synchronous command or query, choosing the operation by family."""
        if isinstance(request, Command):
            self.send_command(request)
            return None
        if isinstance(request, Query):
            return self.send_query(request)
        msg = f"send() expects a Command or Query, got {type(request).__name__}"
        raise TypeError(msg)

    async def send_async(
        self, request: AsyncCommand | AsyncQuery[TResult]
    ) -> TResult | None:
        """Send an asynchronous command or query, choosing the operation by family."""
        if isinstance(request, AsyncCommand):
            await self.send_command_async(request)
            return None
        if isinstance(request, AsyncQuery):
            return await self.send_query_async(request)
        msg = (
            "send_async() expects an AsyncCommand or AsyncQuery, "
            f"got {type(request).__name__}"
        )
        raise TypeError(msg)

    # ── Internals ────────────────────────────────────────────────

    @staticmethod
    def _contract_for(message: Any, kind: MessageKind) -> HandlerContract:
        contract = HandlerContract.for_message(message)
        if contract.kind is not kind:
            msg = (
                f"Expected a {kind.marker.__name__} message, got "
                f"{type(message).__name__} ({contract.kind.marker.__name__})"
            )
            raise TypeError(msg)
        return contract

    def _get_handler(self, message: Any, kind: MessageKind) -> HandlerWrapper:
        """Resolve exactly one handler for *message* and wrap it."""
        contract = self._contract_for(message, kind)
        try:
            handler = self._single_instance_factory(contract)
        except HandlerResolutionError:
            raise
        except Exception as exc:
            raise HandlerResolutionError(contract) from exc

        if handler is None:
            raise HandlerResolutionError(contract)
        if isinstance(handler, (list, tuple)):
            raise HandlerResolutionError(
                contract,
                reason=f"resolution returned {len(handler)} candidates instead of one",
            )

        logger.debug("Resolved %s -> %s", contract, type(handler).__name__)
        return wrap_handler(contract, handler)

    def _get_handlers(self, event: Any, kind: MessageKind) -> list[HandlerWrapper]:
        """Resolve and wrap every handler subscribed to *event*, keeping order."""
        contract = self._contract_for(event, kind)
        instances = list(self._multi_instance_factory(contract) or ())
        if not instances:
            logger.debug("No handlers subscribed to %s", contract)
            return []

        logger.debug("Resolved %d handler(s) for %s", len(instances), contract)
        return [wrap_handler(contract, handler) for handler in instances]


__all__ = ["Mediator"]
