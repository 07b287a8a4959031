"""In-memory handler registry implementing both resolution ports."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ...cqrs.contract import HandlerContract
from ...cqrs.handler import CONTRACT_TYPES, declared_contract
from ...cqrs.mediator import Mediator
from ...cqrs.messages import MessageKind
from ...primitives.exceptions import (
    HandlerNotRegisteredError,
    HandlerRegistrationError,
)

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

_COMMAND_KINDS = frozenset({MessageKind.COMMAND, MessageKind.ASYNC_COMMAND})
_QUERY_KINDS = frozenset({MessageKind.QUERY, MessageKind.ASYNC_QUERY})
_EVENT_KINDS = frozenset({MessageKind.EVENT, MessageKind.ASYNC_EVENT})


def _name(handler: Any) -> str:
    return handler.__name__ if isinstance(handler, type) else type(handler).__name__


class InMemoryHandlerRegistry:
    """Maps handler contracts to handlers and resolves them for the mediator.

    A handler may be registered as a *class* (a new instance is built with
    ``handler_factory`` on every resolution) or as an *instance* (returned
    as is on every resolution).

    **Conflict detection:** registering a second command handler (or query
    handler) for the same message type raises ``HandlerRegistrationError``.
    Multiple event handlers for the same event type are allowed and are
    resolved in registration order.

    Usage::

        registry = InMemoryHandlerRegistry()
        registry.register_query_handler(Ping, PingHandler)
        mediator = registry.create_mediator()
        mediator.send_query(Ping(message="Ping"))

    Parameters
    ----------
    handler_factory:
        Optional callable ``(handler_cls) -> handler_instance``.
        Defaults to simple ``handler_cls()`` construction.
    """

    def __init__(
        self, handler_factory: Callable[[type[Any]], Any] | None = None
    ) -> None:
        self._handler_factory: Callable[[type[Any]], Any] = handler_factory or (
            lambda cls: cls()
        )
        self._single: dict[HandlerContract, Any] = {}
        self._multi: dict[HandlerContract, list[Any]] = {}

    # ── Registration ─────────────────────────────────────────────

    def register_command_handler(self, command_type: type[Any], handler: Any) -> None:
        self._register(command_type, handler, _COMMAND_KINDS, "command")

    def register_query_handler(self, query_type: type[Any], handler: Any) -> None:
        self._register(query_type, handler, _QUERY_KINDS, "query")

    def register_event_handler(self, event_type: type[Any], handler: Any) -> None:
        self._register(event_type, handler, _EVENT_KINDS, "event")

    def register_handler(self, handler: Any) -> None:
        """Register *handler* for the message type its contract base declares.

        The contract base must match the message's family:
        ``CommandHandler[SomeEvent]`` or ``AsyncQueryHandler[SyncQuery, R]``
        raise ``HandlerRegistrationError``.
        """
        contract_base, message_type = declared_contract(handler)
        contract = self._contract(message_type)
        expected = CONTRACT_TYPES[contract.kind]
        if contract_base is not expected:
            msg = (
                f"Cannot register {_name(handler)}: it implements "
                f"{contract_base.__name__} but {message_type.__name__} is a "
                f"{contract.kind.marker.__name__} and needs {expected.__name__}"
            )
            raise HandlerRegistrationError(msg)
        if contract.is_multicast:
            self._add_event_handler(contract, handler)
        else:
            self._set_single_handler(contract, handler)

    def _register(
        self,
        message_type: type[Any],
        handler: Any,
        kinds: frozenset[MessageKind],
        family: str,
    ) -> None:
        contract = self._contract(message_type)
        if contract.kind not in kinds:
            msg = (
                f"Cannot register {_name(handler)} as {family} handler: "
                f"{message_type.__name__} is a {contract.kind.marker.__name__}"
            )
            raise HandlerRegistrationError(msg)
        if contract.is_multicast:
            self._add_event_handler(contract, handler)
        else:
            self._set_single_handler(contract, handler)

    @staticmethod
    def _contract(message_type: type[Any]) -> HandlerContract:
        try:
            return HandlerContract.for_message_type(message_type)
        except TypeError as exc:
            raise HandlerRegistrationError(str(exc)) from exc

    def _set_single_handler(self, contract: HandlerContract, handler: Any) -> None:
        existing = self._single.get(contract)
        if existing is not None and existing is not handler:
            msg = (
                f"Duplicate handler for {contract.message_type.__name__}: "
                f"{_name(existing)} already registered, "
                f"cannot register {_name(handler)}"
            )
            raise HandlerRegistrationError(msg)
        self._single[contract] = handler
        logger.debug("Registered handler %s -> %s", contract, _name(handler))

    def _add_event_handler(self, contract: HandlerContract, handler: Any) -> None:
        handlers = self._multi.setdefault(contract, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug("Registered event handler %s -> %s", contract, _name(handler))

    # ── Resolution ports ─────────────────────────────────────────

    def resolve_one(self, contract: HandlerContract) -> Any:
        """Single-instance port: the handler bound to *contract*."""
        handler = self._single.get(contract)
        if handler is None:
            raise HandlerNotRegisteredError(contract)
        return self._instantiate(handler)

    def resolve_many(self, contract: HandlerContract) -> list[Any]:
        """Multi-instance port: every handler subscribed to *contract*, in order."""
        return [self._instantiate(h) for h in self._multi.get(contract, [])]

    def _instantiate(self, handler: Any) -> Any:
        if isinstance(handler, type):
            return self._handler_factory(handler)
        return handler

    def create_mediator(self) -> Mediator:
        """Build a mediator resolving handlers from this registry."""
        return Mediator(self.resolve_one, self.resolve_many)

    # ── Introspection ────────────────────────────────────────────

    def get_registered_handlers(self) -> dict[str, dict[str, Any]]:
        """Return a snapshot of all registered handlers (for debugging)."""
        return {
            "single": {str(k): _name(v) for k, v in self._single.items()},
            "multi": {
                str(k): [_name(h) for h in v] for k, v in self._multi.items()
            },
        }

    # ── Cleanup ──────────────────────────────────────────────────

    def clear(self) -> None:
        """Clear all registered handlers (testing utility)."""
        self._single.clear()
        self._multi.clear()


__all__ = ["InMemoryHandlerRegistry"]
