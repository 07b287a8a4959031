"""Resolution ports — how the mediator obtains handler instances."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..cqrs.contract import HandlerContract


@runtime_checkable
class SingleInstanceFactory(Protocol):
    """Resolve the one handler bound to a command or query contract.

    Implementations may raise, or return ``None``, when nothing is
    registered; the mediator turns both into
    :class:`~cqrs_mediator.primitives.exceptions.HandlerResolutionError`.
    """

    def __call__(self, contract: HandlerContract) -> Any: ...


@runtime_checkable
class MultiInstanceFactory(Protocol):
    """Resolve every handler subscribed to an event contract.

    Must return an empty iterable, not raise, when there are no
    subscribers. Handlers are invoked in the order returned.
    """

    def __call__(self, contract: HandlerContract) -> Iterable[Any]: ...
