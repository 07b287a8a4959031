"""HandlerContract — the identity handed to the resolution ports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .handler import CONTRACT_TYPES
from .messages import MessageKind, kind_of, response_type_of


def _type_name(tp: Any) -> str:
    return tp.__name__ if isinstance(tp, type) else repr(tp)


@dataclass(frozen=True)
class HandlerContract:
    """Identity of the handler contract a message is dispatched to.

    Combines the message family, the exact runtime message type and, for
    queries, the declared response type. Hashable, so resolution ports can
    key their registrations on it directly.
    """

    kind: MessageKind
    message_type: type[Any]
    response_type: Any = None

    @classmethod
    def for_message_type(cls, message_type: type[Any]) -> HandlerContract:
        """Compute the contract for *message_type* (``TypeError`` if not a message)."""
        return cls(
            kind=kind_of(message_type),
            message_type=message_type,
            response_type=response_type_of(message_type),
        )

    @classmethod
    def for_message(cls, message: Any) -> HandlerContract:
        """Compute the contract from the runtime type of *message*."""
        return cls.for_message_type(type(message))

    @property
    def handler_type(self) -> type[Any]:
        """The abstract handler base implementing this contract."""
        return CONTRACT_TYPES[self.kind]

    @property
    def is_multicast(self) -> bool:
        return self.kind.is_multicast

    def __str__(self) -> str:
        params = [_type_name(self.message_type)]
        if self.kind.is_query:
            params.append(_type_name(self.response_type))
        return f"{self.handler_type.__name__}[{', '.join(params)}]"


__all__ = ["HandlerContract"]
