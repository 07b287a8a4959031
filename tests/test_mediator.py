import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from cqrs_mediator.cqrs.contract import HandlerContract
from cqrs_mediator.cqrs.handler import (
    AsyncCommandHandler,
    AsyncEventHandler,
    AsyncQueryHandler,
    CommandHandler,
    EventHandler,
    QueryHandler,
)
from cqrs_mediator.cqrs.mediator import Mediator
from cqrs_mediator.cqrs.messages import (
    AsyncCommand,
    AsyncEvent,
    AsyncQuery,
    Command,
    Event,
    MessageKind,
    Query,
)
from cqrs_mediator.primitives.exceptions import (
    HandlerNotRegisteredError,
    HandlerResolutionError,
)

# --- Mock Models ---


class MyCommand(Command):
    name: str


class MyAsyncCommand(AsyncCommand):
    name: str


class MyQuery(Query[str]):
    id: str


class MyAsyncQuery(AsyncQuery[int]):
    id: str


class MyEvent(Event):
    id: str


class MyAsyncEvent(AsyncEvent):
    id: str


def _mediator(single: object = None, many: object = None) -> Mediator:
    single_factory = MagicMock(return_value=single)
    multi_factory = MagicMock(return_value=many if many is not None else [])
    return Mediator(single_factory, multi_factory)


# --- Commands ---


def test_send_command_resolves_contract_and_invokes_handler() -> None:
    handler = MagicMock(spec=CommandHandler)
    single_factory = MagicMock(return_value=handler)
    mediator = Mediator(single_factory, MagicMock())

    cmd = MyCommand(name="test")
    result = mediator.send_command(cmd)

    assert result is None
    single_factory.assert_called_once_with(
        HandlerContract(MessageKind.COMMAND, MyCommand)
    )
    handler.handle.assert_called_once_with(cmd)


@pytest.mark.asyncio
async def test_send_command_async_awaits_handler() -> None:
    handler = AsyncMock(spec=AsyncCommandHandler)
    single_factory = MagicMock(return_value=handler)
    mediator = Mediator(single_factory, MagicMock())

    cmd = MyAsyncCommand(name="test")
    await mediator.send_command_async(cmd)

    single_factory.assert_called_once_with(
        HandlerContract(MessageKind.ASYNC_COMMAND, MyAsyncCommand)
    )
    handler.handle.assert_awaited_once_with(cmd)


# --- Queries ---


def test_send_query_returns_handler_result_unchanged() -> None:
    response = object()
    handler = MagicMock(spec=QueryHandler)
    handler.handle.return_value = response
    single_factory = MagicMock(return_value=handler)
    mediator = Mediator(single_factory, MagicMock())

    qry = MyQuery(id="123")

    assert mediator.send_query(qry) is response
    single_factory.assert_called_once_with(
        HandlerContract(MessageKind.QUERY, MyQuery, str)
    )
    handler.handle.assert_called_once_with(qry)


@pytest.mark.asyncio
async def test_send_query_async_returns_awaited_result() -> None:
    handler = AsyncMock(spec=AsyncQueryHandler)
    handler.handle.return_value = 42
    single_factory = MagicMock(return_value=handler)
    mediator = Mediator(single_factory, MagicMock())

    qry = MyAsyncQuery(id="123")

    assert await mediator.send_query_async(qry) == 42
    single_factory.assert_called_once_with(
        HandlerContract(MessageKind.ASYNC_QUERY, MyAsyncQuery, int)
    )
    handler.handle.assert_awaited_once_with(qry)


# --- Resolution failures ---


def test_send_query_without_handler_raises_resolution_error() -> None:
    mediator = _mediator(single=None)

    with pytest.raises(HandlerResolutionError, match="Handler was not found") as exc:
        mediator.send_query(MyQuery(id="1"))

    assert exc.value.message_type is MyQuery
    assert exc.value.contract == HandlerContract.for_message_type(MyQuery)


def test_resolution_port_errors_are_wrapped_with_cause() -> None:
    original = LookupError("container not configured")
    mediator = Mediator(MagicMock(side_effect=original), MagicMock())

    with pytest.raises(HandlerResolutionError) as exc:
        mediator.send_command(MyCommand(name="x"))

    assert exc.value.__cause__ is original


def test_resolution_errors_raised_by_the_port_are_not_rewrapped() -> None:
    contract = HandlerContract.for_message_type(MyCommand)
    original = HandlerResolutionError(contract, reason="custom")
    mediator = Mediator(MagicMock(side_effect=original), MagicMock())

    with pytest.raises(HandlerResolutionError) as exc:
        mediator.send_command(MyCommand(name="x"))

    assert exc.value is original


def test_registry_miss_is_reported_as_resolution_error() -> None:
    def resolve_one(contract: HandlerContract) -> object:
        raise HandlerNotRegisteredError(contract)

    mediator = Mediator(resolve_one, MagicMock())

    with pytest.raises(HandlerResolutionError) as exc:
        mediator.send_command(MyCommand(name="x"))

    assert isinstance(exc.value.__cause__, HandlerNotRegisteredError)


def test_ambiguous_resolution_is_rejected() -> None:
    mediator = _mediator(single=[MagicMock(), MagicMock()])

    with pytest.raises(HandlerResolutionError, match="2 candidates"):
        mediator.send_query(MyQuery(id="1"))


@pytest.mark.asyncio
async def test_async_send_fails_when_awaited_not_when_called() -> None:
    single_factory = MagicMock(return_value=None)
    mediator = Mediator(single_factory, MagicMock())

    pending = mediator.send_query_async(MyAsyncQuery(id="1"))
    single_factory.assert_not_called()

    with pytest.raises(HandlerResolutionError):
        await pending


@pytest.mark.asyncio
async def test_async_send_command_without_handler_raises() -> None:
    mediator = _mediator(single=None)

    with pytest.raises(HandlerResolutionError):
        await mediator.send_command_async(MyAsyncCommand(name="x"))


def test_handler_errors_are_not_translated() -> None:
    handler = MagicMock()
    handler.handle.side_effect = ValueError("boom")
    mediator = _mediator(single=handler)

    with pytest.raises(ValueError, match="boom"):
        mediator.send_command(MyCommand(name="x"))


# --- Family checks ---


def test_operation_rejects_message_of_another_family() -> None:
    single_factory = MagicMock()
    mediator = Mediator(single_factory, MagicMock())

    with pytest.raises(TypeError, match="Expected a Command message"):
        mediator.send_command(MyAsyncCommand(name="x"))  # type: ignore[arg-type]

    single_factory.assert_not_called()


def test_operation_rejects_non_messages() -> None:
    mediator = _mediator()

    with pytest.raises(TypeError, match="is not a message type"):
        mediator.publish_event("hello")  # type: ignore[arg-type]


# --- Events ---


def test_publish_event_without_handlers_is_a_no_op(caplog) -> None:
    caplog.set_level(logging.DEBUG)
    multi_factory = MagicMock(return_value=[])
    mediator = Mediator(MagicMock(), multi_factory)

    mediator.publish_event(MyEvent(id="1"))

    multi_factory.assert_called_once_with(
        HandlerContract(MessageKind.EVENT, MyEvent)
    )
    assert "No handlers subscribed" in caplog.text


def test_publish_event_invokes_all_handlers_in_order() -> None:
    order: list[str] = []

    class Recorder(EventHandler[MyEvent]):
        def __init__(self, name: str) -> None:
            self.name = name

        def handle(self, message: MyEvent) -> None:
            order.append(self.name)

    handlers = [Recorder("first"), Recorder("second"), Recorder("third")]
    mediator = _mediator(many=handlers)

    mediator.publish_event(MyEvent(id="1"))

    assert order == ["first", "second", "third"]


def test_publish_event_failure_aborts_remaining_handlers(caplog) -> None:
    first, failing, last = MagicMock(), MagicMock(), MagicMock()
    failing.handle.side_effect = RuntimeError("subscriber failed")
    mediator = _mediator(many=[first, failing, last])

    with pytest.raises(RuntimeError, match="subscriber failed"):
        mediator.publish_event(MyEvent(id="1"))

    first.handle.assert_called_once()
    failing.handle.assert_called_once()
    last.handle.assert_not_called()
    assert "Error executing handler" in caplog.text


@pytest.mark.asyncio
async def test_publish_event_async_without_handlers_is_a_no_op() -> None:
    mediator = _mediator(many=[])

    await mediator.publish_event_async(MyAsyncEvent(id="1"))


@pytest.mark.asyncio
async def test_publish_event_async_runs_handlers_sequentially() -> None:
    timeline: list[str] = []

    class SlowHandler(AsyncEventHandler[MyAsyncEvent]):
        def __init__(self, name: str) -> None:
            self.name = name

        async def handle(self, message: MyAsyncEvent) -> None:
            timeline.append(f"start:{self.name}")
            await asyncio.sleep(0.01)
            timeline.append(f"end:{self.name}")

    mediator = _mediator(many=[SlowHandler("a"), SlowHandler("b")])

    await mediator.publish_event_async(MyAsyncEvent(id="1"))

    assert timeline == ["start:a", "end:a", "start:b", "end:b"]


@pytest.mark.asyncio
async def test_publish_event_async_failure_aborts_remaining_handlers() -> None:
    first, failing, last = AsyncMock(), AsyncMock(), AsyncMock()
    failing.handle.side_effect = RuntimeError("subscriber failed")
    mediator = _mediator(many=[first, failing, last])

    with pytest.raises(RuntimeError, match="subscriber failed"):
        await mediator.publish_event_async(MyAsyncEvent(id="1"))

    first.handle.assert_awaited_once()
    failing.handle.assert_awaited_once()
    last.handle.assert_not_called()


def test_publish_event_accepts_generators_from_the_port() -> None:
    handler = MagicMock()
    mediator = Mediator(MagicMock(), MagicMock(return_value=(h for h in [handler])))

    event = MyEvent(id="1")
    mediator.publish_event(event)

    handler.handle.assert_called_once_with(event)


# --- Family routing ---


def test_send_routes_commands_and_queries() -> None:
    handler = MagicMock()
    handler.handle.return_value = "answer"
    mediator = _mediator(single=handler)

    assert mediator.send(MyCommand(name="x")) is None
    assert mediator.send(MyQuery(id="1")) == "answer"
    assert handler.handle.call_count == 2


def test_send_rejects_events() -> None:
    mediator = _mediator()

    with pytest.raises(TypeError, match="expects a Command or Query"):
        mediator.send(MyEvent(id="1"))  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_send_async_routes_commands_and_queries() -> None:
    handler = AsyncMock()
    handler.handle.return_value = 7
    mediator = _mediator(single=handler)

    assert await mediator.send_async(MyAsyncCommand(name="x")) is None
    assert await mediator.send_async(MyAsyncQuery(id="1")) == 7


@pytest.mark.asyncio
async def test_send_async_rejects_sync_messages() -> None:
    mediator = _mediator()

    with pytest.raises(TypeError, match="expects an AsyncCommand or AsyncQuery"):
        await mediator.send_async(MyCommand(name="x"))  # type: ignore[arg-type]
