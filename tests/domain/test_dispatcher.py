"""Tests for the event dispatch loop."""

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from pinbot.domain.dispatcher import EventDispatcher, is_own_pin_notice
from pinbot.domain.errors import ProtocolViolation
from pinbot.domain.handler import InteractionCommandHandler
from pinbot.domain.identity import SessionIdentity
from pinbot.ports.inbound import (
    PIN_NOTICE_KIND,
    CommandInvocation,
    InteractionInvoked,
    MessageAnnounced,
    OtherEvent,
    Ready,
    TargetMessage,
    TransportError,
)
from pinbot.ports.outbound import ActionResult


BOT_ID = 111
OTHER_ID = 222


def _make_rest() -> MagicMock:
    rest = MagicMock()
    rest.create_pin = AsyncMock(return_value=ActionResult(success=True))
    rest.delete_pin = AsyncMock(return_value=ActionResult(success=True))
    rest.delete_message = AsyncMock(return_value=ActionResult(success=True))
    rest.create_interaction_response = AsyncMock()
    rest.create_followup = AsyncMock()
    return rest


def _make_dispatcher(rest=None, handler=None) -> EventDispatcher:
    rest = rest or _make_rest()
    return EventDispatcher(handler or InteractionCommandHandler(rest), rest)


async def _stream(*events):
    for event in events:
        yield event


def _announce(message_id=1, author_id=BOT_ID, kind=PIN_NOTICE_KIND) -> MessageAnnounced:
    return MessageAnnounced(message_id=message_id, channel_id=5, author_id=author_id, kind=kind)


def _invoke(interaction_id=1, name="Pin Message") -> InteractionInvoked:
    return InteractionInvoked(CommandInvocation(
        interaction_id=interaction_id,
        application_id=9,
        token=f"tok-{interaction_id}",
        command_name=name,
        channel_id=5,
        display_name="Alice",
        guild_id=4,
        target=TargetMessage(100 + interaction_id, 5),
    ))


# ---------------------------------------------------------------------------
# Pin notice suppression
# ---------------------------------------------------------------------------

def test_is_own_pin_notice():
    identity = SessionIdentity()
    assert not is_own_pin_notice(_announce(), identity)

    identity.update(BOT_ID)
    assert is_own_pin_notice(_announce(), identity)
    assert not is_own_pin_notice(_announce(author_id=OTHER_ID), identity)
    assert not is_own_pin_notice(_announce(kind="default"), identity)


@pytest.mark.asyncio
async def test_own_pin_notice_deleted_others_left_alone():
    rest = _make_rest()
    dispatcher = _make_dispatcher(rest)

    fatal = await dispatcher.run(_stream(
        Ready(user_id=BOT_ID),
        _announce(message_id=1),
        _announce(message_id=2, author_id=OTHER_ID),
        _announce(message_id=3, kind="default"),
    ))

    assert fatal is False
    rest.delete_message.assert_awaited_once_with(5, 1)


@pytest.mark.asyncio
async def test_pin_notice_before_ready_is_ignored():
    rest = _make_rest()
    await _make_dispatcher(rest).run(_stream(_announce()))
    rest.delete_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_later_ready_overwrites_identity():
    rest = _make_rest()
    dispatcher = _make_dispatcher(rest)

    await dispatcher.run(_stream(
        Ready(user_id=BOT_ID),
        Ready(user_id=OTHER_ID),
        _announce(message_id=1, author_id=BOT_ID),
        _announce(message_id=2, author_id=OTHER_ID),
    ))

    assert dispatcher.identity.user_id == OTHER_ID
    rest.delete_message.assert_awaited_once_with(5, 2)


@pytest.mark.asyncio
async def test_delete_failure_does_not_stop_loop():
    rest = _make_rest()
    rest.delete_message.side_effect = [
        ActionResult(success=False, reason="missing_permissions", error="403"),
        RuntimeError("connection reset"),
        ActionResult(success=True),
    ]

    fatal = await _make_dispatcher(rest).run(_stream(
        Ready(user_id=BOT_ID), _announce(1), _announce(2), _announce(3),
    ))

    assert fatal is False
    assert rest.delete_message.await_count == 3


@pytest.mark.asyncio
async def test_suppression_interleaved_with_invocations():
    rest = _make_rest()

    await _make_dispatcher(rest).run(_stream(
        Ready(user_id=BOT_ID),
        _invoke(1),
        _announce(message_id=50),
        _invoke(2, name="Unpin Message"),
        _announce(message_id=51, author_id=OTHER_ID),
        _invoke(3),
        _announce(message_id=52),
    ))

    assert [c.args for c in rest.delete_message.await_args_list] == [(5, 50), (5, 52)]
    assert rest.create_pin.await_count == 2
    assert rest.delete_pin.await_count == 1
    assert rest.create_followup.await_count == 3


# ---------------------------------------------------------------------------
# Invocations
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_unrecognized_command_never_reaches_handler():
    handler = MagicMock()
    handler.handle = AsyncMock()

    await _make_dispatcher(handler=handler).run(_stream(_invoke(name="Translate")))

    handler.handle.assert_not_awaited()


@pytest.mark.asyncio
async def test_handler_errors_are_swallowed():
    handler = MagicMock()
    handler.handle = AsyncMock(side_effect=[
        RuntimeError("followup failed"),
        ProtocolViolation("missing resolved message"),
        None,
    ])
    rest = _make_rest()
    dispatcher = _make_dispatcher(rest, handler)

    fatal = await dispatcher.run(_stream(
        Ready(user_id=BOT_ID), _invoke(1), _invoke(2), _invoke(3), _announce(7),
    ))

    assert fatal is False
    assert handler.handle.await_count == 3
    rest.delete_message.assert_awaited_once_with(5, 7)
    assert dispatcher.in_flight == 0


@pytest.mark.asyncio
async def test_slow_invocation_does_not_block_intake():
    release = asyncio.Event()
    rest = _make_rest()

    async def slow_pin(*args):
        await release.wait()
        return ActionResult(success=True)

    rest.create_pin = AsyncMock(side_effect=slow_pin)
    dispatcher = _make_dispatcher(rest)

    await dispatcher.dispatch(Ready(user_id=BOT_ID))
    await dispatcher.dispatch(_invoke(1))
    await asyncio.sleep(0)
    assert dispatcher.in_flight == 1

    # Later events are handled while the pin call is still pending
    await dispatcher.dispatch(_announce(9))
    rest.delete_message.assert_awaited_once_with(5, 9)
    rest.create_followup.assert_not_awaited()

    release.set()
    await dispatcher.drain()
    rest.create_followup.assert_awaited_once()
    assert dispatcher.in_flight == 0


# ---------------------------------------------------------------------------
# Transport errors
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_non_fatal_error_keeps_consuming():
    rest = _make_rest()

    fatal = await _make_dispatcher(rest).run(_stream(
        Ready(user_id=BOT_ID),
        TransportError(detail="decode hiccup"),
        OtherEvent(name="typing_start"),
        _announce(1),
    ))

    assert fatal is False
    rest.delete_message.assert_awaited_once()


@pytest.mark.asyncio
async def test_fatal_error_stops_before_queued_events():
    rest = _make_rest()

    fatal = await _make_dispatcher(rest).run(_stream(
        Ready(user_id=BOT_ID),
        TransportError(detail="authentication rejected", fatal=True),
        _announce(1),
        _invoke(1),
    ))

    assert fatal is True
    rest.delete_message.assert_not_awaited()
    rest.create_interaction_response.assert_not_awaited()


@pytest.mark.asyncio
async def test_fatal_error_waits_for_in_flight_invocations():
    rest = _make_rest()

    fatal = await _make_dispatcher(rest).run(_stream(
        _invoke(1),
        TransportError(detail="session invalidated", fatal=True),
    ))

    assert fatal is True
    rest.create_followup.assert_awaited_once()


@pytest.mark.asyncio
async def test_connected_logged_once_on_first_ready(caplog):
    dispatcher = _make_dispatcher()

    with caplog.at_level(logging.INFO, logger="pinbot.domain.dispatcher"):
        await dispatcher.run(_stream(Ready(user_id=BOT_ID), Ready(user_id=BOT_ID)))

    assert caplog.text.count("Connection established. Listening for events...") == 1
