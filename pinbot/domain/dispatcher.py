"""Event dispatch loop — the single consumer of the gateway event stream."""

import asyncio
import logging
from typing import AsyncIterator, Optional, Set

from pinbot.domain.errors import ProtocolViolation
from pinbot.domain.handler import InteractionCommandHandler, resolve_pin_flag
from pinbot.domain.identity import SessionIdentity
from pinbot.domain.policy import ErrorPolicy
from pinbot.ports.inbound import (
    CommandInvocation,
    Event,
    InteractionInvoked,
    MessageAnnounced,
    OtherEvent,
    Ready,
    TransportError,
)
from pinbot.ports.outbound import RestActionPort

log = logging.getLogger(__name__)

CONNECTED_MESSAGE = "Connection established. Listening for events..."


def is_own_pin_notice(event: MessageAnnounced, identity: SessionIdentity) -> bool:
    """Was this "X pinned a message" notice caused by the bot itself?"""
    return event.is_pin_notice and identity.is_self(event.author_id)


class EventDispatcher:
    """Routes gateway events one at a time, in arrival order.

    Command invocations run on their own tasks so a slow REST call never
    holds up intake of later events.
    """

    def __init__(
        self,
        handler: InteractionCommandHandler,
        rest: RestActionPort,
        identity: Optional[SessionIdentity] = None,
        policy: Optional[ErrorPolicy] = None,
    ):
        self.handler = handler
        self._rest = rest
        self.identity = identity or SessionIdentity()
        self.policy = policy or ErrorPolicy()
        self._tasks: Set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def run(self, events: AsyncIterator[Event]) -> bool:
        """Consume ``events`` until the stream ends or a fatal error arrives.

        Returns True when stopped by a fatal transport error.
        """
        try:
            async for event in events:
                if not await self.dispatch(event):
                    return True
            return False
        finally:
            await self.drain()

    async def dispatch(self, event: Event) -> bool:
        """Handle one event. Returns False when the loop must stop."""
        if isinstance(event, Ready):
            if not self.identity.known:
                log.info(CONNECTED_MESSAGE)
            self.identity.update(event.user_id)
            log.info("Ready as user %s", event.user_id)
        elif isinstance(event, InteractionInvoked):
            self._schedule(event.invocation)
        elif isinstance(event, MessageAnnounced):
            await self._on_announcement(event)
        elif isinstance(event, TransportError):
            return self.policy.apply(event)
        elif isinstance(event, OtherEvent):
            pass
        return True

    async def drain(self) -> None:
        """Wait for every in-flight invocation to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _schedule(self, invocation: CommandInvocation) -> None:
        if resolve_pin_flag(invocation.command_name) is None:
            return
        task = asyncio.create_task(self._run_invocation(invocation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_invocation(self, invocation: CommandInvocation) -> None:
        try:
            await self.handler.handle(invocation)
        except ProtocolViolation:
            log.exception("Malformed interaction %s, aborting", invocation.interaction_id)
        except Exception as e:
            log.error("Command failed (%s): %s", invocation.interaction_id, e)

    async def _on_announcement(self, event: MessageAnnounced) -> None:
        # Delete Discord's default "x pinned a message" notice, the follow-up replaces it
        if not is_own_pin_notice(event, self.identity):
            return
        try:
            result = await self._rest.delete_message(event.channel_id, event.message_id)
        except Exception as e:
            log.error("Failed to delete pin message %s: %s", event.message_id, e)
            return
        if not result.success:
            log.error(
                "Failed to delete pin message %s in channel %s (%s): %s",
                event.message_id,
                event.channel_id,
                result.reason,
                result.error,
            )
