"""Gateway adapter — turns discord.py callbacks into a typed event stream.

discord.py owns the websocket, heartbeats and resume/reconnect. This client
only converts what it receives into ``pinbot.ports.inbound`` events and
queues them for the dispatcher, which is the sole consumer.
"""

import asyncio
import logging
import sys
import traceback
from typing import Any, AsyncIterator, Optional

import discord

from pinbot.ports.inbound import (
    CommandInvocation,
    Event,
    InteractionInvoked,
    MessageAnnounced,
    OtherEvent,
    Ready,
    TargetMessage,
    TransportError,
)

log = logging.getLogger(__name__)

_CLOSED = object()


def _target_message(interaction: discord.Interaction) -> Optional[TargetMessage]:
    data = interaction.data or {}
    messages = (data.get("resolved") or {}).get("messages") or {}
    raw = messages.get(str(data.get("target_id"))) or next(iter(messages.values()), None)
    if raw is None:
        return None
    return TargetMessage(
        message_id=int(raw["id"]),
        channel_id=int(raw.get("channel_id") or interaction.channel_id),
    )


def to_invocation(interaction: discord.Interaction) -> CommandInvocation:
    """Convert an application command interaction to a CommandInvocation."""
    data = interaction.data or {}
    user = interaction.user
    channel = interaction.channel
    return CommandInvocation(
        interaction_id=interaction.id,
        application_id=interaction.application_id,
        token=interaction.token,
        command_name=data.get("name", ""),
        channel_id=interaction.channel_id,
        display_name=user.display_name if user is not None else None,
        channel_name=getattr(channel, "name", None),
        guild_id=interaction.guild_id,
        target=_target_message(interaction),
    )


def to_announcement(message: discord.Message) -> MessageAnnounced:
    return MessageAnnounced(
        message_id=message.id,
        channel_id=message.channel.id,
        author_id=message.author.id,
        kind=message.type.name,
    )


def describe_failure(exc: BaseException) -> str:
    """Human-readable reason the gateway connection could not continue."""
    if isinstance(exc, discord.LoginFailure):
        return f"authentication rejected: {exc}"
    if isinstance(exc, discord.PrivilegedIntentsRequired):
        return f"privileged intents not enabled for shard {exc.shard_id}"
    if isinstance(exc, discord.ConnectionClosed):
        return f"gateway closed with code {exc.code}: {exc.reason or 'no reason given'}"
    return f"{type(exc).__name__}: {exc}"


class PinBotClient(discord.Client):
    """Single-shard discord.Client that publishes typed events to a queue."""

    def __init__(self, **discord_kwargs: Any):
        intents = discord.Intents.none()
        intents.guilds = True
        intents.guild_messages = True
        discord_kwargs.setdefault("max_messages", None)
        super().__init__(intents=intents, shard_id=0, shard_count=1, **discord_kwargs)
        self._events: "asyncio.Queue[Any]" = asyncio.Queue()

    def publish(self, event: Event) -> None:
        self._events.put_nowait(event)

    def close_stream(self) -> None:
        self._events.put_nowait(_CLOSED)

    async def events(self) -> AsyncIterator[Event]:
        """Yield published events in arrival order until the stream is closed."""
        while True:
            event = await self._events.get()
            if event is _CLOSED:
                return
            yield event

    async def run_gateway(self, token: str) -> None:
        """Connect and stay connected; anything discord.py gives up on is fatal."""
        try:
            await self.start(token, reconnect=True)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.publish(TransportError(detail=describe_failure(e), fatal=True))
        finally:
            self.close_stream()

    # -- discord.py event callbacks --

    async def on_ready(self):
        if self.user is not None:
            self.publish(Ready(user_id=self.user.id))

    async def on_interaction(self, interaction: discord.Interaction):
        if interaction.type is discord.InteractionType.application_command:
            self.publish(InteractionInvoked(invocation=to_invocation(interaction)))
        else:
            self.publish(OtherEvent(name=f"interaction:{interaction.type.name}"))

    async def on_message(self, message: discord.Message):
        self.publish(to_announcement(message))

    async def on_disconnect(self):
        self.publish(TransportError(detail="gateway connection lost, waiting for reconnect"))

    async def on_error(self, event_method: str, /, *args: Any, **kwargs: Any) -> None:
        exc = sys.exc_info()[1]
        if exc is None:
            detail = f"unknown error in {event_method}"
        else:
            detail = f"error in {event_method}:\n" + "".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            ).rstrip()
        self.publish(TransportError(detail=detail))
