"""Inbound port — platform-agnostic gateway events."""

from dataclasses import dataclass
from typing import Optional, Union

# Message type name Discord uses for its automatic "X pinned a message" notice
PIN_NOTICE_KIND = "pins_add"


@dataclass(frozen=True)
class TargetMessage:
    """Message a context-menu command was invoked on."""

    message_id: int
    channel_id: int


@dataclass(frozen=True)
class CommandInvocation:
    """One user-triggered application command.

    ``token`` is single-use and short-lived: Discord expects the first
    response within a few seconds and accepts follow-ups for 15 minutes.
    """

    interaction_id: int
    application_id: int
    token: str
    command_name: str
    channel_id: int
    display_name: Optional[str] = None
    channel_name: Optional[str] = None
    guild_id: Optional[int] = None  # None → direct message context
    target: Optional[TargetMessage] = None


@dataclass(frozen=True)
class Ready:
    user_id: int


@dataclass(frozen=True)
class InteractionInvoked:
    invocation: CommandInvocation


@dataclass(frozen=True)
class MessageAnnounced:
    message_id: int
    channel_id: int
    author_id: int
    kind: str

    @property
    def is_pin_notice(self) -> bool:
        return self.kind == PIN_NOTICE_KIND


@dataclass(frozen=True)
class TransportError:
    """Connection-level failure, already classified by the transport."""

    detail: str
    fatal: bool = False


@dataclass(frozen=True)
class OtherEvent:
    name: str


Event = Union[Ready, InteractionInvoked, MessageAnnounced, TransportError, OtherEvent]
