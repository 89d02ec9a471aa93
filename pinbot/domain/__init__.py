"""Domain layer — pure Python, no framework dependencies."""

from pinbot.domain.dispatcher import EventDispatcher, is_own_pin_notice
from pinbot.domain.errors import ProtocolViolation
from pinbot.domain.handler import (
    COMMANDS,
    FAILURE_MESSAGE,
    GUILD_ONLY_MESSAGE,
    InteractionCommandHandler,
    Outcome,
    message_link,
    pin_content,
    resolve_pin_flag,
)
from pinbot.domain.identity import SessionIdentity
from pinbot.domain.policy import ErrorPolicy

__all__ = [
    "COMMANDS",
    "FAILURE_MESSAGE",
    "GUILD_ONLY_MESSAGE",
    "ErrorPolicy",
    "EventDispatcher",
    "InteractionCommandHandler",
    "Outcome",
    "ProtocolViolation",
    "SessionIdentity",
    "is_own_pin_notice",
    "message_link",
    "pin_content",
    "resolve_pin_flag",
]
