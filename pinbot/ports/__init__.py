"""Port interfaces (Hexagonal Architecture)."""

from pinbot.ports.inbound import (
    PIN_NOTICE_KIND,
    CommandInvocation,
    Event,
    InteractionInvoked,
    MessageAnnounced,
    OtherEvent,
    Ready,
    TargetMessage,
    TransportError,
)
from pinbot.ports.outbound import (
    ActionResult,
    InteractionResponse,
    LinkButton,
    ResponseKind,
    RestActionPort,
)

__all__ = [
    "PIN_NOTICE_KIND",
    "CommandInvocation",
    "Event",
    "InteractionInvoked",
    "MessageAnnounced",
    "OtherEvent",
    "Ready",
    "TargetMessage",
    "TransportError",
    "ActionResult",
    "InteractionResponse",
    "LinkButton",
    "ResponseKind",
    "RestActionPort",
]
