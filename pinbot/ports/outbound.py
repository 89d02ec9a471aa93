"""Outbound ports — interfaces for the platform's REST API."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, Sequence, runtime_checkable


@dataclass
class ActionResult:
    """Unified result type for pin, unpin and delete requests."""

    success: bool
    # missing_permissions | pin_limit | not_found | http_error | network_error | unexpected
    reason: Optional[str] = None
    error: Optional[str] = None


class ResponseKind(Enum):
    MESSAGE = "message"  # immediate, final response
    DEFERRED = "deferred"  # "thinking…" acknowledgment, follow-up comes later


@dataclass(frozen=True)
class InteractionResponse:
    kind: ResponseKind
    content: Optional[str] = None


@dataclass(frozen=True)
class LinkButton:
    label: str
    url: str


@runtime_checkable
class RestActionPort(Protocol):
    """Interface for the REST calls the bot performs.

    Pin and delete calls report failure through ``ActionResult``;
    interaction responses and follow-ups raise on failure.
    """

    async def create_pin(
        self, channel_id: int, message_id: int, reason: Optional[str] = None
    ) -> ActionResult: ...

    async def delete_pin(
        self, channel_id: int, message_id: int, reason: Optional[str] = None
    ) -> ActionResult: ...

    async def delete_message(self, channel_id: int, message_id: int) -> ActionResult: ...

    async def create_interaction_response(
        self, interaction_id: int, token: str, response: InteractionResponse
    ) -> None: ...

    async def create_followup(
        self,
        application_id: int,
        token: str,
        content: Optional[str] = None,
        buttons: Sequence[LinkButton] = (),
    ) -> None: ...
