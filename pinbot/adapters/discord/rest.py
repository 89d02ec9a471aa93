"""REST action client — implements RestActionPort over discord.py's HTTPClient."""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

import aiohttp
import discord
from discord.http import HTTPClient, Route

from pinbot.ports.outbound import ActionResult, InteractionResponse, LinkButton, ResponseKind

log = logging.getLogger(__name__)

# Discord JSON error code for "Maximum number of pins reached for the channel (50)"
MAX_PINS_REACHED = 30003
MISSING_PERMISSIONS = 50013

# Interaction callback types
_RESPONSE_TYPES = {
    ResponseKind.MESSAGE: 4,  # CHANNEL_MESSAGE_WITH_SOURCE
    ResponseKind.DEFERRED: 5,  # DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE
}

_ACTION_ROW = 1
_BUTTON = 2
_LINK_STYLE = 5


def failure_reason(exc: discord.HTTPException) -> str:
    """Classify an HTTP failure for the operational log."""
    if isinstance(exc, discord.Forbidden) or exc.code == MISSING_PERMISSIONS:
        return "missing_permissions"
    if exc.code == MAX_PINS_REACHED:
        return "pin_limit"
    if isinstance(exc, discord.NotFound):
        return "not_found"
    return "http_error"


def action_row(buttons: Sequence[LinkButton]) -> List[Dict[str, Any]]:
    """Component payload: one action row of link buttons."""
    return [
        {
            "type": _ACTION_ROW,
            "components": [
                {"type": _BUTTON, "style": _LINK_STYLE, "label": b.label, "url": b.url}
                for b in buttons
            ],
        }
    ]


class DiscordRestClient:
    """RestActionPort implementation using the bot's discord.py HTTP session."""

    def __init__(self, http: HTTPClient):
        self._http = http

    async def _action(self, route: Route, **kwargs) -> ActionResult:
        try:
            await self._http.request(route, **kwargs)
        except discord.HTTPException as e:
            return ActionResult(success=False, reason=failure_reason(e), error=str(e))
        except (OSError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            return ActionResult(success=False, reason="network_error", error=repr(e))
        return ActionResult(success=True)

    async def create_pin(
        self, channel_id: int, message_id: int, reason: Optional[str] = None
    ) -> ActionResult:
        route = Route(
            "PUT",
            "/channels/{channel_id}/pins/{message_id}",
            channel_id=channel_id,
            message_id=message_id,
        )
        return await self._action(route, reason=reason)

    async def delete_pin(
        self, channel_id: int, message_id: int, reason: Optional[str] = None
    ) -> ActionResult:
        route = Route(
            "DELETE",
            "/channels/{channel_id}/pins/{message_id}",
            channel_id=channel_id,
            message_id=message_id,
        )
        return await self._action(route, reason=reason)

    async def delete_message(self, channel_id: int, message_id: int) -> ActionResult:
        route = Route(
            "DELETE",
            "/channels/{channel_id}/messages/{message_id}",
            channel_id=channel_id,
            message_id=message_id,
        )
        return await self._action(route)

    async def create_interaction_response(
        self, interaction_id: int, token: str, response: InteractionResponse
    ) -> None:
        payload: Dict[str, Any] = {"type": _RESPONSE_TYPES[response.kind]}
        if response.content is not None:
            payload["data"] = {"content": response.content}
        route = Route(
            "POST",
            "/interactions/{interaction_id}/{interaction_token}/callback",
            interaction_id=interaction_id,
            interaction_token=token,
        )
        await self._http.request(route, json=payload)

    async def create_followup(
        self,
        application_id: int,
        token: str,
        content: Optional[str] = None,
        buttons: Sequence[LinkButton] = (),
    ) -> None:
        payload: Dict[str, Any] = {}
        if content is not None:
            payload["content"] = content
        if buttons:
            payload["components"] = action_row(buttons)
        route = Route(
            "POST",
            "/webhooks/{webhook_id}/{webhook_token}",
            webhook_id=application_id,
            webhook_token=token,
        )
        await self._http.request(route, json=payload)
