"""Pin / Unpin message command handling.

Every invocation moves through received → deferred → completed-ok or
completed-error, with no retries. ``handle`` is written as a single function
with early returns so each path ends in exactly one user-visible response.
"""

import logging
from enum import Enum
from typing import Dict, Optional

from pinbot.domain.errors import ProtocolViolation
from pinbot.ports.inbound import CommandInvocation
from pinbot.ports.outbound import (
    ActionResult,
    InteractionResponse,
    LinkButton,
    ResponseKind,
    RestActionPort,
)

log = logging.getLogger(__name__)

# command name → pin flag
COMMANDS: Dict[str, bool] = {
    "Pin Message": True,
    "Unpin Message": False,
}

GUILD_ONLY_MESSAGE = (
    "You can't pin messages in a direct message channel. Try in a server instead!"
)
FAILURE_MESSAGE = "Encountered some error, sorry about that... Try again?"
LINK_LABEL = "Message"
DISCORD_BASE_URL = "https://discord.com"

DEFER = InteractionResponse(kind=ResponseKind.DEFERRED)
GUILD_ONLY = InteractionResponse(kind=ResponseKind.MESSAGE, content=GUILD_ONLY_MESSAGE)


class Outcome(Enum):
    IGNORED = "ignored"
    GUILD_ONLY = "guild_only"
    COMPLETED_OK = "completed_ok"
    COMPLETED_ERROR = "completed_error"


def resolve_pin_flag(command_name: str) -> Optional[bool]:
    """True for pin, False for unpin, None for commands this bot doesn't own."""
    return COMMANDS.get(command_name)


def message_link(guild_id: int, channel_id: int, message_id: int) -> str:
    return f"{DISCORD_BASE_URL}/channels/{guild_id}/{channel_id}/{message_id}"


def pin_content(display_name: str, pin: bool) -> str:
    return f"\U0001F4CC **{display_name}** {'' if pin else 'un'}pinned message in this channel."


def audit_reason(invocation: CommandInvocation) -> Optional[str]:
    """Audit log reason for the pin request. Metadata only; may be None."""
    if not invocation.display_name and not invocation.channel_name:
        return None
    user = invocation.display_name or "unknown user"
    if invocation.channel_name:
        return f"Requested by {user} in #{invocation.channel_name}"
    return f"Requested by {user}"


class InteractionCommandHandler:
    """Runs one Pin/Unpin invocation against the REST API.

    Stateless across invocations. Errors from the deferral or the follow-up
    propagate to the caller; pin/unpin failures become the generic failure
    follow-up.
    """

    def __init__(self, rest: RestActionPort):
        self._rest = rest

    async def handle(self, invocation: CommandInvocation) -> Outcome:
        pin = resolve_pin_flag(invocation.command_name)
        if pin is None:
            return Outcome.IGNORED

        # Only allow pinning in guilds
        if invocation.guild_id is None:
            await self._rest.create_interaction_response(
                invocation.interaction_id, invocation.token, GUILD_ONLY
            )
            return Outcome.GUILD_ONLY

        target = invocation.target
        if target is None:
            raise ProtocolViolation(
                f"Message command {invocation.interaction_id} is missing resolved message"
            )
        if not invocation.display_name:
            raise ProtocolViolation(
                f"Could not resolve user for interaction {invocation.interaction_id}"
            )

        # Acknowledge before doing anything slow; the first-response window is a few seconds
        await self._rest.create_interaction_response(
            invocation.interaction_id, invocation.token, DEFER
        )

        reason = audit_reason(invocation)
        action = self._rest.create_pin if pin else self._rest.delete_pin
        try:
            result = await action(target.channel_id, target.message_id, reason)
        except Exception as e:
            result = ActionResult(success=False, reason="unexpected", error=repr(e))

        if not result.success:
            log.error(
                "Failed to %s message %s in channel %s (%s): %s",
                "pin" if pin else "unpin",
                target.message_id,
                target.channel_id,
                result.reason,
                result.error,
            )
            await self._rest.create_followup(
                invocation.application_id, invocation.token, content=FAILURE_MESSAGE
            )
            return Outcome.COMPLETED_ERROR

        content = pin_content(invocation.display_name, pin)
        button = LinkButton(
            label=LINK_LABEL,
            url=message_link(invocation.guild_id, target.channel_id, target.message_id),
        )
        log.info("[%s] %s", target.channel_id, content)
        await self._rest.create_followup(
            invocation.application_id, invocation.token, content=content, buttons=[button]
        )
        return Outcome.COMPLETED_OK
