"""Discord adapters built on discord.py."""

from pinbot.adapters.discord.gateway import PinBotClient, to_announcement, to_invocation
from pinbot.adapters.discord.rest import DiscordRestClient

__all__ = [
    "DiscordRestClient",
    "PinBotClient",
    "to_announcement",
    "to_invocation",
]
