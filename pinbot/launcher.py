"""Launcher — wires the gateway, REST client and dispatcher together."""

import asyncio
import logging
import sys
from typing import Optional

import discord

from pinbot.adapters.discord.gateway import PinBotClient
from pinbot.adapters.discord.rest import DiscordRestClient
from pinbot.config import AppConfig, ConfigError
from pinbot.domain.dispatcher import EventDispatcher
from pinbot.domain.handler import InteractionCommandHandler

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_CONFIG = 2


def setup_logging(level: str = "INFO") -> None:
    """Root logging through discord.py's handler and formatter."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    discord.utils.setup_logging(level=numeric)


async def run(config: AppConfig, client: Optional[PinBotClient] = None) -> int:
    """Run until the gateway stream ends. Returns the process exit code."""
    client = client or PinBotClient()
    rest = DiscordRestClient(client.http)
    dispatcher = EventDispatcher(InteractionCommandHandler(rest), rest)

    gateway = asyncio.create_task(client.run_gateway(config.token))
    log.info("Connecting to the Discord gateway...")
    try:
        fatal = await dispatcher.run(client.events())
    finally:
        if not client.is_closed():
            await client.close()
        await gateway
    return EXIT_FATAL if fatal else EXIT_OK


def main() -> None:
    try:
        config = AppConfig.load()
    except ConfigError as e:
        print(e, file=sys.stderr)
        sys.exit(EXIT_CONFIG)

    setup_logging(config.log_level)
    try:
        code = asyncio.run(run(config))
    except KeyboardInterrupt:
        code = EXIT_OK
    sys.exit(code)


if __name__ == "__main__":
    main()
