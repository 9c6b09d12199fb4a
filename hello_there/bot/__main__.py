"""
hello_there.bot.__main__ — Entry point for ``python -m hello_there.bot``
=========================================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (guild settings) — a bad file exits with status 1.
3. Create the HelloThereBot.
4. Start the bot; SIGINT / SIGTERM close the connection and exit cleanly.

Run with::

    python -m hello_there.bot                 # token from DISCORD_TOKEN
    python -m hello_there.bot <bot-token>     # or as the first argument
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys

import discord
from dotenv import load_dotenv

from hello_there.bot.core import HelloThereBot
from hello_there.config import load_config
from hello_there.errors import ConfigError

logger = logging.getLogger("hello_there")


def _configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
        datefmt="%H:%M:%S",
    )


def _resolve_token(argv: list[str]) -> str | None:
    token = argv[1] if len(argv) > 1 else os.getenv("DISCORD_TOKEN")
    if not token or token == "your-discord-bot-token-here":
        return None
    return token.strip()


async def _run(bot: HelloThereBot, token: str) -> None:
    loop = asyncio.get_running_loop()

    def _request_shutdown(sig: signal.Signals) -> None:
        logger.info("Received %s, shutting down gracefully…", sig.name)
        loop.create_task(bot.close())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _request_shutdown, sig)
        except NotImplementedError:  # Windows
            pass

    async with bot:
        await bot.start(token)


def main(argv: list[str] | None = None) -> int:
    """Bootstrap and run the bot.  Returns the process exit code."""
    argv = sys.argv if argv is None else argv
    _configure_logging()

    # 1. Environment variables (secrets).
    load_dotenv()

    token = _resolve_token(argv)
    if token is None:
        logger.critical(
            "DISCORD_TOKEN is not set.  "
            "Copy .env.example → .env and paste your bot token, or pass it as the first argument."
        )
        return 1

    # 2. Guild configuration.
    config_path = os.getenv("HELLO_THERE_CONFIG", "config.yaml")
    try:
        settings = load_config(config_path)
    except ConfigError as exc:
        logger.critical("Invalid configuration: %s", exc)
        return 1
    logger.info("Config loaded — %d guild(s), quiet-hours clock %s", len(settings.guilds), settings.timezone)

    # 3. Bot.
    bot = HelloThereBot(settings)

    # 4. Run (blocks until a signal closes the bot).
    logger.info("Starting hello-there…")
    try:
        asyncio.run(_run(bot, token))
    except discord.LoginFailure:
        logger.critical("Discord rejected the bot token")
        return 1
    except discord.DiscordException:
        logger.exception("Fatal Discord error")
        return 1
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")
    return 0


if __name__ == "__main__":
    sys.exit(main())
