"""
hello_there.bot.cogs.roles — Opt-In Slash Commands
====================================================

- /voice-spam — join the guild's announcement role
- /no-spam    — leave it again

Both are looked up in :data:`hello_there.engine.registry.COMMANDS`.  Success
is acknowledged ephemerally; a failure is logged and left unacknowledged.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from hello_there.engine.registry import COMMANDS, command_action
from hello_there.errors import ResolutionError, UnknownGuildError
from hello_there.services.context import scoped_logger

if TYPE_CHECKING:
    from hello_there.bot.core import HelloThereBot

logger = logging.getLogger(__name__)


class Roles(commands.Cog, name="Roles"):
    """Self-service opt in / opt out of voice announcements."""

    def __init__(self, bot: HelloThereBot) -> None:
        self.bot = bot

    @app_commands.command(name="voice-spam", description=COMMANDS["voice-spam"].description)
    @app_commands.guild_only()
    async def voice_spam(self, interaction: discord.Interaction) -> None:
        await self.toggle_from_command(interaction, "voice-spam")

    @app_commands.command(name="no-spam", description=COMMANDS["no-spam"].description)
    @app_commands.guild_only()
    async def no_spam(self, interaction: discord.Interaction) -> None:
        await self.toggle_from_command(interaction, "no-spam")

    async def toggle_from_command(self, interaction: discord.Interaction, command_name: str) -> bool:
        """Run the registered action for *command_name* on the invoking member."""
        action = command_action(command_name)
        log = scoped_logger(
            logger, guild=interaction.guild_id, user=interaction.user.name, command=command_name,
        )

        try:
            request = self.bot.role_sync.for_command(
                interaction.guild_id, interaction.user.id, command_name,
            )
        except UnknownGuildError:
            log.warning("Command used in an unconfigured guild")
            return False
        except ResolutionError as exc:
            log.error("Cannot toggle opt-in role: %s", exc)
            return False

        if not await self.bot.role_sync.toggle(request, log):
            return False

        try:
            await interaction.response.send_message(action.ack_text, ephemeral=True)
        except discord.HTTPException as exc:
            log.warning("Could not acknowledge command: %s", exc)
        return True


async def setup(bot: HelloThereBot) -> None:
    await bot.add_cog(Roles(bot))
