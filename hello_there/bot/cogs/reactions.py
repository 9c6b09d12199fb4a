"""
hello_there.bot.cogs.reactions — Reaction-Role Listener
=========================================================

Adding a mapped emoji on a guild's management message grants the mapped
role; removing it revokes the role.  Reactions anywhere else, or with an
unmapped emoji, are ignored.

Uses raw events so the management message doesn't need to be cached.
Failures have no user-facing channel and are logged only.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from hello_there.engine.events import ReactionEvent
from hello_there.engine.registry import REACTION_DIRECTIONS
from hello_there.errors import UnknownGuildError
from hello_there.services.context import scoped_logger

if TYPE_CHECKING:
    from hello_there.bot.core import HelloThereBot

logger = logging.getLogger(__name__)


def reaction_from(payload: discord.RawReactionActionEvent) -> ReactionEvent:
    """Build the engine's view of a raw reaction payload.

    ``payload.member`` is only set on adds; removes fall back to ``is_bot=False``
    and the bot's own user ID is filtered by the caller.
    """
    member = payload.member
    return ReactionEvent(
        guild_id=payload.guild_id,
        channel_id=payload.channel_id,
        message_id=payload.message_id,
        user_id=payload.user_id,
        emoji_name=payload.emoji.name or str(payload.emoji),
        is_bot=bool(member is not None and member.bot),
    )


class Reactions(commands.Cog, name="Reactions"):
    """Grants and revokes roles from reactions on the management message."""

    def __init__(self, bot: HelloThereBot) -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent) -> None:
        await self._dispatch(payload, "add")

    @commands.Cog.listener()
    async def on_raw_reaction_remove(self, payload: discord.RawReactionActionEvent) -> None:
        await self._dispatch(payload, "remove")

    async def _dispatch(self, payload: discord.RawReactionActionEvent, kind: str) -> None:
        try:
            await self._handle_reaction(payload, kind)
        except UnknownGuildError:
            logger.warning("Reaction from unknown guild %s ignored", payload.guild_id)
        except Exception:
            logger.exception(
                "Error processing reaction %s on message %s from user %s",
                kind, payload.message_id, payload.user_id,
            )

    async def _handle_reaction(self, payload: discord.RawReactionActionEvent, kind: str) -> None:
        """Inner reaction handler (separated for error isolation)."""
        if payload.guild_id is None:
            return  # DMs
        if self.bot.user is not None and payload.user_id == self.bot.user.id:
            return

        event = reaction_from(payload)
        request = self.bot.role_sync.for_reaction(event, REACTION_DIRECTIONS[kind])
        if request is None:
            return

        log = scoped_logger(logger, guild=event.guild_id, user=event.user_id, emoji=event.emoji_name)
        await self.bot.role_sync.toggle(request, log)


async def setup(bot: HelloThereBot) -> None:
    await bot.add_cog(Reactions(bot))
