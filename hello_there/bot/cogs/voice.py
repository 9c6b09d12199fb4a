"""
hello_there.bot.cogs.voice — Voice Arrival Listener
=====================================================

Normalizes ``on_voice_state_update`` into a :class:`VoiceTransition` and
hands it to the arrival service, which decides on the join sound and the
announcement.

Presence updates are only logged (DEBUG); the announcement gate reads the
member's cached status at decision time.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands, tasks

from hello_there.engine.events import PresenceSnapshot, VoiceTransition
from hello_there.errors import UnknownGuildError
from hello_there.services.arrival_service import handle_transition

if TYPE_CHECKING:
    from hello_there.bot.core import HelloThereBot

logger = logging.getLogger(__name__)


def transition_from(
    member: discord.Member,
    before: discord.VoiceState,
    after: discord.VoiceState,
) -> VoiceTransition:
    """Build the engine's view of a voice-state update."""
    return VoiceTransition(
        guild_id=member.guild.id,
        user_id=member.id,
        username=member.name,
        display_name=member.nick or member.name,
        channel_id=after.channel.id if after.channel is not None else None,
        previous_channel_id=before.channel.id if before.channel is not None else None,
        is_bot=member.bot,
        role_ids=frozenset(role.id for role in member.roles),
    )


def presence_of(member: discord.Member) -> PresenceSnapshot:
    """Read the member's cached status; None when the cache has nothing."""
    return PresenceSnapshot(status=getattr(member, "raw_status", None))


class Voice(commands.Cog, name="Voice"):
    """Announces members joining voice and plays their join sounds."""

    def __init__(self, bot: HelloThereBot) -> None:
        self.bot = bot

    async def cog_load(self) -> None:
        """Start the dedup purge loop when the cog is loaded."""
        self._purge_dedup.start()

    async def cog_unload(self) -> None:
        """Stop the dedup purge loop when the cog is unloaded."""
        self._purge_dedup.cancel()

    @tasks.loop(minutes=5)
    async def _purge_dedup(self) -> None:
        """Drop expired dedup entries so the window doesn't grow without bound."""
        purged = self.bot.dedup.purge(self.bot.local_now())
        if purged:
            logger.debug("Purged %d expired dedup entries", purged)

    @commands.Cog.listener()
    async def on_voice_state_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ) -> None:
        """Track voice join/move events."""
        logger.debug(
            "Gateway event: VOICE_STATE %s (%s → %s, bot=%s)",
            member.name,
            getattr(before.channel, "name", "None"),
            getattr(after.channel, "name", "None"),
            member.bot,
        )
        try:
            await self._handle_voice_update(member, before, after)
        except UnknownGuildError:
            logger.warning("Voice update from unknown guild %d ignored", member.guild.id)
        except Exception:
            logger.exception("Error processing voice state update for user %s", member.id)

    async def _handle_voice_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ) -> None:
        """Inner voice state handler (separated for error isolation)."""
        if after.channel is None:
            return  # left voice, nothing to announce or play

        transition = transition_from(member, before, after)
        ctx = self.bot.context_for(
            transition.guild_id, user=member.name, channel=transition.channel_id,
        )
        await handle_transition(
            ctx, transition, presence_of(member), self.bot.local_now(), self.bot.voice_cues,
        )

    @commands.Cog.listener()
    async def on_presence_update(self, before: discord.Member, after: discord.Member) -> None:
        logger.debug("Presence update: user %s → %s", after.id, after.raw_status)


async def setup(bot: HelloThereBot) -> None:
    await bot.add_cog(Voice(bot))
