"""
hello_there.services.gateway — Outbound Discord Capabilities
==============================================================

The engine never talks to Discord directly.  Everything it needs done —
send a message, join a voice channel, play a soundboard clip, change a role —
goes through a :class:`PlatformGateway`.

:class:`DiscordGateway` is the discord.py implementation.  It converts
``discord.DiscordException`` into :class:`TransientCapabilityError` so the
services only ever handle one failure type.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

import discord

from hello_there.errors import TransientCapabilityError

if TYPE_CHECKING:
    from discord.ext import commands

logger = logging.getLogger(__name__)


class PlatformGateway(Protocol):
    """What the engine may ask the platform to do."""

    async def send_message(self, channel_id: int, text: str) -> None: ...

    async def channel_name(self, channel_id: int) -> str | None: ...

    async def join_voice(self, guild_id: int, channel_id: int) -> None: ...

    async def trigger_sound(self, guild_id: int, channel_id: int, sound_id: int) -> None: ...

    def current_voice_channel(self, guild_id: int) -> int | None: ...

    async def disconnect_voice(self, guild_id: int) -> None: ...

    async def add_role(self, guild_id: int, user_id: int, role_id: int) -> None: ...

    async def remove_role(self, guild_id: int, user_id: int, role_id: int) -> None: ...


class DiscordGateway:
    """:class:`PlatformGateway` backed by a connected discord.py client."""

    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------
    async def _channel(self, channel_id: int, operation: str):
        channel = self.bot.get_channel(channel_id)
        if channel is not None:
            return channel
        try:
            return await self.bot.fetch_channel(channel_id)
        except discord.DiscordException as exc:
            raise TransientCapabilityError(operation, f"channel {channel_id}: {exc}") from exc

    def _guild(self, guild_id: int, operation: str) -> discord.Guild:
        guild = self.bot.get_guild(guild_id)
        if guild is None:
            raise TransientCapabilityError(operation, f"guild {guild_id} not in cache")
        return guild

    # -------------------------------------------------------------------
    # Text
    # -------------------------------------------------------------------
    async def send_message(self, channel_id: int, text: str) -> None:
        channel = await self._channel(channel_id, "send_message")
        if not isinstance(channel, discord.abc.Messageable):
            raise TransientCapabilityError("send_message", f"channel {channel_id} is not messageable")
        try:
            await channel.send(text)
        except discord.DiscordException as exc:
            raise TransientCapabilityError("send_message", f"channel {channel_id}: {exc}") from exc

    async def channel_name(self, channel_id: int) -> str | None:
        try:
            channel = await self._channel(channel_id, "channel_name")
        except TransientCapabilityError as exc:
            logger.debug("Channel name unavailable: %s", exc)
            return None
        return getattr(channel, "name", None)

    # -------------------------------------------------------------------
    # Voice
    # -------------------------------------------------------------------
    async def join_voice(self, guild_id: int, channel_id: int) -> None:
        guild = self._guild(guild_id, "join_voice")
        channel = guild.get_channel(channel_id)
        if not isinstance(channel, (discord.VoiceChannel, discord.StageChannel)):
            raise TransientCapabilityError("join_voice", f"channel {channel_id} is not a voice channel")
        try:
            voice = guild.voice_client
            if voice is None:
                await channel.connect()
            elif getattr(voice, "channel", None) is None or voice.channel.id != channel_id:
                await voice.move_to(channel)
        except (discord.DiscordException, TimeoutError) as exc:
            raise TransientCapabilityError("join_voice", f"channel {channel_id}: {exc}") from exc

    async def trigger_sound(self, guild_id: int, channel_id: int, sound_id: int) -> None:
        guild = self._guild(guild_id, "trigger_sound")
        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel):
            raise TransientCapabilityError("trigger_sound", f"channel {channel_id} is not a voice channel")

        sound = guild.get_soundboard_sound(sound_id)
        try:
            if sound is None:
                defaults = await self.bot.fetch_soundboard_default_sounds()
                sound = next((s for s in defaults if s.id == sound_id), None)
            if sound is None:
                raise TransientCapabilityError("trigger_sound", f"unknown soundboard sound {sound_id}")
            await channel.send_sound(sound)
        except discord.DiscordException as exc:
            raise TransientCapabilityError("trigger_sound", f"sound {sound_id}: {exc}") from exc

    def current_voice_channel(self, guild_id: int) -> int | None:
        guild = self.bot.get_guild(guild_id)
        voice = guild.voice_client if guild is not None else None
        channel = getattr(voice, "channel", None)
        return channel.id if channel is not None else None

    async def disconnect_voice(self, guild_id: int) -> None:
        guild = self.bot.get_guild(guild_id)
        voice = guild.voice_client if guild is not None else None
        if voice is None:
            return
        try:
            await voice.disconnect(force=False)
        except discord.DiscordException as exc:
            raise TransientCapabilityError("disconnect_voice", f"guild {guild_id}: {exc}") from exc

    # -------------------------------------------------------------------
    # Roles
    # -------------------------------------------------------------------
    async def _member(self, guild: discord.Guild, user_id: int, operation: str) -> discord.Member:
        member = guild.get_member(user_id)
        if member is not None:
            return member
        try:
            return await guild.fetch_member(user_id)
        except discord.DiscordException as exc:
            raise TransientCapabilityError(operation, f"member {user_id}: {exc}") from exc

    async def add_role(self, guild_id: int, user_id: int, role_id: int) -> None:
        guild = self._guild(guild_id, "add_role")
        member = await self._member(guild, user_id, "add_role")
        try:
            await member.add_roles(discord.Object(id=role_id), reason="hello-there: opt in")
        except discord.DiscordException as exc:
            raise TransientCapabilityError("add_role", f"role {role_id} → {user_id}: {exc}") from exc

    async def remove_role(self, guild_id: int, user_id: int, role_id: int) -> None:
        guild = self._guild(guild_id, "remove_role")
        member = await self._member(guild, user_id, "remove_role")
        try:
            await member.remove_roles(discord.Object(id=role_id), reason="hello-there: opt out")
        except discord.DiscordException as exc:
            raise TransientCapabilityError("remove_role", f"role {role_id} ← {user_id}: {exc}") from exc
