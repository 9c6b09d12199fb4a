"""
hello_there.bot.core — Bot Instance & Cog Loader
==================================================

**Why this file exists:**
Defines :class:`HelloThereBot`, a ``commands.Bot`` subclass that:

1. Owns the shared engine state — the :class:`ConfigStore`, the global
   :class:`DedupWindow`, the Discord gateway, :class:`RoleSync` and the
   :class:`VoiceCuePlayer` — so every Cog reaches them via ``self.bot.*``.
2. Loads every Cog in ``hello_there/bot/cogs/``.
3. On ready, resolves each configured guild's role names against its live
   roster, one guild at a time, and syncs the slash commands to it.
4. Builds the per-event :class:`EventContext` handed to the services.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

import discord
from discord.ext import commands

from hello_there.config import BotSettings
from hello_there.engine.dedup import DedupWindow
from hello_there.engine.eligibility import QuietHours
from hello_there.engine.resolver import build_roster, resolve_guild
from hello_there.engine.store import ConfigStore
from hello_there.errors import ResolutionError
from hello_there.services.context import EventContext, scoped_logger
from hello_there.services.gateway import DiscordGateway, PlatformGateway
from hello_there.services.role_sync import RoleSync
from hello_there.services.voice_cue import VoiceCuePlayer

logger = logging.getLogger(__name__)

# Cog modules to load on startup.
EXTENSIONS: list[str] = [
    "hello_there.bot.cogs.voice",
    "hello_there.bot.cogs.reactions",
    "hello_there.bot.cogs.roles",
]


class HelloThereBot(commands.Bot):
    """Custom Bot subclass that carries the engine state.

    Parameters
    ----------
    settings:
        The parsed :class:`BotSettings` from ``config.yaml``.
    gateway:
        Outbound capabilities; defaults to a :class:`DiscordGateway` on this bot.
    """

    def __init__(self, settings: BotSettings, gateway: PlatformGateway | None = None) -> None:
        # Privileged intents (must be enabled in the Developer Portal):
        #   GUILD_PRESENCES: dnd/invisible members are never announced
        #   GUILD_MEMBERS:   nicknames and role membership on voice updates
        intents = discord.Intents.default()
        intents.presences = True
        intents.members = True
        intents.voice_states = True
        intents.reactions = True

        super().__init__(command_prefix=commands.when_mentioned, intents=intents)

        self.settings = settings
        self.store = ConfigStore(settings.guilds)
        self.dedup = DedupWindow(timedelta(seconds=settings.dedup_timeout_seconds))
        self.hours = QuietHours(settings.open_hour, settings.close_hour)
        self.gateway: PlatformGateway = gateway or DiscordGateway(self)
        self.role_sync = RoleSync(self.store, self.gateway)
        self.voice_cues = VoiceCuePlayer(
            self.gateway, settings.voice_disconnect_delay_seconds,
        )

    # -----------------------------------------------------------------------
    # Per-event helpers
    # -----------------------------------------------------------------------
    def local_now(self) -> datetime:
        """Current wall-clock time in the configured quiet-hours timezone."""
        return datetime.now(UTC).astimezone(self.settings.tz)

    def context_for(self, guild_id: int | None, **fields) -> EventContext:
        """Build the :class:`EventContext` for an event in *guild_id*.

        Raises
        ------
        UnknownGuildError
            If the guild has no resolved configuration.
        """
        config = self.store.get(guild_id)
        return EventContext(
            config=config,
            log=scoped_logger(logging.getLogger("hello_there.event"), guild=guild_id, **fields),
            dedup=self.dedup,
            role_sync=self.role_sync,
            gateway=self.gateway,
            hours=self.hours,
        )

    # -----------------------------------------------------------------------
    # Lifecycle hooks
    # -----------------------------------------------------------------------
    async def setup_hook(self) -> None:
        """Load all Cog extensions.  One broken Cog shouldn't take down the bot."""
        for ext in EXTENSIONS:
            try:
                await self.load_extension(ext)
                logger.info("Loaded extension: %s", ext)
            except Exception as exc:
                logger.error("Failed to load extension %s: %s", ext, exc)

    async def on_ready(self) -> None:
        """Fired when the bot has connected and the guild cache is populated."""
        assert self.user is not None  # guaranteed after on_ready
        logger.info("Logged in as %s (ID: %s) in %d guilds", self.user.name, self.user.id, len(self.guilds))

        self.resolve_guilds(self.guilds)

        for guild in self.guilds:
            if guild.id in self.store.configured_guild_ids:
                await self._sync_commands(guild)

    async def close(self) -> None:
        """Graceful shutdown — cancel pending voice disconnects, then disconnect."""
        logger.info("Bot shutting down…")
        await self.voice_cues.close()
        await super().close()

    # -----------------------------------------------------------------------
    # Roster resolution
    # -----------------------------------------------------------------------
    def resolve_guilds(self, guilds) -> int:
        """Resolve every configured guild in *guilds*.  Returns how many succeeded fully.

        Each guild is resolved independently: a :class:`ResolutionError`
        installs the partial config and moves on to the next guild.
        """
        ok = 0
        for guild in guilds:
            settings = self.store.settings_for(guild.id)
            if settings is None:
                logger.warning("Guild %s (%d) is not in config.yaml; ignoring it", guild.name, guild.id)
                continue
            try:
                self.store.install(resolve_guild(settings, build_roster(guild.roles)))
                ok += 1
            except ResolutionError as exc:
                logger.error("Reaction-roles disabled for guild %d: %s", guild.id, exc)
                if exc.partial is not None:
                    self.store.install(exc.partial)

        missing = self.store.configured_guild_ids - {g.id for g in guilds}
        for guild_id in sorted(missing):
            logger.warning("Configured guild %d is not visible to the bot", guild_id)
        return ok

    async def _sync_commands(self, guild: discord.Guild) -> None:
        """Copy the global slash commands into *guild* and sync them."""
        try:
            self.tree.copy_global_to(guild=guild)
            synced = await self.tree.sync(guild=guild)
            logger.info("Synced %d commands to guild %d", len(synced), guild.id)
        except discord.DiscordException:
            logger.exception("Failed to sync commands to guild %d", guild.id)
