"""
hello_there.engine.store — Resolved Per-Guild Configuration
=============================================================

:class:`ConfigStore` owns one :class:`GuildConfig` per guild: the static
settings plus the role IDs the resolver bound them to.  Entries are frozen
snapshots; the store swaps them wholesale under a lock, so a handler that
grabbed a snapshot never sees it change underneath it.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from hello_there.config import GuildSettings
from hello_there.errors import UnknownGuildError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GuildConfig:
    """Settings for one guild with role names resolved to IDs."""

    settings: GuildSettings
    required_role_id: int | None = None
    emoji_role_ids: dict[str, int] = field(default_factory=dict)  # emoji name → role ID

    @property
    def guild_id(self) -> int:
        return self.settings.guild_id

    @property
    def notification_channel_id(self) -> int:
        return self.settings.notification_channel_id

    @property
    def emoji(self) -> str:
        return self.settings.emoji

    def sound_for(self, username: str) -> int | None:
        """Configured join sound for *username*, or None."""
        return self.settings.user_sounds.get(username)

    def is_management_message(self, channel_id: int, message_id: int) -> bool:
        rc = self.settings.role_config
        return (
            rc is not None
            and rc.management_channel_id == channel_id
            and rc.message_id == message_id
        )


class ConfigStore:
    """Thread-safe holder of resolved guild configuration.

    Usage::

        store = ConfigStore(settings.guilds)
        store.install(resolve_guild(settings.guilds[gid], roster))
        cfg = store.get(gid)
    """

    def __init__(self, guilds: dict[int, GuildSettings]) -> None:
        self._lock = threading.Lock()
        self._static: dict[int, GuildSettings] = dict(guilds)
        self._resolved: dict[int, GuildConfig] = {}

    def settings_for(self, guild_id: int) -> GuildSettings | None:
        """Static (unresolved) settings for *guild_id*, if configured."""
        return self._static.get(guild_id)

    @property
    def configured_guild_ids(self) -> frozenset[int]:
        return frozenset(self._static)

    def install(self, config: GuildConfig) -> None:
        """Replace the resolved entry for ``config.guild_id``."""
        with self._lock:
            self._resolved[config.guild_id] = config
        logger.info(
            "Guild %d configured: required_role=%s, reaction_roles=%d, sounds=%d",
            config.guild_id,
            config.required_role_id,
            len(config.emoji_role_ids),
            len(config.settings.user_sounds),
        )

    def get(self, guild_id: int | None) -> GuildConfig:
        """Return the resolved config for *guild_id*.

        Raises
        ------
        UnknownGuildError
            If the guild isn't configured or hasn't been resolved yet.
        """
        with self._lock:
            config = self._resolved.get(guild_id) if guild_id is not None else None
        if config is None:
            raise UnknownGuildError(guild_id)
        return config
