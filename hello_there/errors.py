"""
hello_there.errors — Exception Taxonomy
=========================================

``ConfigError`` is fatal at startup.  Everything else is scoped to a single
guild or a single event and is logged, never propagated to the dispatcher.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hello_there.engine.store import GuildConfig


class HelloThereError(Exception):
    """Base class for all bot errors."""


class ConfigError(HelloThereError):
    """The static configuration file is missing or malformed."""


class ResolutionError(HelloThereError):
    """A guild's configured role names don't resolve against its roster.

    ``partial`` is the best-effort config for the guild (required role
    resolved, reaction-roles disabled) so the caller can still install it.
    """

    def __init__(
        self,
        guild_id: int,
        missing: list[str],
        partial: GuildConfig | None = None,
    ) -> None:
        self.guild_id = guild_id
        self.missing = missing
        self.partial = partial
        super().__init__(
            f"guild {guild_id}: unresolved role(s) {', '.join(missing)}"
        )


class TransientCapabilityError(HelloThereError):
    """A delegated platform call (send, join, role change…) failed."""

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation} failed: {detail}")


class UnknownGuildError(HelloThereError):
    """An event referenced a guild with no resolved configuration."""

    def __init__(self, guild_id: int | None) -> None:
        self.guild_id = guild_id
        super().__init__(f"unknown guild {guild_id}")
