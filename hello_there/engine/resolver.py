"""
hello_there.engine.resolver — Role Name → Role ID Binding
===========================================================

Pure function run once per guild when the bot sees the guild's roster.
No Discord I/O: the caller passes the roster as a plain ``{name: id}``
mapping.

The two role features fail differently:

* an unknown **required role** only closes the announcement gate for that
  guild (logged, not raised);
* an unknown **reaction role** aborts reaction-role registration for that
  guild (:class:`ResolutionError`, carrying the partially resolved config).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from hello_there.config import GuildSettings
from hello_there.engine.store import GuildConfig
from hello_there.errors import ResolutionError

logger = logging.getLogger(__name__)


def build_roster(roles) -> dict[str, int]:
    """``{role.name: role.id}`` for any iterable of role-like objects.

    Duplicate names resolve to the last role listed.
    """
    return {role.name: role.id for role in roles}


def resolve_required_role(settings: GuildSettings, roster: Mapping[str, int]) -> int | None:
    """Return the ID of the guild's required role, or None if it isn't on the roster."""
    if not settings.required_role_name:
        logger.warning("Guild %d has no required role configured", settings.guild_id)
        return None
    role_id = roster.get(settings.required_role_name)
    if role_id is None:
        logger.warning(
            "Guild %d: required role %r not found; announcements disabled for this guild",
            settings.guild_id, settings.required_role_name,
        )
    return role_id


def resolve_reaction_roles(
    settings: GuildSettings, roster: Mapping[str, int]
) -> tuple[dict[str, int], list[str]]:
    """Map each configured emoji to a role ID.

    A value can be a role name or a numeric role ID present on the roster.
    Returns ``(resolved, missing_role_names)``.
    """
    if settings.role_config is None:
        return {}, []

    known_ids = set(roster.values())
    resolved: dict[str, int] = {}
    missing: list[str] = []
    for emoji, role in settings.role_config.emoji_roles.items():
        if role in roster:
            resolved[emoji] = roster[role]
        elif role.isdigit() and int(role) in known_ids:
            resolved[emoji] = int(role)
        else:
            missing.append(role)
    return resolved, missing


def resolve_guild(settings: GuildSettings, roster: Mapping[str, int]) -> GuildConfig:
    """Bind *settings* to *roster* and return the resolved :class:`GuildConfig`.

    Raises
    ------
    ResolutionError
        If any reaction-role entry doesn't resolve.  ``exc.partial`` holds
        the config with the required role bound and reaction-roles empty.
    """
    required_role_id = resolve_required_role(settings, roster)
    emoji_role_ids, missing = resolve_reaction_roles(settings, roster)

    if missing:
        raise ResolutionError(
            settings.guild_id,
            missing,
            partial=GuildConfig(settings=settings, required_role_id=required_role_id),
        )

    return GuildConfig(
        settings=settings,
        required_role_id=required_role_id,
        emoji_role_ids=emoji_role_ids,
    )
