"""
hello_there.config — YAML Configuration Loader
================================================

**Why this file exists:**
This module reads ``config.yaml``: the quiet-hours clock, the dedup and
voice-cue timings, and one block per guild naming the notification channel,
the opt-in role, per-user join sounds and the reaction-role message.

Role *names* live here; role *IDs* are only known once the bot sees each
guild's roster (see :mod:`hello_there.engine.resolver`).

Usage::

    from hello_there.config import load_config

    cfg = load_config()                       # reads ./config.yaml by default
    print(cfg.timezone)                       # "America/Chicago"
    print(cfg.guilds[1234].required_role_name)  # "voice-spam"

Field names from the original JSON config (``NotificationChannelID``,
``EmojiID``, ``RequiredRoleName``, ``UserConfig``/``OnJoinSound``,
``RoleConfig``/``ManagementChannelID``/``MessageID``/``EmojiRoleConfig``)
are accepted as aliases.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from hello_there.constants import (
    DEFAULT_CLOSE_HOUR,
    DEFAULT_DEDUP_TIMEOUT_SECONDS,
    DEFAULT_OPEN_HOUR,
    DEFAULT_TIMEZONE,
    DEFAULT_VOICE_DISCONNECT_DELAY_SECONDS,
)
from hello_there.errors import ConfigError

_ALIASES: dict[str, str] = {
    "NotificationChannelID": "notification_channel_id",
    "EmojiID": "emoji",
    "RequiredRoleName": "required_role_name",
    "UserConfig": "users",
    "OnJoinSound": "on_join_sound",
    "RoleConfig": "role_config",
    "ManagementChannelID": "management_channel_id",
    "MessageID": "message_id",
    "EmojiRoleConfig": "emoji_roles",
}


# ---------------------------------------------------------------------------
# Typed settings objects
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class RoleReactionSettings:
    """Where the reaction-role message lives and which emoji maps to which role.

    ``emoji_roles`` values are role names, or role IDs written as integers.
    """

    management_channel_id: int
    message_id: int
    emoji_roles: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class GuildSettings:
    """Static, unresolved configuration for one guild."""

    guild_id: int
    notification_channel_id: int
    emoji: str = ""
    required_role_name: str = ""
    user_sounds: dict[str, int] = field(default_factory=dict)  # username → sound ID
    role_config: RoleReactionSettings | None = None


@dataclass(frozen=True, slots=True)
class BotSettings:
    """Immutable configuration loaded from ``config.yaml``."""

    guilds: dict[int, GuildSettings]
    timezone: str = DEFAULT_TIMEZONE
    open_hour: int = DEFAULT_OPEN_HOUR
    close_hour: int = DEFAULT_CLOSE_HOUR
    dedup_timeout_seconds: int = DEFAULT_DEDUP_TIMEOUT_SECONDS
    voice_disconnect_delay_seconds: float = DEFAULT_VOICE_DISCONNECT_DELAY_SECONDS

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------
def _normalize(raw: Any, where: str) -> dict[str, Any]:
    """Return *raw* as a dict with alias keys rewritten to snake_case."""
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{where}: expected a mapping, got {type(raw).__name__}")
    return {_ALIASES.get(str(k), str(k)): v for k, v in raw.items()}


def _as_int(value: Any, where: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{where}: expected an integer ID, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{where}: expected an integer ID, got {value!r}") from None


def _require(raw: dict[str, Any], key: str, where: str) -> Any:
    if key not in raw or raw[key] in (None, ""):
        raise ConfigError(f"{where}: missing required key '{key}'")
    return raw[key]


def _parse_role_config(raw: Any, where: str) -> RoleReactionSettings | None:
    data = _normalize(raw, where)
    if not data:
        return None
    emoji_roles = _normalize(data.get("emoji_roles"), f"{where}.emoji_roles")
    return RoleReactionSettings(
        management_channel_id=_as_int(
            _require(data, "management_channel_id", where),
            f"{where}.management_channel_id",
        ),
        message_id=_as_int(_require(data, "message_id", where), f"{where}.message_id"),
        emoji_roles={emoji: str(role) for emoji, role in emoji_roles.items()},
    )


def _parse_user_sounds(raw: Any, where: str) -> dict[str, int]:
    sounds: dict[str, int] = {}
    for username, user_cfg in _normalize(raw, where).items():
        user_where = f"{where}.{username}"
        data = _normalize(user_cfg, user_where)
        sound = data.get("on_join_sound")
        if sound in (None, ""):
            continue  # user listed without a sound
        sounds[username] = _as_int(sound, f"{user_where}.on_join_sound")
    return sounds


def parse_guild(guild_key: Any, raw: Any) -> GuildSettings:
    """Build a :class:`GuildSettings` from one ``guilds:`` entry."""
    where = f"guilds.{guild_key}"
    guild_id = _as_int(guild_key, where)
    data = _normalize(raw, where)
    return GuildSettings(
        guild_id=guild_id,
        notification_channel_id=_as_int(
            _require(data, "notification_channel_id", where),
            f"{where}.notification_channel_id",
        ),
        emoji=str(data.get("emoji") or ""),
        required_role_name=str(data.get("required_role_name") or ""),
        user_sounds=_parse_user_sounds(data.get("users"), f"{where}.users"),
        role_config=_parse_role_config(data.get("role_config"), f"{where}.role_config"),
    )


def parse_config(raw: Any) -> BotSettings:
    """Validate an already-decoded config mapping.

    Raises
    ------
    ConfigError
        On any structural problem.
    """
    data = _normalize(raw, "config")
    guilds_raw = _normalize(data.get("guilds"), "guilds")
    if not guilds_raw:
        raise ConfigError("config: at least one guild must be configured under 'guilds'")

    guilds: dict[int, GuildSettings] = {}
    for key, value in guilds_raw.items():
        guild = parse_guild(key, value)
        guilds[guild.guild_id] = guild

    open_hour = _as_int(data.get("open_hour", DEFAULT_OPEN_HOUR), "open_hour")
    close_hour = _as_int(data.get("close_hour", DEFAULT_CLOSE_HOUR), "close_hour")
    if not (0 <= open_hour <= close_hour <= 23):
        raise ConfigError(
            f"config: need 0 <= open_hour <= close_hour <= 23, got {open_hour}..{close_hour}"
        )

    timezone = str(data.get("timezone") or DEFAULT_TIMEZONE)
    try:
        ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigError(f"config: unknown timezone {timezone!r}") from None

    try:
        dedup = int(data.get("dedup_timeout_seconds", DEFAULT_DEDUP_TIMEOUT_SECONDS))
        delay = float(
            data.get("voice_disconnect_delay_seconds", DEFAULT_VOICE_DISCONNECT_DELAY_SECONDS)
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"config: bad timing value ({exc})") from None
    if dedup <= 0 or delay < 0:
        raise ConfigError("config: timing values must be positive")

    return BotSettings(
        guilds=guilds,
        timezone=timezone,
        open_hour=open_hour,
        close_hour=close_hour,
        dedup_timeout_seconds=dedup,
        voice_disconnect_delay_seconds=delay,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> BotSettings:
    """Read *path* and return a :class:`BotSettings` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML (or JSON) configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    ConfigError
        If the file doesn't exist, isn't valid YAML, or fails validation.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        try:
            raw = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ConfigError(f"{config_path}: invalid YAML ({exc})") from None

    return parse_config(raw)
