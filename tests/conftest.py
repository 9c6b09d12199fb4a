"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from datetime import UTC, datetime, timedelta

import pytest

from hello_there.config import GuildSettings, RoleReactionSettings
from hello_there.engine.dedup import DedupWindow
from hello_there.engine.eligibility import QuietHours
from hello_there.engine.events import VoiceTransition
from hello_there.engine.store import ConfigStore, GuildConfig
from hello_there.errors import TransientCapabilityError
from hello_there.services.context import EventContext, scoped_logger
from hello_there.services.role_sync import RoleSync

GUILD_ID = 1000
NOTIFY_CHANNEL_ID = 2000
VOICE_CHANNEL_ID = 3000
OTHER_VOICE_CHANNEL_ID = 3001
MGMT_CHANNEL_ID = 4000
MGMT_MESSAGE_ID = 5000
OPT_IN_ROLE_ID = 6000
GAMER_ROLE_ID = 6001
SOUND_ID = 7000
USER_ID = 8000


# ---------------------------------------------------------------------------
# Fake outbound gateway: records calls, keeps a tiny role/voice model
# ---------------------------------------------------------------------------
class FakeGateway:
    """In-memory :class:`PlatformGateway`.  Add operation names to ``fail`` to break them."""

    def __init__(self) -> None:
        self.messages: list[tuple[int, str]] = []
        self.channel_names: dict[int, str] = {VOICE_CHANNEL_ID: "General"}
        self.voice: dict[int, int] = {}
        self.sounds: list[tuple[int, int, int]] = []
        self.disconnects: list[int] = []
        self.roles: dict[tuple[int, int], set[int]] = defaultdict(set)
        self.role_calls: list[tuple[str, int, int, int]] = []
        self.fail: set[str] = set()

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail:
            raise TransientCapabilityError(operation, "simulated failure")

    async def send_message(self, channel_id: int, text: str) -> None:
        self._maybe_fail("send_message")
        self.messages.append((channel_id, text))

    async def channel_name(self, channel_id: int) -> str | None:
        return self.channel_names.get(channel_id)

    async def join_voice(self, guild_id: int, channel_id: int) -> None:
        self._maybe_fail("join_voice")
        self.voice[guild_id] = channel_id

    async def trigger_sound(self, guild_id: int, channel_id: int, sound_id: int) -> None:
        self._maybe_fail("trigger_sound")
        self.sounds.append((guild_id, channel_id, sound_id))

    def current_voice_channel(self, guild_id: int) -> int | None:
        return self.voice.get(guild_id)

    async def disconnect_voice(self, guild_id: int) -> None:
        self._maybe_fail("disconnect_voice")
        self.disconnects.append(guild_id)
        self.voice.pop(guild_id, None)

    async def add_role(self, guild_id: int, user_id: int, role_id: int) -> None:
        self._maybe_fail("add_role")
        self.role_calls.append(("add", guild_id, user_id, role_id))
        self.roles[(guild_id, user_id)].add(role_id)

    async def remove_role(self, guild_id: int, user_id: int, role_id: int) -> None:
        self._maybe_fail("remove_role")
        self.role_calls.append(("remove", guild_id, user_id, role_id))
        self.roles[(guild_id, user_id)].discard(role_id)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------
def make_settings(**overrides) -> GuildSettings:
    fields = dict(
        guild_id=GUILD_ID,
        notification_channel_id=NOTIFY_CHANNEL_ID,
        emoji=":wave:",
        required_role_name="voice-spam",
        user_sounds={"alice": SOUND_ID},
        role_config=RoleReactionSettings(
            management_channel_id=MGMT_CHANNEL_ID,
            message_id=MGMT_MESSAGE_ID,
            emoji_roles={"✅": "voice-spam", "🎮": "gamers"},
        ),
    )
    fields.update(overrides)
    return GuildSettings(**fields)


def make_config(**overrides) -> GuildConfig:
    settings = overrides.pop("settings", None) or make_settings()
    fields = dict(
        settings=settings,
        required_role_id=OPT_IN_ROLE_ID,
        emoji_role_ids={"✅": OPT_IN_ROLE_ID, "🎮": GAMER_ROLE_ID},
    )
    fields.update(overrides)
    return GuildConfig(**fields)


def make_transition(**overrides) -> VoiceTransition:
    fields = dict(
        guild_id=GUILD_ID,
        user_id=USER_ID,
        username="alice",
        display_name="Ally",
        channel_id=VOICE_CHANNEL_ID,
        previous_channel_id=None,
        is_bot=False,
        role_ids=frozenset({OPT_IN_ROLE_ID}),
    )
    fields.update(overrides)
    return VoiceTransition(**fields)


def at(hour: int, minute: int = 0) -> datetime:
    """A fixed local timestamp on a weekday at *hour*:*minute*."""
    return datetime(2026, 3, 4, hour, minute, tzinfo=UTC)


def run_async(coro):
    """Run an async coroutine in a fresh event loop."""
    return asyncio.run(coro)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def guild_config() -> GuildConfig:
    return make_config()


@pytest.fixture
def store(guild_config: GuildConfig) -> ConfigStore:
    s = ConfigStore({GUILD_ID: guild_config.settings})
    s.install(guild_config)
    return s


@pytest.fixture
def dedup() -> DedupWindow:
    return DedupWindow(timedelta(minutes=5))


@pytest.fixture
def role_sync(store: ConfigStore, gateway: FakeGateway) -> RoleSync:
    return RoleSync(store, gateway)


@pytest.fixture
def ctx(store, dedup, role_sync, gateway) -> EventContext:
    return EventContext(
        config=store.get(GUILD_ID),
        log=scoped_logger(logging.getLogger("tests"), guild=GUILD_ID, user="alice"),
        dedup=dedup,
        role_sync=role_sync,
        gateway=gateway,
        hours=QuietHours(),
    )
