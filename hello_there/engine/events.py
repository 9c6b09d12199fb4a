"""
hello_there.engine.events — Event Envelopes
=============================================

Every Discord gateway event the engine cares about is normalized into one
of these frozen values before any decision is made.  They are built per
event by the cogs and discarded once the event has been handled.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

__all__ = [
    "Direction",
    "PresenceSnapshot",
    "ReactionEvent",
    "RoleToggleRequest",
    "VoiceTransition",
]


class Direction(enum.Enum):
    """Which way a role toggle goes."""

    GRANT = "grant"
    REVOKE = "revoke"


# ---------------------------------------------------------------------------
# VoiceTransition: one voice-state update for one member
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class VoiceTransition:
    """A member's voice-channel membership change.

    ``channel_id`` is None when the member left voice entirely;
    ``previous_channel_id`` is None when they weren't in voice before.
    """

    guild_id: int
    user_id: int
    username: str
    display_name: str
    channel_id: int | None
    previous_channel_id: int | None = None
    is_bot: bool = False
    role_ids: frozenset[int] = field(default_factory=frozenset)

    @property
    def is_fresh_join(self) -> bool:
        """Connected to voice from nowhere (mute/deafen/move don't count)."""
        return self.previous_channel_id is None and self.channel_id is not None

    @property
    def is_channel_change(self) -> bool:
        """Arrived in a channel they weren't in before (join or move)."""
        return self.channel_id is not None and self.channel_id != self.previous_channel_id


@dataclass(frozen=True, slots=True)
class PresenceSnapshot:
    """Read-only presence for a (guild, user) pair.  ``status=None`` means unreadable."""

    status: str | None = None

    @property
    def readable(self) -> bool:
        return self.status is not None


@dataclass(frozen=True, slots=True)
class ReactionEvent:
    """A reaction added to or removed from a message in a guild."""

    guild_id: int | None
    channel_id: int
    message_id: int
    user_id: int
    emoji_name: str
    is_bot: bool = False


@dataclass(frozen=True, slots=True)
class RoleToggleRequest:
    """Grant or revoke one role for one member.

    Produced by a slash command (``trigger="command"``) or by a
    reaction-role event (``trigger="reaction"``).
    """

    guild_id: int
    user_id: int
    role_id: int
    direction: Direction
    trigger: str = "command"
