"""
hello_there.engine.eligibility — Announce / Sound Decision Pipeline
=====================================================================

Pure decision pipeline.  No Discord I/O, no mutation of the dedup window.

Announcement gates (ordered, first failure wins):

  not_bot → fresh_join → open_hours → presence_visible
          → has_required_role → not_recently_notified

The join sound is decided separately: it only needs a human member arriving
in a new channel with a configured clip.  Quiet hours, presence, role and
dedup never silence it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from hello_there.constants import (
    ANNOUNCEABLE_STATUSES,
    DEFAULT_CLOSE_HOUR,
    DEFAULT_OPEN_HOUR,
)
from hello_there.engine.dedup import DedupWindow
from hello_there.engine.events import PresenceSnapshot, VoiceTransition
from hello_there.engine.store import GuildConfig

logger = logging.getLogger(__name__)

__all__ = [
    "Decision",
    "GateInput",
    "NOTIFY_GATES",
    "QuietHours",
    "evaluate",
    "fresh_join",
    "has_required_role",
    "not_bot",
    "not_recently_notified",
    "open_hours",
    "presence_visible",
    "select_sound",
]


@dataclass(frozen=True, slots=True)
class QuietHours:
    """Announcements are allowed for ``open_hour <= hour <= close_hour``."""

    open_hour: int = DEFAULT_OPEN_HOUR
    close_hour: int = DEFAULT_CLOSE_HOUR

    def is_open(self, hour: int) -> bool:
        return self.open_hour <= hour <= self.close_hour


@dataclass(frozen=True, slots=True)
class GateInput:
    """Everything a gate may look at.  ``now`` is local wall-clock time."""

    transition: VoiceTransition
    presence: PresenceSnapshot
    config: GuildConfig
    dedup: DedupWindow
    now: datetime
    hours: QuietHours = QuietHours()


@dataclass(frozen=True, slots=True)
class Decision:
    """Pipeline output.  ``rejected_by`` names the first failing gate."""

    notify: bool
    sound_id: int | None = None
    rejected_by: str | None = None


# ---------------------------------------------------------------------------
# Gates
# ---------------------------------------------------------------------------
def not_bot(gi: GateInput) -> bool:
    return not gi.transition.is_bot


def fresh_join(gi: GateInput) -> bool:
    """Mute/deafen toggles and channel moves must not re-announce."""
    return gi.transition.is_fresh_join


def open_hours(gi: GateInput) -> bool:
    return gi.hours.is_open(gi.now.hour)


def presence_visible(gi: GateInput) -> bool:
    """Only online/idle members are announced; dnd and invisible stay private."""
    return gi.presence.readable and gi.presence.status in ANNOUNCEABLE_STATUSES


def has_required_role(gi: GateInput) -> bool:
    role_id = gi.config.required_role_id
    return role_id is not None and role_id in gi.transition.role_ids


def not_recently_notified(gi: GateInput) -> bool:
    return not gi.dedup.is_suppressed(gi.transition.user_id, gi.now)


NOTIFY_GATES: tuple[tuple[str, Callable[[GateInput], bool]], ...] = (
    ("not_bot", not_bot),
    ("fresh_join", fresh_join),
    ("open_hours", open_hours),
    ("presence_visible", presence_visible),
    ("has_required_role", has_required_role),
    ("not_recently_notified", not_recently_notified),
)


# ---------------------------------------------------------------------------
# Sound
# ---------------------------------------------------------------------------
def select_sound(transition: VoiceTransition, config: GuildConfig) -> int | None:
    """Sound to play for *transition*, or None."""
    if transition.is_bot or not transition.is_channel_change:
        return None
    return config.sound_for(transition.username) or None


# ---------------------------------------------------------------------------
# Full pipeline
# ---------------------------------------------------------------------------
def evaluate(
    transition: VoiceTransition,
    presence: PresenceSnapshot,
    config: GuildConfig,
    dedup: DedupWindow,
    now: datetime,
    *,
    hours: QuietHours = QuietHours(),
) -> Decision:
    """Decide whether to announce *transition* and which sound (if any) to play.

    This is a PURE function apart from the dedup window's lazy expiry.
    """
    sound_id = select_sound(transition, config)
    gi = GateInput(transition, presence, config, dedup, now, hours)

    for name, gate in NOTIFY_GATES:
        if not gate(gi):
            logger.debug(
                "Announcement for user %d in guild %d rejected by %s",
                transition.user_id, transition.guild_id, name,
            )
            return Decision(notify=False, sound_id=sound_id, rejected_by=name)

    return Decision(notify=True, sound_id=sound_id)
