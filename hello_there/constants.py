"""
hello_there.constants — Shared Constants
==========================================

Defaults for the decision engine.  ``config.yaml`` can override the
timing values; the presence rule is fixed.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Quiet hours: announcements only go out while open_hour <= hour <= close_hour
# ---------------------------------------------------------------------------
DEFAULT_OPEN_HOUR = 8
DEFAULT_CLOSE_HOUR = 22
DEFAULT_TIMEZONE = "UTC"

# ---------------------------------------------------------------------------
# Dedup window: one announcement per user per window, across all guilds
# ---------------------------------------------------------------------------
DEFAULT_DEDUP_TIMEOUT_SECONDS = 5 * 60

# ---------------------------------------------------------------------------
# Voice cue: how long the bot lingers in the channel after the clip
# ---------------------------------------------------------------------------
DEFAULT_VOICE_DISCONNECT_DELAY_SECONDS = 5.0

# ---------------------------------------------------------------------------
# Presence: dnd, invisible and offline never get announced
# ---------------------------------------------------------------------------
ANNOUNCEABLE_STATUSES: frozenset[str] = frozenset({"online", "idle"})
