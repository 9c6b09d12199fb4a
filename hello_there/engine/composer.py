"""
hello_there.engine.composer — Announcement Text
=================================================
"""

from __future__ import annotations

from hello_there.engine.events import VoiceTransition
from hello_there.engine.store import GuildConfig


def compose_notification(
    config: GuildConfig,
    transition: VoiceTransition,
    channel_name: str | None,
) -> str:
    """``"<emoji> looks like <name> just joined <channel>"``.

    An unknown channel name leaves the suffix empty rather than failing.
    """
    text = f"{config.emoji} looks like {transition.display_name} just joined"
    if channel_name:
        text += f" {channel_name}"
    return text.strip()
