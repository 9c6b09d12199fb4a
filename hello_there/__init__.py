"""
hello-there — Voice Arrival Announcer for Discord
==================================================
Watches voice-channel joins, announces opted-in members in a text channel,
plays each member's soundboard clip on arrival, and lets members manage the
opt-in role through slash commands or reaction-roles.

Package layout::

    hello_there/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Quiet hours, dedup timeout, presence rules
    ├── errors.py          # Exception taxonomy
    ├── engine/
    │   ├── events.py      # VoiceTransition / ReactionEvent / RoleToggleRequest
    │   ├── store.py       # Resolved per-guild config store
    │   ├── resolver.py    # Role names → role IDs
    │   ├── dedup.py       # Notification suppression window
    │   ├── eligibility.py # Notify / sound decision pipeline
    │   ├── composer.py    # Announcement text
    │   └── registry.py    # Command + reaction action tables
    ├── services/
    │   ├── gateway.py         # Outbound Discord capabilities
    │   ├── context.py         # Per-event context
    │   ├── arrival_service.py # Voice transition → sound + announcement
    │   ├── voice_cue.py       # Join, play clip, validated disconnect
    │   └── role_sync.py       # Opt-in role toggling
    └── bot/
        ├── __main__.py    # Entry point: python -m hello_there.bot
        ├── core.py        # Bot subclass, roster resolution, cog loader
        └── cogs/
            ├── voice.py      # Voice state + presence listeners, dedup purge loop
            ├── reactions.py  # Reaction-role listeners
            └── roles.py      # /voice-spam, /no-spam
"""

__version__ = "0.1.0"
