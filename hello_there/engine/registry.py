"""
hello_there.engine.registry — Command & Reaction Action Tables
================================================================

Closed, table-driven dispatch for role toggles.  Cogs look actions up by
name here instead of branching on command names.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from hello_there.engine.events import Direction


@dataclass(frozen=True, slots=True)
class CommandAction:
    """A slash command that toggles the guild's opt-in role."""

    name: str
    description: str
    direction: Direction
    ack_text: str


COMMANDS = MappingProxyType({
    "voice-spam": CommandAction(
        name="voice-spam",
        description="opts the user in to the voice-spam role",
        direction=Direction.GRANT,
        ack_text='Thou hast been granted "hello-there"',
    ),
    "no-spam": CommandAction(
        name="no-spam",
        description="opts the user out of the voice-spam role",
        direction=Direction.REVOKE,
        ack_text="Thou hast had thy privileges revoked",
    ),
})

# Reaction added → grant, reaction removed → revoke
REACTION_DIRECTIONS = MappingProxyType({
    "add": Direction.GRANT,
    "remove": Direction.REVOKE,
})


def command_action(name: str) -> CommandAction:
    """Return the registered action for *name*.

    Raises
    ------
    KeyError
        If no command with that name is registered.
    """
    return COMMANDS[name]
