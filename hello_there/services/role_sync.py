"""
hello_there.services.role_sync — Opt-In Role Toggling
=======================================================

Two triggers, one behaviour:

* ``/voice-spam`` / ``/no-spam`` toggle the guild's required role;
* reacting on the guild's management message toggles whichever role the
  emoji maps to (add → grant, remove → revoke).

Granting a role the member already has, or revoking one they lack, is left
to Discord, which treats both as no-ops.  Failures are logged and never
retried.
"""

from __future__ import annotations

import logging

from hello_there.engine.events import Direction, ReactionEvent, RoleToggleRequest
from hello_there.engine.registry import command_action
from hello_there.engine.store import ConfigStore
from hello_there.errors import ResolutionError, TransientCapabilityError
from hello_there.services.gateway import PlatformGateway

logger = logging.getLogger(__name__)


class RoleSync:
    """Builds :class:`RoleToggleRequest`s and applies them through the gateway."""

    def __init__(self, store: ConfigStore, gateway: PlatformGateway) -> None:
        self.store = store
        self.gateway = gateway

    # -------------------------------------------------------------------
    # Trigger → request
    # -------------------------------------------------------------------
    def for_command(self, guild_id: int | None, user_id: int, command_name: str) -> RoleToggleRequest:
        """Request for a slash command.

        Raises
        ------
        UnknownGuildError
            If the guild isn't configured.
        ResolutionError
            If the guild's required role didn't resolve.
        KeyError
            If *command_name* isn't registered.
        """
        action = command_action(command_name)
        config = self.store.get(guild_id)
        if config.required_role_id is None:
            raise ResolutionError(config.guild_id, [config.settings.required_role_name or "<unset>"])
        return RoleToggleRequest(
            guild_id=config.guild_id,
            user_id=user_id,
            role_id=config.required_role_id,
            direction=action.direction,
            trigger="command",
        )

    def for_reaction(self, event: ReactionEvent, direction: Direction) -> RoleToggleRequest | None:
        """Request for a reaction event, or None when the reaction isn't a role toggle.

        Raises
        ------
        UnknownGuildError
            If the guild isn't configured.
        """
        if event.is_bot:
            return None
        config = self.store.get(event.guild_id)
        if not config.is_management_message(event.channel_id, event.message_id):
            return None
        role_id = config.emoji_role_ids.get(event.emoji_name)
        if role_id is None:
            logger.debug(
                "Ignoring unmapped emoji %r on management message %d",
                event.emoji_name, event.message_id,
            )
            return None
        return RoleToggleRequest(
            guild_id=config.guild_id,
            user_id=event.user_id,
            role_id=role_id,
            direction=direction,
            trigger="reaction",
        )

    # -------------------------------------------------------------------
    # Apply
    # -------------------------------------------------------------------
    async def toggle(
        self,
        request: RoleToggleRequest,
        log: logging.Logger | logging.LoggerAdapter = logger,
    ) -> bool:
        """Grant or revoke the role.  Returns False (after logging) on failure."""
        try:
            if request.direction is Direction.GRANT:
                await self.gateway.add_role(request.guild_id, request.user_id, request.role_id)
            else:
                await self.gateway.remove_role(request.guild_id, request.user_id, request.role_id)
        except TransientCapabilityError as exc:
            log.error(
                "Could not %s role %d via %s: %s",
                request.direction.value, request.role_id, request.trigger, exc,
            )
            return False

        log.info(
            "Role %d %s via %s",
            request.role_id,
            "granted" if request.direction is Direction.GRANT else "revoked",
            request.trigger,
        )
        return True
