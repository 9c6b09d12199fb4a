"""
hello_there.services.arrival_service — Voice Arrival Handling
===============================================================

Turns one voice transition into actions:

1. Run the eligibility pipeline.
2. Schedule the join sound (if any) on the :class:`VoiceCuePlayer`.  It runs
   as its own task, so a slow or failing voice connect never holds up the
   announcement.
3. If the member should be announced, claim their dedup slot, compose the
   message and send it.  A failed send releases the slot again.

Nothing here raises: every failure is logged against the event and the
event is dropped.  No retries.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from hello_there.engine.composer import compose_notification
from hello_there.engine.eligibility import Decision, evaluate
from hello_there.engine.events import PresenceSnapshot, VoiceTransition
from hello_there.errors import TransientCapabilityError

if TYPE_CHECKING:
    from hello_there.services.context import EventContext
    from hello_there.services.voice_cue import VoiceCuePlayer

logger = logging.getLogger(__name__)


async def announce(ctx: EventContext, transition: VoiceTransition, now: datetime) -> bool:
    """Send the arrival message for *transition*.  Returns True if it went out."""
    if not ctx.dedup.claim(transition.user_id, now):
        ctx.log.debug("Lost the dedup race; another event already announced this user")
        return False

    channel_name = None
    if transition.channel_id is not None:
        channel_name = await ctx.gateway.channel_name(transition.channel_id)
        if channel_name is None:
            ctx.log.warning("Voice channel name unavailable; announcing without it")

    text = compose_notification(ctx.config, transition, channel_name)
    try:
        await ctx.gateway.send_message(ctx.config.notification_channel_id, text)
    except TransientCapabilityError as exc:
        ctx.dedup.release(transition.user_id)
        ctx.log.error("Could not send arrival message: %s", exc)
        return False

    ctx.log.info("Announced arrival in channel %d", ctx.config.notification_channel_id)
    return True


async def handle_transition(
    ctx: EventContext,
    transition: VoiceTransition,
    presence: PresenceSnapshot,
    now: datetime,
    voice_cues: VoiceCuePlayer,
) -> Decision:
    """Evaluate *transition* and carry out the resulting sound / announcement.

    ``now`` must already be in the configured quiet-hours timezone.
    """
    decision = evaluate(
        transition, presence, ctx.config, ctx.dedup, now, hours=ctx.hours,
    )

    if decision.sound_id is not None and transition.channel_id is not None:
        voice_cues.schedule(
            transition.guild_id, transition.channel_id, decision.sound_id, ctx.log,
        )

    if decision.notify:
        await announce(ctx, transition, now)
    else:
        ctx.log.debug("Not announcing (%s)", decision.rejected_by)

    return decision
