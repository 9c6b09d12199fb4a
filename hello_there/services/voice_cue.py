"""
hello_there.services.voice_cue — Join Sound Playback
======================================================

Joins the member's voice channel, fires their soundboard clip, and leaves
again after a short delay.

Disconnects are cancel-or-validate: a newer cue in the same guild cancels
the pending disconnect, and a disconnect that does fire first checks the bot
is still in the channel it was scheduled for.  A fast second join elsewhere
therefore never gets cut off by the first cue's timer.
"""

from __future__ import annotations

import asyncio
import logging

from hello_there.constants import DEFAULT_VOICE_DISCONNECT_DELAY_SECONDS
from hello_there.errors import TransientCapabilityError
from hello_there.services.gateway import PlatformGateway

logger = logging.getLogger(__name__)


class VoiceCuePlayer:
    """Plays join sounds and owns the delayed-disconnect timers (one per guild)."""

    def __init__(
        self,
        gateway: PlatformGateway,
        disconnect_delay: float = DEFAULT_VOICE_DISCONNECT_DELAY_SECONDS,
    ) -> None:
        self.gateway = gateway
        self.disconnect_delay = disconnect_delay
        self._pending: dict[int, asyncio.Task] = {}
        self._cues: set[asyncio.Task] = set()
        self._locks: dict[int, asyncio.Lock] = {}

    def pending_disconnect(self, guild_id: int) -> asyncio.Task | None:
        return self._pending.get(guild_id)

    def schedule(
        self,
        guild_id: int,
        channel_id: int,
        sound_id: int,
        log: logging.Logger | logging.LoggerAdapter = logger,
    ) -> asyncio.Task:
        """Run :meth:`play` as its own task and return it.

        The caller is not held up by a slow voice connect.  The task is kept
        until it finishes and any unexpected exception is logged.
        """
        task = asyncio.get_running_loop().create_task(
            self.play(guild_id, channel_id, sound_id, log),
            name=f"voice-cue-{guild_id}-{sound_id}",
        )
        self._cues.add(task)

        def _done(t: asyncio.Task) -> None:
            self._cues.discard(t)
            if not t.cancelled() and t.exception() is not None:
                log.error(
                    "Join sound %d in channel %d crashed", sound_id, channel_id,
                    exc_info=t.exception(),
                )

        task.add_done_callback(_done)
        return task

    async def play(
        self,
        guild_id: int,
        channel_id: int,
        sound_id: int,
        log: logging.Logger | logging.LoggerAdapter = logger,
    ) -> bool:
        """Join *channel_id*, play *sound_id*, schedule the disconnect.

        Returns True if the clip was triggered.  Failures are logged, never raised.
        """
        lock = self._locks.setdefault(guild_id, asyncio.Lock())
        async with lock:
            self._cancel_pending(guild_id)
            try:
                await self.gateway.join_voice(guild_id, channel_id)
                await self.gateway.trigger_sound(guild_id, channel_id, sound_id)
                played = True
                log.info("Played join sound %d in channel %d", sound_id, channel_id)
            except TransientCapabilityError as exc:
                played = False
                log.error("Could not play join sound %d: %s", sound_id, exc)
            # Scheduled even on failure: a join that succeeded must still be undone.
            self._schedule_disconnect(guild_id, channel_id, log)
        return played

    def _cancel_pending(self, guild_id: int) -> None:
        task = self._pending.pop(guild_id, None)
        if task is not None and not task.done():
            task.cancel()

    def _schedule_disconnect(self, guild_id: int, channel_id: int, log) -> None:
        self._cancel_pending(guild_id)
        self._pending[guild_id] = asyncio.get_running_loop().create_task(
            self._disconnect_later(guild_id, channel_id, log),
            name=f"voice-cue-disconnect-{guild_id}",
        )

    async def _disconnect_later(self, guild_id: int, channel_id: int, log) -> None:
        try:
            await asyncio.sleep(self.disconnect_delay)
            current = self.gateway.current_voice_channel(guild_id)
            if current != channel_id:
                log.debug(
                    "Skipping disconnect: bot is in %s, cue was for %d", current, channel_id,
                )
                return
            try:
                await self.gateway.disconnect_voice(guild_id)
            except TransientCapabilityError as exc:
                log.warning("Voice disconnect failed: %s", exc)
        finally:
            if self._pending.get(guild_id) is asyncio.current_task():
                del self._pending[guild_id]

    async def close(self) -> None:
        """Cancel every running cue and pending disconnect (bot shutdown)."""
        tasks = [*self._cues, *self._pending.values()]
        self._cues.clear()
        self._pending.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
