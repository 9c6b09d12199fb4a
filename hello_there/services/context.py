"""
hello_there.services.context — Per-Event Context
==================================================

Each gateway event gets one :class:`EventContext` bundling the resolved
guild config, a logger scoped to the event, and the shared services.  It is
passed explicitly into every service call.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hello_there.engine.dedup import DedupWindow
    from hello_there.engine.eligibility import QuietHours
    from hello_there.engine.store import GuildConfig
    from hello_there.services.gateway import PlatformGateway
    from hello_there.services.role_sync import RoleSync


class EventLogAdapter(logging.LoggerAdapter):
    """Prefixes every message with the event's ``key=value`` fields."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        fields = " ".join(f"{k}={v}" for k, v in (self.extra or {}).items())
        kwargs.setdefault("extra", {}).update(self.extra or {})
        return (f"[{fields}] {msg}" if fields else msg), kwargs


def scoped_logger(base: logging.Logger, **fields: Any) -> EventLogAdapter:
    """Logger that tags every record with *fields* (guild, user, channel…)."""
    return EventLogAdapter(base, {k: v for k, v in fields.items() if v is not None})


@dataclass(frozen=True, slots=True)
class EventContext:
    """Everything a handler needs for one event."""

    config: GuildConfig
    log: logging.LoggerAdapter
    dedup: DedupWindow
    role_sync: RoleSync
    gateway: PlatformGateway
    hours: QuietHours
