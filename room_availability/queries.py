"""Read-only availability queries over the room catalog.

Each query takes one catalog snapshot and computes on it, so it sees a
single consistent state even while a refresh pass is swapping feeds in.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from .catalog import RoomCatalog
from .config import Settings, settings as default_settings
from .intervals import compute_free, open_today, service_day, status_at
from .models import BusyInterval, RoomAvailability

NameFilter = Callable[[str], bool]


def name_matcher(pattern: str) -> NameFilter:
    """Build a room name predicate from a regular expression."""
    regex = re.compile(pattern)
    return lambda name: regex.search(name) is not None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AvailabilityService:
    """Answers 'what is free' queries from the shared catalog."""

    def __init__(self, catalog: RoomCatalog, config: Optional[Settings] = None) -> None:
        self.catalog = catalog
        self.config = config or default_settings

    def list_all_free(self, name_filter: NameFilter, now: Optional[datetime] = None) -> Dict[str, List[BusyInterval]]:
        """Return the free intervals from ``now`` onward for every matching room.

        Rooms without any observed busy interval are left out. Until a
        refresh pass has set the horizon no room is reported.
        """
        reference = int((now or _utcnow()).timestamp())
        snapshot = self.catalog.snapshot()
        if snapshot.horizon is None:
            return {}
        return {
            name: compute_free(busy, reference, snapshot.horizon)
            for name, busy in snapshot.rooms.items()
            if busy and name_filter(name)
        }

    def get_status_at(
        self,
        name_filter: NameFilter,
        reference: int,
        now: Optional[datetime] = None,
    ) -> List[RoomAvailability]:
        """Return the status of every matching room at ``reference``, sorted by name.

        ``open`` reflects whether the room has any booking inside today's
        service day, computed from the real current time regardless of
        ``reference``.

        Raises:
            ReferenceClockError: if today's service day cannot be derived.
        """
        day_start, day_end = service_day(
            now or _utcnow(),
            self.config.service_day_start_hour,
            self.config.service_timezone,
        )
        snapshot = self.catalog.snapshot()
        results: List[RoomAvailability] = []
        for name, busy in snapshot.rooms.items():
            if not name_filter(name):
                continue
            status, duration = status_at(busy, reference)
            results.append(
                RoomAvailability(
                    name=name,
                    status=status,
                    duration=duration,
                    open=bool(busy) and open_today(busy, day_start, day_end),
                )
            )
        results.sort(key=lambda r: r.name)
        return results
