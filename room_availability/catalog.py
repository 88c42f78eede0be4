"""Process-wide catalog of rooms and their busy intervals.

One planning resource identifier may list several rooms per event, and one
room may appear in several identifiers' feeds. The catalog therefore stores
each identifier's contribution separately and derives a room's busy set as
the union of all contributions. A successful refresh of an identifier
replaces its whole contribution, so cancelled events disappear; a failed
refresh leaves it untouched.

All access goes through a single ``threading.Lock``. Writers hold it only
for the in-memory swap; readers hold it only while copying a snapshot.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

from .models import BusyInterval, BusyRecord


@dataclass(frozen=True)
class CatalogSnapshot:
    """Immutable view of the catalog at one instant."""

    rooms: Dict[str, FrozenSet[BusyInterval]] = field(default_factory=dict)
    horizon: Optional[int] = None

    def busy_for(self, name: str) -> FrozenSet[BusyInterval]:
        return self.rooms.get(name, frozenset())


class RoomCatalog:
    """Lock-protected mapping from room name to busy intervals."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._contributions: Dict[str, Dict[str, FrozenSet[BusyInterval]]] = {}
        self._known: Set[str] = set()
        self._horizon: Optional[int] = None

    def replace_source(self, resource: str, records: Iterable[BusyRecord], horizon: Optional[int] = None) -> int:
        """Atomically replace everything ``resource`` contributes to the catalog.

        Records with an empty or inverted span are dropped. Returns the number
        of distinct rooms the resource now contributes to.
        """
        grouped: Dict[str, Set[BusyInterval]] = {}
        for record in records:
            if record.start >= record.end:
                continue
            grouped.setdefault(record.room_name, set()).add((record.start, record.end))
        frozen = {name: frozenset(slots) for name, slots in grouped.items()}
        with self._lock:
            self._contributions[resource] = frozen
            self._known.update(frozen)
            if horizon is not None:
                self._horizon = horizon
        return len(frozen)

    def snapshot(self) -> CatalogSnapshot:
        """Return a consistent copy of every known room's busy set."""
        with self._lock:
            merged: Dict[str, Set[BusyInterval]] = {name: set() for name in self._known}
            for contribution in self._contributions.values():
                for name, slots in contribution.items():
                    merged[name].update(slots)
            horizon = self._horizon
        return CatalogSnapshot(
            rooms={name: frozenset(slots) for name, slots in merged.items()},
            horizon=horizon,
        )

    def busy_for(self, name: str) -> FrozenSet[BusyInterval]:
        with self._lock:
            slots: Set[BusyInterval] = set()
            for contribution in self._contributions.values():
                slots.update(contribution.get(name, ()))
        return frozenset(slots)

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._known)

    @property
    def horizon(self) -> Optional[int]:
        with self._lock:
            return self._horizon

    def __len__(self) -> int:
        with self._lock:
            return len(self._known)
