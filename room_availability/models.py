"""Data models shared by the engine and the API.

``BusyInterval`` and ``BusyRecord`` are plain tuples so they can live in sets
and sort naturally. The Pydantic models define the structure of the JSON
returned from the API and are separate from the feed data structures.
"""

from datetime import datetime
from typing import Dict, List, NamedTuple, Optional, Tuple

from pydantic import BaseModel

# Half-open [start, end) in UNIX seconds.
BusyInterval = Tuple[int, int]


class BusyRecord(NamedTuple):
    """One busy interval for one named room, as extracted from a feed."""

    room_name: str
    start: int
    end: int


class RoomAvailability(BaseModel):
    """Represents the status of a room at a reference time."""

    name: str
    status: str
    duration: int
    open: bool


class RefreshReport(BaseModel):
    """Outcome of one refresh pass."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    succeeded: List[str] = []
    failures: Dict[str, str] = {}

    @property
    def ok(self) -> bool:
        return not self.failures
