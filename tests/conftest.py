from datetime import datetime, timezone
from typing import Dict, List, Union

import pytest

from room_availability.catalog import RoomCatalog
from room_availability.config import Settings
from room_availability.errors import FeedTransportError
from room_availability.models import BusyRecord

NOW = datetime(2024, 3, 12, 10, 0, tzinfo=timezone.utc)


def ts(*args: int) -> int:
    """Return the UTC timestamp for ``datetime(*args)``."""
    return int(datetime(*args, tzinfo=timezone.utc).timestamp())


class FakeFetcher:
    """Stands in for the feed client; maps resource ids to records or errors."""

    def __init__(self, feeds: Dict[str, Union[List[BusyRecord], Exception]]):
        self.feeds = feeds
        self.calls: List[tuple] = []

    def __call__(self, resource, first_date, last_date):
        self.calls.append((str(resource), first_date, last_date))
        result = self.feeds.get(str(resource))
        if result is None:
            raise FeedTransportError(str(resource), "unreachable")
        if isinstance(result, Exception):
            raise result
        return list(result)


@pytest.fixture
def catalog() -> RoomCatalog:
    return RoomCatalog()


@pytest.fixture
def config() -> Settings:
    return Settings(
        resources=[1, 2],
        refresh_seconds=3600,
        room_name_pattern=r"^V-[AB]",
        service_day_start_hour=8,
        service_timezone="UTC",
    )
