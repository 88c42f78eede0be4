"""iCalendar feed client utilities for the room availability service.

This module downloads the planning feed for one resource identifier and
extracts ``(room_name, start, end)`` busy records from it. It deliberately
keeps no state: the refresh coordinator decides what to do with the records
or with the ``FeedError`` raised on failure.

Transport failures and malformed documents are reported as distinct error
types. There is no retry here; the next scheduled refresh pass is the retry.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from typing import Any, List, Optional, Union

import requests
from icalendar import Calendar

from .config import settings
from .errors import FeedTransportError, MalformedFeedError
from .models import BusyRecord

logger = logging.getLogger(__name__)

FEED_DATE_FORMAT = "%Y-%m-%d"


def format_feed_url(resource: Union[int, str], first_date: date, last_date: date, template: Optional[str] = None) -> str:
    """Return the feed URL for ``resource`` covering ``[first_date, last_date]``."""
    return (template or settings.feed_url_template).format(
        resource=resource,
        first_date=first_date.strftime(FEED_DATE_FORMAT),
        last_date=last_date.strftime(FEED_DATE_FORMAT),
    )


def _to_timestamp(value: Union[date, datetime]) -> int:
    """Convert an iCalendar date or datetime to a UNIX timestamp.

    Date-only values are taken as midnight UTC and floating times as UTC.
    """
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def split_room_names(location: str) -> List[str]:
    """Split an event location into room names.

    Planning events list every booked room in one comma separated location.
    """
    return [name.strip() for name in location.replace("\\,", ",").split(",") if name.strip()]


def parse_feed(resource: str, text: Union[str, bytes]) -> List[BusyRecord]:
    """Parse an iCalendar document into busy records.

    Raises:
        MalformedFeedError: if the document does not parse or an event has no
            usable start or end.
    """
    try:
        calendar = Calendar.from_ical(text)
    except (ValueError, KeyError, IndexError, TypeError) as exc:
        raise MalformedFeedError(resource, f"unparsable calendar: {exc}") from exc

    records: List[BusyRecord] = []
    for event in calendar.walk("VEVENT"):
        start_prop: Any = event.get("DTSTART")
        end_prop: Any = event.get("DTEND")
        start = getattr(start_prop, "dt", None)
        end = getattr(end_prop, "dt", None)
        if not isinstance(start, date) or not isinstance(end, date):
            raise MalformedFeedError(resource, f"event {event.get('UID', '?')} has no usable DTSTART/DTEND")
        location = event.get("LOCATION")
        if not location:
            logger.debug("Skipping event %s without location in resource %s", event.get("UID", "?"), resource)
            continue
        start_ts = _to_timestamp(start)
        end_ts = _to_timestamp(end)
        for name in split_room_names(str(location)):
            records.append(BusyRecord(name, start_ts, end_ts))
    return records


def fetch_busy_records(
    resource: Union[int, str],
    first_date: date,
    last_date: date,
    *,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
    url_template: Optional[str] = None,
) -> List[BusyRecord]:
    """Download and parse the feed of one planning resource.

    Args:
        resource: the planning resource identifier.
        first_date: first calendar day of the requested window.
        last_date: last calendar day of the requested window.
        session: optional ``requests`` session, mostly for connection reuse.
        timeout: network timeout in seconds; defaults to the configured value.
        url_template: overrides the configured feed URL template.

    Returns:
        The busy records found in the feed, one per (event, room name).

    Raises:
        FeedTransportError: if the download fails or returns an HTTP error.
        MalformedFeedError: if the body is not a usable calendar.
    """
    key = str(resource)
    url = format_feed_url(resource, first_date, last_date, url_template)
    http = session or requests
    try:
        response = http.get(url, timeout=timeout if timeout is not None else settings.fetch_timeout_seconds)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise FeedTransportError(key, str(exc)) from exc
    records = parse_feed(key, response.content)
    logger.debug("Resource %s: %d busy records between %s and %s", key, len(records), first_date, last_date)
    return records
