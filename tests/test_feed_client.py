from datetime import date

import pytest
import requests

from room_availability.errors import FeedTransportError, MalformedFeedError
from room_availability.feed_client import (
    fetch_busy_records,
    format_feed_url,
    parse_feed,
    split_room_names,
)
from room_availability.models import BusyRecord

from tests.conftest import ts

FEED = "\r\n".join(
    [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//ADE//EN",
        "BEGIN:VEVENT",
        "UID:ev-1",
        "DTSTAMP:20240301T000000Z",
        "DTSTART:20240312T080000Z",
        "DTEND:20240312T100000Z",
        "SUMMARY:Algebra",
        "LOCATION:V-A 101\\,V-B 202",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:ev-2",
        "DTSTAMP:20240301T000000Z",
        "DTSTART:20240313T133000Z",
        "DTEND:20240313T150000Z",
        "SUMMARY:Physics",
        "LOCATION:V-A 101",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:ev-3",
        "DTSTAMP:20240301T000000Z",
        "DTSTART:20240314T080000Z",
        "DTEND:20240314T090000Z",
        "SUMMARY:Remote",
        "END:VEVENT",
        "END:VCALENDAR",
        "",
    ]
)


class FakeResponse:
    def __init__(self, text: str, status_code: int = 200):
        self.text = text
        self.content = text.encode("utf-8")
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, timeout=None):
        self.requests.append((url, timeout))
        if self.error is not None:
            raise self.error
        return self.response


def test_format_feed_url_uses_iso_dates():
    url = format_feed_url(726, date(2024, 2, 27), date(2024, 5, 7))
    assert "resources=726" in url
    assert "firstDate=2024-02-27" in url
    assert "lastDate=2024-05-07" in url
    assert "calType=ical" in url


def test_split_room_names():
    assert split_room_names("V-A 101, V-B 202,") == ["V-A 101", "V-B 202"]
    assert split_room_names("V-A 101\\,V-B 202") == ["V-A 101", "V-B 202"]
    assert split_room_names("") == []


def test_parse_feed_fans_out_room_names():
    records = parse_feed("726", FEED)
    assert records == [
        BusyRecord("V-A 101", ts(2024, 3, 12, 8), ts(2024, 3, 12, 10)),
        BusyRecord("V-B 202", ts(2024, 3, 12, 8), ts(2024, 3, 12, 10)),
        BusyRecord("V-A 101", ts(2024, 3, 13, 13, 30), ts(2024, 3, 13, 15)),
    ]


def test_parse_feed_accepts_all_day_events():
    feed = FEED.replace("DTSTART:20240313T133000Z", "DTSTART;VALUE=DATE:20240313").replace(
        "DTEND:20240313T150000Z", "DTEND;VALUE=DATE:20240314"
    )
    records = parse_feed("726", feed)
    assert BusyRecord("V-A 101", ts(2024, 3, 13), ts(2024, 3, 14)) in records


def test_parse_feed_rejects_garbage():
    with pytest.raises(MalformedFeedError):
        parse_feed("726", "this is not a calendar")


def test_parse_feed_rejects_event_without_end():
    feed = FEED.replace("DTEND:20240312T100000Z\r\n", "")
    with pytest.raises(MalformedFeedError) as info:
        parse_feed("726", feed)
    assert info.value.resource == "726"


def test_fetch_busy_records_uses_timeout():
    session = FakeSession(FakeResponse(FEED))
    records = fetch_busy_records(726, date(2024, 2, 27), date(2024, 5, 7), session=session, timeout=3.0)
    assert len(records) == 3
    url, timeout = session.requests[0]
    assert "resources=726" in url
    assert timeout == 3.0


def test_fetch_busy_records_network_error():
    session = FakeSession(error=requests.ConnectionError("connection refused"))
    with pytest.raises(FeedTransportError):
        fetch_busy_records(726, date(2024, 2, 27), date(2024, 5, 7), session=session)


def test_fetch_busy_records_http_error():
    session = FakeSession(FakeResponse("oops", status_code=503))
    with pytest.raises(FeedTransportError):
        fetch_busy_records(726, date(2024, 2, 27), date(2024, 5, 7), session=session)
