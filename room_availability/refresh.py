"""Periodic refresh of the room catalog from the planning feeds.

A refresh pass walks every configured resource identifier, downloads its
feed outside the catalog lock, and swaps the identifier's contribution into
the catalog. Failures are logged and recorded per identifier; they never
abort the pass. Passes are not re-entrant: one requested while another is
running is skipped.
"""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Iterable, List, Optional, Tuple, Union

from apscheduler.schedulers.background import BackgroundScheduler

from .catalog import RoomCatalog
from .config import Settings, settings as default_settings
from .errors import FeedError
from .feed_client import fetch_busy_records
from .models import BusyRecord, RefreshReport

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "room_refresh"

Fetcher = Callable[[Union[int, str], date, date], List[BusyRecord]]
DateWindow = Tuple[date, date]


def _utcnow() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(timezone.utc)


def default_window(today: date, weeks_before: int = 2, weeks_after: int = 8) -> DateWindow:
    """Return the sliding ``(first_date, last_date)`` window around ``today``."""
    return today - timedelta(weeks=weeks_before), today + timedelta(weeks=weeks_after)


def window_horizon(window: DateWindow) -> int:
    """Return the timestamp at which ingested data ends: midnight UTC after the last day."""
    last_day = window[1] + timedelta(days=1)
    return int(datetime.combine(last_day, time.min, tzinfo=timezone.utc).timestamp())


class RefreshCoordinator:
    """Rebuilds the catalog from the feeds, once per pass, on a fixed period."""

    def __init__(
        self,
        catalog: RoomCatalog,
        fetcher: Fetcher = fetch_busy_records,
        config: Optional[Settings] = None,
    ) -> None:
        self.catalog = catalog
        self.fetcher = fetcher
        self.config = config or default_settings
        self.last_report: Optional[RefreshReport] = None
        self._running = threading.Lock()
        self._scheduler: Optional[BackgroundScheduler] = None

    def run_refresh_pass(
        self,
        resources: Optional[Iterable[Union[int, str]]] = None,
        window: Optional[DateWindow] = None,
    ) -> Optional[RefreshReport]:
        """Run one refresh pass over ``resources`` for ``window``.

        Returns the pass report, or None if another pass was already running.
        """
        if not self._running.acquire(blocking=False):
            logger.warning("Refresh pass already running; skipping this one")
            return None
        try:
            return self._run(resources, window)
        finally:
            self._running.release()

    def _run(
        self,
        resources: Optional[Iterable[Union[int, str]]],
        window: Optional[DateWindow],
    ) -> RefreshReport:
        report = RefreshReport(started_at=_utcnow())
        if window is None:
            window = default_window(
                report.started_at.date(),
                self.config.window_weeks_before,
                self.config.window_weeks_after,
            )
        horizon = window_horizon(window)
        identifiers = list(resources) if resources is not None else list(self.config.resources)

        for resource in identifiers:
            key = str(resource)
            try:
                records = self.fetcher(resource, window[0], window[1])
            except FeedError as exc:
                # Any failure is confined to this identifier; its previous
                # contribution stays in the catalog.
                logger.error("Error processing resource %s: %s", key, exc)
                report.failures[key] = str(exc)
                continue
            except Exception as exc:
                logger.exception("Unexpected error processing resource %s: %s", key, exc)
                report.failures[key] = str(exc)
                continue
            rooms = self.catalog.replace_source(key, records, horizon)
            report.succeeded.append(key)
            logger.debug("Resource %s refreshed: %d records over %d rooms", key, len(records), rooms)

        report.finished_at = _utcnow()
        logger.info(
            "Refresh pass done in %.1fs: %d ok, %d failed, %d rooms known",
            (report.finished_at - report.started_at).total_seconds(),
            len(report.succeeded),
            len(report.failures),
            len(self.catalog),
        )
        self.last_report = report
        return report

    def start(self) -> BackgroundScheduler:
        """Start the background scheduler; the first pass runs immediately."""
        if self._scheduler is not None:
            return self._scheduler
        scheduler = BackgroundScheduler(timezone=timezone.utc)
        scheduler.add_job(
            self.run_refresh_pass,
            "interval",
            seconds=self.config.refresh_seconds,
            id=REFRESH_JOB_ID,
            max_instances=1,
            coalesce=True,
            next_run_time=_utcnow(),
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("Refresh scheduler started; period %ss", self.config.refresh_seconds)
        return scheduler

    def shutdown(self) -> None:
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
