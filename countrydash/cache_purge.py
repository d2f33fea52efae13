"""Removal of stale cache entries, once or in a recurring loop."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from countrydash.config import (
    CACHE_PURGE_INTERVAL,
    COUNTRY_CACHE_COLLECTION,
    COUNTRY_CACHE_TTL,
    CURRENCY_CACHE_COLLECTION,
    CURRENCY_CACHE_TTL,
    ERR_PURGE_COUNTRY_CACHE,
    ERR_PURGE_CURRENCY_CACHE,
    ERR_PURGE_WEATHER_CACHE,
    MSG_CACHE_PURGE_DONE,
    MSG_CACHE_PURGE_START,
    MSG_PURGE_SUCCESS,
    OPERATOR_LESS_THAN,
    TIMESTAMP_FIELD,
    WEATHER_CACHE_COLLECTION,
    WEATHER_CACHE_TTL,
)
from countrydash.store import StoreError, firestore_client

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PurgeTask:
    """One purge job: the collection it covers, what to run, and how to report failure."""

    name: str
    func: Callable[[], object]
    err: str = "{}"


def purge_cache_collection(collection: str, older_than: timedelta) -> int:
    """Delete documents in ``collection`` stamped before now minus ``older_than``."""
    threshold = datetime.now(timezone.utc) - older_than
    query = firestore_client().collection(collection).where(
        TIMESTAMP_FIELD, OPERATOR_LESS_THAN, threshold
    )
    snapshots = list(query.stream())
    logger.info(MSG_PURGE_SUCCESS.format(len(snapshots), collection))
    for snapshot in snapshots:
        try:
            snapshot.ref.delete()
        except StoreError:
            pass
    return len(snapshots)


def purge_old_country_cache() -> int:
    return purge_cache_collection(COUNTRY_CACHE_COLLECTION, COUNTRY_CACHE_TTL)


def purge_old_weather_cache() -> int:
    return purge_cache_collection(WEATHER_CACHE_COLLECTION, WEATHER_CACHE_TTL)


def purge_old_currency_cache() -> int:
    return purge_cache_collection(CURRENCY_CACHE_COLLECTION, CURRENCY_CACHE_TTL)


def default_purge_tasks() -> list[PurgeTask]:
    """Purge jobs for the country, weather and currency caches, in that order."""
    return [
        PurgeTask(COUNTRY_CACHE_COLLECTION, purge_old_country_cache, ERR_PURGE_COUNTRY_CACHE),
        PurgeTask(WEATHER_CACHE_COLLECTION, purge_old_weather_cache, ERR_PURGE_WEATHER_CACHE),
        PurgeTask(CURRENCY_CACHE_COLLECTION, purge_old_currency_cache, ERR_PURGE_CURRENCY_CACHE),
    ]


def run_purge_cycle(tasks: Iterable[PurgeTask]) -> dict[str, Exception]:
    """Run every task in order; return the failures by task name."""
    logger.info(MSG_CACHE_PURGE_START)
    failures: dict[str, Exception] = {}
    for task in tasks:
        try:
            task.func()
        except Exception as exc:
            logger.error(task.err.format(exc))
            failures[task.name] = exc
    logger.info(MSG_CACHE_PURGE_DONE)
    return failures


def start_cache_purge_loop(
    stop_event: threading.Event | None = None,
    interval: timedelta = CACHE_PURGE_INTERVAL,
) -> None:
    """Purge all caches now and then once per ``interval`` until ``stop_event`` is set."""
    stop = stop_event if stop_event is not None else threading.Event()
    tasks = default_purge_tasks()
    while True:
        run_purge_cycle(tasks)
        if stop.wait(interval.total_seconds()):
            return