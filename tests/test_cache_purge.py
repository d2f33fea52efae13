import threading
from datetime import datetime, timedelta, timezone

import pytest

from countrydash.cache_purge import (
    PurgeTask,
    default_purge_tasks,
    purge_cache_collection,
    purge_old_country_cache,
    purge_old_currency_cache,
    purge_old_weather_cache,
    run_purge_cycle,
    start_cache_purge_loop,
)
from countrydash.config import (
    COUNTRY_CACHE_COLLECTION,
    CURRENCY_CACHE_COLLECTION,
    WEATHER_CACHE_COLLECTION,
)
from countrydash.store import DocumentStore, get_client, set_client


@pytest.fixture
def store():
    previous = get_client()
    client = DocumentStore()
    set_client(client)
    yield client
    set_client(previous)


def _stamp(hours_ago):
    return {"timestamp": datetime.now(timezone.utc) - timedelta(hours=hours_ago)}


def test_purge_old_caches_on_empty_store(store):
    assert purge_old_country_cache() == 0
    assert purge_old_weather_cache() == 0
    assert purge_old_currency_cache() == 0


def test_purge_empty_collection(store):
    store.collection("test_cache").add(_stamp(2))
    assert purge_cache_collection("test_cache", timedelta(hours=1)) == 1
    assert list(store.collection("test_cache").stream()) == []


def test_purge_keeps_fresh_documents(store):
    store.collection("test_cache").document("old").set(_stamp(3))
    store.collection("test_cache").document("fresh").set(_stamp(0))
    purge_cache_collection("test_cache", timedelta(hours=1))
    remaining = [snap.id for snap in store.collection("test_cache").stream()]
    assert remaining == ["fresh"]


def test_purge_weather_respects_ttl(store):
    weather = store.collection(WEATHER_CACHE_COLLECTION)
    weather.document("stale").set(_stamp(3))
    weather.document("recent").set(_stamp(1))
    assert purge_old_weather_cache() == 1
    assert [snap.id for snap in weather.stream()] == ["recent"]


def test_single_purge_cycle():
    calls = {}

    def record(name):
        return lambda: calls.__setitem__(name, True)

    tasks = [
        PurgeTask("TestCountry", record("Country")),
        PurgeTask("TestWeather", record("Weather")),
        PurgeTask("TestCurrency", record("Currency")),
    ]
    failures = run_purge_cycle(tasks)
    assert failures == {}
    assert calls == {"Country": True, "Weather": True, "Currency": True}


def test_failing_task_does_not_stop_cycle():
    calls = []

    def boom():
        raise RuntimeError("boom")

    tasks = [
        PurgeTask("Bad", boom, "Bad purge error: {}"),
        PurgeTask("Good", lambda: calls.append("Good")),
    ]
    failures = run_purge_cycle(tasks)
    assert list(failures) == ["Bad"]
    assert str(failures["Bad"]) == "boom"
    assert calls == ["Good"]


def test_default_purge_tasks_order():
    names = [task.name for task in default_purge_tasks()]
    assert names == [COUNTRY_CACHE_COLLECTION, WEATHER_CACHE_COLLECTION, CURRENCY_CACHE_COLLECTION]


def test_cycle_without_store_reports_every_task():
    previous = get_client()
    set_client(None)
    try:
        failures = run_purge_cycle(default_purge_tasks())
    finally:
        set_client(previous)
    assert set(failures) == {
        COUNTRY_CACHE_COLLECTION,
        WEATHER_CACHE_COLLECTION,
        CURRENCY_CACHE_COLLECTION,
    }


def test_purge_loop_runs_once_when_stopped(store):
    store.collection(COUNTRY_CACHE_COLLECTION).document("NO").set(_stamp(25))
    store.collection(CURRENCY_CACHE_COLLECTION).document("NOK_USD").set(_stamp(13))
    stop = threading.Event()
    stop.set()
    start_cache_purge_loop(stop, timedelta(seconds=0))
    assert list(store.collection(COUNTRY_CACHE_COLLECTION).stream()) == []
    assert list(store.collection(CURRENCY_CACHE_COLLECTION).stream()) == []