from datetime import datetime, timedelta, timezone

import pytest

from landed.cache import (
    CacheDecision,
    MemoryStore,
    RecordStore,
    cache_key,
    evaluate,
    load_record,
    save_record,
)
from landed.model import FreshnessPolicy, Status, StatusRecord

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_record(status: Status, age: timedelta, release_tag="2026.2.0") -> StatusRecord:
    return StatusRecord(
        status=status,
        pr_number=42,
        release_tag=release_tag,
        cached_at=NOW - age,
    )


def test_absent_record_is_refreshed():
    assert evaluate(None, NOW, "2026.2.0") == CacheDecision.REFRESH


@pytest.mark.parametrize("age", [timedelta(0), timedelta(days=1), timedelta(days=3650)])
@pytest.mark.parametrize("release_tag", ["2026.2.0", "2026.3.0-dev"])
def test_merged_is_used_regardless_of_age(age, release_tag):
    record = make_record(Status.merged, age, release_tag)
    assert evaluate(record, NOW, release_tag) == CacheDecision.USE_CACHED


def test_not_yet_within_window_is_used():
    record = make_record(Status.not_yet, timedelta(hours=23, minutes=59))
    assert evaluate(record, NOW, "2026.2.0") == CacheDecision.USE_CACHED


def test_not_yet_past_window_is_refreshed():
    record = make_record(Status.not_yet, timedelta(hours=24, minutes=1))
    assert evaluate(record, NOW, "2026.2.0") == CacheDecision.REFRESH


@pytest.mark.parametrize("status", [Status.not_merged, Status.error])
def test_other_statuses_are_reused_forever(status):
    record = make_record(status, timedelta(days=400))
    assert evaluate(record, NOW, "2026.2.0") == CacheDecision.USE_CACHED


@pytest.mark.parametrize("status", [Status.not_merged, Status.error, Status.not_yet])
def test_moving_branch_records_expire(status):
    fresh = make_record(status, timedelta(hours=1), "2026.3.0-dev")
    stale = make_record(status, timedelta(hours=25), "2026.3.0-dev")

    assert evaluate(fresh, NOW, "2026.3.0-dev") == CacheDecision.USE_CACHED
    assert evaluate(stale, NOW, "2026.3.0-dev") == CacheDecision.REFRESH


def test_revalidated_statuses_are_configurable():
    policy = FreshnessPolicy(
        stale_after=timedelta(hours=1),
        revalidate=frozenset({Status.not_yet, Status.error}),
    )
    error = make_record(Status.error, timedelta(hours=2))
    not_merged = make_record(Status.not_merged, timedelta(hours=2))

    assert evaluate(error, NOW, "2026.2.0", policy) == CacheDecision.REFRESH
    assert evaluate(not_merged, NOW, "2026.2.0", policy) == CacheDecision.USE_CACHED


def test_missing_timestamp_is_refreshed():
    record = StatusRecord(status=Status.not_yet, pr_number=1, release_tag="2026.2.0")
    assert evaluate(record, NOW, "2026.2.0") == CacheDecision.REFRESH


def test_cache_key_is_deterministic():
    key = cache_key("esphome", "esphome", 42, "2026.2.0")
    assert key == "esphome/esphome/pr-42/release-2026.2.0"
    assert key == cache_key("esphome", "esphome", 42, "2026.2.0")
    assert key != cache_key("esphome", "esphome", 42, "2026.2.1")
    assert key != cache_key("esphome", "esphome-docs", 42, "2026.2.0")


def test_record_store_persists_between_instances(tmp_path):
    record = make_record(Status.merged, timedelta(hours=1))
    key = cache_key("esphome", "esphome", 42, "2026.2.0")

    with RecordStore(str(tmp_path)) as store:
        save_record(store, key, record)

    with RecordStore(str(tmp_path)) as store:
        assert store.get("missing") is None
        loaded = load_record(store, key)

    assert loaded == record


def test_unreadable_entry_is_treated_as_absent():
    store = MemoryStore({"k": "{not json"})
    assert load_record(store, "k") is None
    assert load_record(store, "absent") is None
