from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import logging
from typing import Dict, Optional, Protocol

import diskcache
import pydantic

from landed import config
from landed.model import FreshnessPolicy, Status, StatusRecord

logger = logging.getLogger("landed")


class CacheDecision(Enum):
    USE_CACHED = 1
    REFRESH = 2


class Store(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def put(self, key: str, value: str) -> None: ...


class RecordStore(diskcache.Cache):
    """Disk-backed key-value store holding JSON-serialized status records."""

    def put(self, key: str, value: str) -> None:
        self.set(key, value)


@dataclass
class MemoryStore:
    data: Dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def put(self, key: str, value: str) -> None:
        self.data[key] = value


def get_store() -> RecordStore:
    logger.info("Opening cache dir: %s", config.DISKCACHE_DIR)
    return RecordStore(config.DISKCACHE_DIR)


def cache_key(owner: str, repo: str, pr_number: int, release_tag: str) -> str:
    return f"{owner}/{repo}/pr-{pr_number}/release-{release_tag}"


def load_record(store: Store, key: str) -> Optional[StatusRecord]:
    raw = store.get(key)
    if raw is None:
        return None
    try:
        return StatusRecord.from_json(raw)
    except pydantic.ValidationError:
        logger.warning("Discarding unreadable cache entry %s", key, exc_info=True)
        return None


def save_record(store: Store, key: str, record: StatusRecord) -> None:
    store.put(key, record.to_json())


def evaluate(
    record: Optional[StatusRecord],
    now: datetime,
    release_tag: str,
    policy: Optional[FreshnessPolicy] = None,
) -> CacheDecision:
    """
    Decide whether a stored record can be returned as-is.

    Merged records are final. Records whose status is subject to revalidation,
    and any record for a moving branch, are reused only within the staleness
    window. Everything else is reused regardless of age.
    """
    policy = policy or FreshnessPolicy()

    if record is None:
        return CacheDecision.REFRESH

    if record.status == Status.merged:
        return CacheDecision.USE_CACHED

    if record.status in policy.revalidate or policy.is_moving_branch(release_tag):
        if record.cached_at is None:
            return CacheDecision.REFRESH
        if now - record.cached_at < policy.stale_after:
            return CacheDecision.USE_CACHED
        return CacheDecision.REFRESH

    return CacheDecision.USE_CACHED
