from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import logging
from typing import Callable, Dict, Hashable, Optional, Sequence, Union

from landed.cache import CacheDecision, Store, cache_key, evaluate, load_record, save_record
from landed.github.api import API
from landed.metric import cache_decision_counter, resolution_counter
from landed.model import CheckerConfig, StatusRecord
from landed.resolver import resolve

logger = logging.getLogger("landed")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReleaseChecker:
    api: API
    store: Store
    config: CheckerConfig

    def __init__(
        self,
        api: API,
        store: Store,
        config: Optional[CheckerConfig] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.api = api
        self.store = store
        self.config = config or CheckerConfig()
        self.clock = clock
        self._semaphore = asyncio.Semaphore(self.config.max_concurrency)

    async def check(
        self,
        pr_number: Union[int, str],
        release_tag: str,
        owner: Optional[str] = None,
        repo: Optional[str] = None,
    ) -> StatusRecord:
        owner = owner or self.config.default_owner
        repo = repo or self.config.default_repo
        key = cache_key(owner, repo, pr_number, release_tag)

        cached = load_record(self.store, key)
        decision = evaluate(cached, self.clock(), release_tag, self.config.freshness)
        if decision == CacheDecision.USE_CACHED:
            logger.debug("Cache hit for %s (%s)", key, cached.status.value)
            cache_decision_counter.labels(result="hit").inc()
            return cached

        if cached is None:
            logger.debug("Cache miss for %s", key)
            cache_decision_counter.labels(result="miss").inc()
        else:
            logger.debug("Cached %s for %s is stale", cached.status.value, key)
            cache_decision_counter.labels(result="stale").inc()

        async with self._semaphore:
            record = await resolve(
                self.api, owner, repo, pr_number, release_tag, self.config
            )
        resolution_counter.labels(status=record.status.value).inc()

        record.cached_at = self.clock()
        save_record(self.store, key, record)
        logger.info("Resolved %s: %s", key, record.status.value)
        return record

    async def check_many(
        self,
        pr_numbers: Sequence[Hashable],
        release_tag: str,
        owner: Optional[str] = None,
        repo: Optional[str] = None,
    ) -> Dict[Hashable, StatusRecord]:
        records = await asyncio.gather(
            *(self.check(n, release_tag, owner, repo) for n in pr_numbers)
        )
        logger.info(
            "Checked %d PRs against %s, API calls so far: %d",
            len(pr_numbers),
            release_tag,
            self.api.call_count,
        )
        return dict(zip(pr_numbers, records))
