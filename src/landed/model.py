from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Annotated, Any, FrozenSet, Literal, Optional, Union

import pydantic
from pydantic import BeforeValidator, PlainSerializer


class Model(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(extra="forbid")


class Status(str, Enum):
    merged = "merged"
    not_yet = "not-yet"
    not_merged = "not-merged"
    error = "error"


def _parse_utc_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        dt = datetime.fromisoformat(raw)
    else:
        raise ValueError(f"Unsupported datetime value type: {type(value)!r}")
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _format_utc_datetime(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _format_github_datetime(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


UTCDateTime = Annotated[
    datetime,
    BeforeValidator(_parse_utc_datetime),
    PlainSerializer(_format_utc_datetime, return_type=str, when_used="always"),
]

# timestamps echoed from GitHub keep GitHub's second resolution
GitHubDateTime = Annotated[
    datetime,
    BeforeValidator(_parse_utc_datetime),
    PlainSerializer(_format_github_datetime, return_type=str, when_used="always"),
]


class StatusRecord(pydantic.BaseModel):
    """Answer for one (pull request, release) pairing, as stored and returned."""

    model_config = pydantic.ConfigDict(extra="ignore")

    status: Status
    pr_number: Union[int, str]
    release_tag: str
    error: Optional[str] = None
    message: Optional[str] = None
    target_type: Optional[Literal["tag", "branch"]] = None
    merge_commit_sha: Optional[str] = None
    pr_merged_at: Optional[GitHubDateTime] = None
    is_in_release: Optional[bool] = None
    is_cherry_picked: Optional[bool] = None
    cached_at: Optional[UTCDateTime] = None

    def as_dict(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)

    @classmethod
    def from_json(cls, raw: str) -> StatusRecord:
        return cls.model_validate_json(raw)


class FreshnessPolicy(Model):
    model_config = pydantic.ConfigDict(extra="forbid", frozen=True)

    stale_after: timedelta = timedelta(hours=24)
    moving_branch_suffix: str = "dev"
    revalidate: FrozenSet[Status] = frozenset({Status.not_yet})

    def is_moving_branch(self, release_tag: str) -> bool:
        return release_tag.endswith(self.moving_branch_suffix)


class CheckerConfig(Model):
    default_owner: str = "esphome"
    default_repo: str = "esphome"
    moving_branch: str = "dev"
    freshness: FreshnessPolicy = pydantic.Field(default_factory=FreshnessPolicy)
    max_concurrency: int = pydantic.Field(8, ge=1)
    api_rate_limit: float = pydantic.Field(10.0, gt=0)

    @classmethod
    def from_env(cls) -> CheckerConfig:
        from landed import config

        return cls(
            default_owner=config.DEFAULT_REPO_OWNER,
            default_repo=config.DEFAULT_REPO_NAME,
            moving_branch=config.MOVING_BRANCH,
            freshness=FreshnessPolicy(
                stale_after=timedelta(hours=config.STALE_AFTER_HOURS),
                moving_branch_suffix=config.MOVING_BRANCH_SUFFIX,
                revalidate=frozenset(Status(s) for s in config.REVALIDATE_STATUSES),
            ),
            max_concurrency=config.MAX_CONCURRENCY,
            api_rate_limit=config.API_RATE_LIMIT,
        )
