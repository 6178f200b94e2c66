"""
Decide whether a merged pull request is contained in a release tag or branch.

Direct ancestry is checked first by comparing the merge commit against the
target commit. When that fails, commits in the compared range are scanned for
a reference to the merge commit or for the pull request title, which catches
cherry-picks and squashed backports at the cost of occasional false positives.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional, Union

import aiohttp
import pydantic
import gidgethub

from landed.github.api import API
from landed.github.model import Comparison, PullRequest
from landed.model import CheckerConfig, Status, StatusRecord

logger = logging.getLogger("landed")

UpstreamError = (
    gidgethub.HTTPException,
    aiohttp.ClientError,
    asyncio.TimeoutError,
    # unexpected payload shape from GitHub
    pydantic.ValidationError,
)


def _describe(exc: BaseException) -> Union[int, str]:
    if isinstance(exc, gidgethub.HTTPException):
        return int(exc.status_code)
    return type(exc).__name__


def _error(
    pr_number: Union[int, str], release_tag: str, what: str, exc: BaseException
) -> StatusRecord:
    logger.warning("%s for PR #%s (%s): %r", what, pr_number, release_tag, exc)
    return StatusRecord(
        status=Status.error,
        error=f"{what}: {_describe(exc)}",
        pr_number=pr_number,
        release_tag=release_tag,
    )


def is_cherry_picked(comparison: Comparison, pr: PullRequest) -> bool:
    for commit in comparison.commits:
        # `git cherry-pick -x` records the original sha in the message
        if pr.merge_commit_sha is not None and pr.merge_commit_sha in commit.message:
            return True
        if pr.title in commit.message:
            return True
    return False


async def resolve(
    api: API,
    owner: str,
    repo: str,
    pr_number: Union[int, str],
    release_tag: str,
    config: Optional[CheckerConfig] = None,
) -> StatusRecord:
    config = config or CheckerConfig()

    try:
        pr = await api.get_pull(owner, repo, pr_number)
    except UpstreamError as e:
        return _error(pr_number, release_tag, "Failed to fetch PR", e)

    if not pr.merged:
        return StatusRecord(
            status=Status.not_merged,
            pr_number=pr_number,
            release_tag=release_tag,
            message="PR is not merged yet",
        )

    if pr.merge_commit_sha is None:
        return StatusRecord(
            status=Status.error,
            error="Merged PR has no merge commit",
            pr_number=pr_number,
            release_tag=release_tag,
        )

    if config.freshness.is_moving_branch(release_tag):
        target_type = "branch"
        try:
            ref = await api.get_branch_ref(owner, repo, config.moving_branch)
        except UpstreamError as e:
            return _error(pr_number, release_tag, "Failed to fetch branch", e)
        target_sha = ref.object.sha
    else:
        target_type = "tag"
        try:
            ref = await api.get_tag_ref(owner, repo, release_tag)
        except UpstreamError as e:
            return _error(pr_number, release_tag, "Failed to fetch release tag", e)
        target_sha = ref.object.sha

        if ref.object.type == "tag":
            # annotated tag: the ref points at a tag object, not a commit
            try:
                tag = await api.get_annotated_tag(owner, repo, target_sha)
            except UpstreamError as e:
                return _error(pr_number, release_tag, "Failed to fetch tag object", e)
            target_sha = tag.object.sha

    logger.debug(
        "Comparing merge commit %s of %s against %s %s (%s)",
        pr.merge_commit_sha,
        pr,
        target_type,
        release_tag,
        target_sha,
    )

    try:
        comparison = await api.compare(owner, repo, pr.merge_commit_sha, target_sha)
    except UpstreamError as e:
        return _error(pr_number, release_tag, "Failed to compare commits", e)

    in_release = comparison.status in ("ahead", "identical")
    cherry_picked = False
    if not in_release:
        cherry_picked = is_cherry_picked(comparison, pr)
        if cherry_picked:
            logger.info("%s found in %s by commit message match", pr, release_tag)

    return StatusRecord(
        status=Status.merged if (in_release or cherry_picked) else Status.not_yet,
        pr_number=pr_number,
        release_tag=release_tag,
        target_type=target_type,
        merge_commit_sha=pr.merge_commit_sha,
        pr_merged_at=pr.merged_at,
        is_in_release=in_release,
        is_cherry_picked=cherry_picked,
    )
