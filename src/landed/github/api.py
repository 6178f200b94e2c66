from typing import Any, Optional

from aiolimiter import AsyncLimiter
from gidgethub.abc import GitHubAPI
from sanic.log import logger

from landed.github.model import AnnotatedTag, Comparison, GitRef, PullRequest
from landed.metric import record_api_call


class API:
    gh: GitHubAPI
    limiter: Optional[AsyncLimiter]

    call_count: int

    def __init__(self, gh: GitHubAPI, limiter: Optional[AsyncLimiter] = None):
        self.gh = gh
        self.limiter = limiter
        self.call_count = 0

    async def _getitem(self, url: str) -> Any:
        self.call_count += 1
        record_api_call(endpoint=url)
        if self.limiter is None:
            return await self.gh.getitem(url)
        async with self.limiter:
            return await self.gh.getitem(url)

    async def get_pull(self, owner: str, repo: str, number: int) -> PullRequest:
        url = f"/repos/{owner}/{repo}/pulls/{number}"
        logger.debug("Get pull %s", url)
        return PullRequest.model_validate(await self._getitem(url))

    async def get_branch_ref(self, owner: str, repo: str, branch: str) -> GitRef:
        url = f"/repos/{owner}/{repo}/git/ref/heads/{branch}"
        logger.debug("Get branch ref %s", url)
        return GitRef.model_validate(await self._getitem(url))

    async def get_tag_ref(self, owner: str, repo: str, tag: str) -> GitRef:
        url = f"/repos/{owner}/{repo}/git/ref/tags/{tag}"
        logger.debug("Get tag ref %s", url)
        return GitRef.model_validate(await self._getitem(url))

    async def get_annotated_tag(self, owner: str, repo: str, sha: str) -> AnnotatedTag:
        url = f"/repos/{owner}/{repo}/git/tags/{sha}"
        logger.debug("Get annotated tag %s", url)
        return AnnotatedTag.model_validate(await self._getitem(url))

    async def compare(self, owner: str, repo: str, base: str, head: str) -> Comparison:
        url = f"/repos/{owner}/{repo}/compare/{base}...{head}"
        logger.debug("Compare %s", url)
        return Comparison.model_validate(await self._getitem(url))
