from typing import MutableMapping, Optional

import aiohttp
from aiolimiter import AsyncLimiter
from gidgethub import aiohttp as gh_aiohttp

from landed.github.api import API

REQUESTER = "landed-pr-checker"


def make_api(
    session: aiohttp.ClientSession,
    token: Optional[str] = None,
    cache: Optional[MutableMapping] = None,
    rate_limit: Optional[float] = None,
) -> API:
    """
    Build an API wrapper around a gidgethub client.

    Without a token GitHub is queried anonymously, which works for public
    repositories at a much lower rate limit.
    """
    gh = gh_aiohttp.GitHubAPI(session, REQUESTER, oauth_token=token, cache=cache)
    limiter = AsyncLimiter(rate_limit, 1) if rate_limit is not None else None
    return API(gh, limiter)


__all__ = ["API", "make_api"]
