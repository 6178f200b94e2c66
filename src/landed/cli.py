import asyncio
from contextlib import asynccontextmanager
import json
import logging
from typing import List

import typer
import aiohttp
import cachetools
import humanize
from tabulate import tabulate

from landed import config
from landed.cache import MemoryStore, get_store
from landed.checker import ReleaseChecker, utcnow
from landed.github import make_api
from landed.logger import LOG_FORMAT, configure_logging
from landed.model import CheckerConfig, StatusRecord


logging.basicConfig(format=LOG_FORMAT, level=logging.INFO)
logger = logging.getLogger("landed")

app = typer.Typer()
httpcache = cachetools.LRUCache(maxsize=500)


@app.callback()
def init():
    configure_logging(logger)


@asynccontextmanager
async def github_client(rate_limit: float):
    async with aiohttp.ClientSession() as session:
        yield make_api(
            session,
            token=config.GITHUB_TOKEN,
            cache=httpcache,
            rate_limit=rate_limit,
        )


def format_table(records: List[StatusRecord]) -> str:
    now = utcnow()
    rows = []
    for record in records:
        detail = record.error or record.message or ""
        if record.is_cherry_picked:
            detail = "cherry-picked"
        rows.append(
            (
                f"#{record.pr_number}",
                record.status.value,
                record.target_type or "",
                "" if record.is_in_release is None else record.is_in_release,
                detail,
                humanize.naturaltime(now - record.cached_at)
                if record.cached_at is not None
                else "",
            )
        )
    return tabulate(
        rows,
        headers=("PR", "Status", "Target", "In release", "Detail", "Checked"),
    )


@app.command()
def check(
    release_tag: str,
    pr_numbers: List[int],
    owner: str = typer.Option(None, help="Repository owner"),
    repo: str = typer.Option(None, help="Repository name"),
    as_json: bool = typer.Option(False, "--json", help="Print raw records as JSON"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Skip the disk cache"),
):
    """Check whether the given PRs have landed in RELEASE_TAG."""

    checker_config = CheckerConfig.from_env()

    async def handle():
        async with github_client(checker_config.api_rate_limit) as api:
            if no_cache:
                checker = ReleaseChecker(api, MemoryStore(), checker_config)
                return await checker.check_many(pr_numbers, release_tag, owner, repo)
            with get_store() as store:
                checker = ReleaseChecker(api, store, checker_config)
                return await checker.check_many(pr_numbers, release_tag, owner, repo)

    results = asyncio.run(handle())

    if as_json:
        typer.echo(
            json.dumps(
                {str(n): r.as_dict() for n, r in results.items()},
                indent=2,
            )
        )
    else:
        typer.echo(format_table(list(results.values())))
