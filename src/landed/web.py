from importlib.metadata import PackageNotFoundError, version
import logging
import traceback

from sanic import Sanic, response, Request
from sanic.log import logger
import sanic.log
import aiohttp
import cachetools
from prometheus_client import core
from prometheus_client.exposition import CONTENT_TYPE_LATEST, generate_latest

from landed import config
from landed.cache import get_store
from landed.checker import ReleaseChecker
from landed.github import make_api
from landed.logger import LOG_FORMAT, configure_logging
from landed.metric import error_counter, request_counter
from landed.model import CheckerConfig

try:
    VERSION = version("landed")
except PackageNotFoundError:
    VERSION = "unknown"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


logging.basicConfig(format=LOG_FORMAT, level=logging.INFO)


def response_headers():
    return {**CORS_HEADERS, "X-Service-Version": VERSION}


async def handle_check(checker: ReleaseChecker, request):
    headers = response_headers()

    if request.method == "OPTIONS":
        return response.HTTPResponse(
            "", status=200, headers=headers, content_type="application/json"
        )

    try:
        if request.method != "POST":
            return response.json(
                {"error": "Method not allowed. Use POST."}, status=405, headers=headers
            )

        body = request.json
        if not isinstance(body, dict):
            body = {}

        release_tag = body.get("release_tag")
        pr_numbers = body.get("pr_numbers")

        if not release_tag or not isinstance(pr_numbers, list):
            return response.json(
                {"error": "Missing required fields: release_tag and pr_numbers (array)"},
                status=400,
                headers=headers,
            )

        results = await checker.check_many(
            pr_numbers,
            release_tag,
            owner=body.get("repo_owner"),
            repo=body.get("repo_name"),
        )

        return response.json(
            {str(number): record.as_dict() for number, record in results.items()},
            headers=headers,
            indent=2,
        )
    except Exception as e:
        error_counter.labels(context="check").inc()
        logger.error("Exception raised while checking PRs", exc_info=True)
        return response.json(
            {"error": str(e), "stack": traceback.format_exc()},
            status=500,
            headers=headers,
        )


def create_app():

    app = Sanic("landed")
    app.update_config(config)

    sanic.log.logger.handlers = []
    configure_logging(sanic.log.logger, logging.getLogger("landed"))

    app.ctx.cache = cachetools.LRUCache(maxsize=500)

    @app.listener("before_server_start")
    async def init(app, loop):
        logger.debug("Creating aiohttp session")
        app.ctx.aiohttp_session = aiohttp.ClientSession()
        app.ctx.store = get_store()
        checker_config = CheckerConfig.from_env()

        api = make_api(
            app.ctx.aiohttp_session,
            token=config.GITHUB_TOKEN,
            cache=app.ctx.cache,
            rate_limit=checker_config.api_rate_limit,
        )
        if config.GITHUB_TOKEN is None:
            logger.warning("GITHUB_TOKEN not set, using anonymous GitHub access")

        app.ctx.checker = ReleaseChecker(api, app.ctx.store, checker_config)

    @app.listener("after_server_stop")
    async def teardown(app, loop):
        await app.ctx.aiohttp_session.close()
        app.ctx.store.close()

    @app.on_request
    async def on_request(request: Request):
        if request.path == "/metrics":
            return
        request_counter.labels(path=request.path, method=request.method).inc()

    @app.route("/", methods=ALL_METHODS)
    async def check(request):
        return await handle_check(app.ctx.checker, request)

    @app.get("/status")
    async def status(request):
        logger.debug("status check")
        return response.text("ok")

    @app.get("/metrics")
    async def metrics(request):
        data = generate_latest(core.REGISTRY)
        return response.raw(data, content_type=CONTENT_TYPE_LATEST)

    return app
