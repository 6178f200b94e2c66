import re

from prometheus_client import Counter

request_counter = Counter(
    "landed_num_req", "Total number of requests", labelnames=["path", "method"]
)

cache_decision_counter = Counter(
    "landed_cache_decision",
    "Cache lookups by outcome",
    labelnames=["result"],
)

resolution_counter = Counter(
    "landed_num_resolution",
    "Number of fresh resolutions against GitHub by resulting status",
    labelnames=["status"],
)

error_counter = Counter(
    "landed_error_counter", "Total number of errors", labelnames=["context"]
)

api_call_count = Counter(
    "landed_num_api_calls",
    "Total number of GitHub API calls",
    labelnames=["endpoint"],
)

_ENDPOINT_PATTERNS = [
    (re.compile(r"^/repos/[^/]+/[^/]+/pulls/\d+$"), "pulls"),
    (re.compile(r"^/repos/[^/]+/[^/]+/git/ref/heads/.+$"), "ref/heads"),
    (re.compile(r"^/repos/[^/]+/[^/]+/git/ref/tags/.+$"), "ref/tags"),
    (re.compile(r"^/repos/[^/]+/[^/]+/git/tags/[0-9a-f]+$"), "tags"),
    (re.compile(r"^/repos/[^/]+/[^/]+/compare/.+$"), "compare"),
]


def _normalize_api_endpoint(url: str) -> str:
    for pattern, name in _ENDPOINT_PATTERNS:
        if pattern.match(url):
            return name
    return "other"


def record_api_call(endpoint: str) -> None:
    api_call_count.labels(endpoint=_normalize_api_endpoint(endpoint)).inc()
