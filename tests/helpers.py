from http import HTTPStatus

from gidgethub import BadRequest, GitHubBroken

MERGE_SHA = "a" * 40
TAG_SHA = "b" * 40
DEV_SHA = "c" * 40
TAG_OBJECT_SHA = "d" * 40

REPO = "/repos/esphome/esphome"


class FakeGitHub:
    """Stands in for gidgethub's GitHubAPI, serving canned payloads by URL."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    async def getitem(self, url):
        self.calls.append(url)
        value = self.responses.get(url, HTTPStatus.NOT_FOUND)
        if isinstance(value, HTTPStatus):
            if value >= 500:
                raise GitHubBroken(value)
            raise BadRequest(value)
        return value


def pull_payload(number=42, merged=True, title="Add frobnicator component"):
    return {
        "url": f"https://api.github.com{REPO}/pulls/{number}",
        "number": number,
        "title": title,
        "state": "closed" if merged else "open",
        "merged": merged,
        "merge_commit_sha": MERGE_SHA if merged else None,
        "merged_at": "2026-02-16T10:00:00Z" if merged else None,
        "html_url": f"https://github.com/esphome/esphome/pull/{number}",
    }


def ref_payload(ref, sha, type="commit"):
    return {
        "ref": ref,
        "node_id": "REF_kwDO",
        "url": f"https://api.github.com{REPO}/git/{ref}",
        "object": {"sha": sha, "type": type, "url": "https://api.github.com/x"},
    }


def compare_payload(status, messages=()):
    return {
        "status": status,
        "ahead_by": len(messages),
        "behind_by": 0,
        "total_commits": len(messages),
        "commits": [
            {"sha": f"{i:040x}", "commit": {"message": message}}
            for i, message in enumerate(messages, start=1)
        ],
    }


def released_responses(number=42, status="ahead", messages=(), tag="2026.2.0"):
    return {
        f"{REPO}/pulls/{number}": pull_payload(number),
        f"{REPO}/git/ref/tags/{tag}": ref_payload(f"refs/tags/{tag}", TAG_SHA),
        f"{REPO}/compare/{MERGE_SHA}...{TAG_SHA}": compare_payload(status, messages),
    }
