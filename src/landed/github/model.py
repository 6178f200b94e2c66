from datetime import datetime
from typing import Annotated, List, Literal, Optional

import pydantic
from pydantic import AfterValidator


class Model(pydantic.BaseModel):
    pass


def _validate_commit_sha(sha: str) -> str:
    if len(sha) != 40:
        raise ValueError("Commit hash must have length 40")
    return sha


CommitSha = Annotated[str, AfterValidator(_validate_commit_sha)]


class PullRequest(Model):
    number: int
    title: str
    state: Literal["open", "closed"]
    merged: bool = False
    merge_commit_sha: Optional[CommitSha] = None
    merged_at: Optional[datetime] = None
    html_url: Optional[str] = None

    def __str__(self) -> str:
        return f"PR(#{self.number})"


class GitObject(Model):
    sha: CommitSha
    type: Literal["commit", "tag", "tree", "blob"]
    url: Optional[str] = None


class GitRef(Model):
    ref: str
    object: GitObject


class AnnotatedTag(Model):
    sha: CommitSha
    tag: str
    object: GitObject


class CommitDetail(Model):
    message: str


class CompareCommit(Model):
    sha: CommitSha
    commit: CommitDetail

    @property
    def message(self) -> str:
        return self.commit.message


class Comparison(Model):
    status: Literal["diverged", "ahead", "behind", "identical"]
    ahead_by: int = 0
    behind_by: int = 0
    total_commits: int = 0
    commits: List[CompareCommit] = pydantic.Field(default_factory=list)
