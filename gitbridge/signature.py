"""Commit identities and commit-tree options."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Signature:
    """Author/committer identity for a new commit."""

    name: str
    email: str
    when: Optional[datetime] = None


@dataclass(frozen=True)
class CommitTreeOptions:
    """
    Options for Repository.commit_tree.

    Attributes:
        parents: Parent commit ids or refs, first parent first
        message: Commit message
        key_id: GPG key to sign with (empty: no explicit key)
        no_gpg_sign: Disable signing; wins over key_id when both are set
    """

    parents: list[str] = field(default_factory=list)
    message: str = ""
    key_id: str = ""
    no_gpg_sign: bool = False


def format_git_date(when: datetime) -> str:
    """
    Format a timestamp as RFC 3339 for GIT_*_DATE variables.

    Naive datetimes are taken as local time.
    """
    if when.tzinfo is None:
        when = when.astimezone()
    return when.isoformat(timespec="seconds")
