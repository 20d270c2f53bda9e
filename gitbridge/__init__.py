"""Typed wrapper around the git command-line tool."""

__version__ = "0.4.2"

from gitbridge.command import CommandResult, GitCommand, normalize_timeout, run_command
from gitbridge.gate import GitEnvironment, get_git_environment, initialize
from gitbridge.repository import Repository, fsck
from gitbridge.sha1 import ObjectID, parse_object_id
from gitbridge.signature import CommitTreeOptions, Signature
from gitbridge.tree import Tree, TreeEntry

__all__ = [
    "__version__",
    "CommandResult",
    "CommitTreeOptions",
    "GitCommand",
    "GitEnvironment",
    "ObjectID",
    "Repository",
    "Signature",
    "Tree",
    "TreeEntry",
    "fsck",
    "get_git_environment",
    "initialize",
    "normalize_timeout",
    "parse_object_id",
    "run_command",
]
