"""Tree objects."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from gitbridge.sha1 import ObjectID

if TYPE_CHECKING:
    from gitbridge.repository import Repository


@dataclass(frozen=True)
class TreeEntry:
    """A single entry of a tree listing."""

    mode: str
    type: str
    id: ObjectID
    name: str

    @property
    def is_dir(self) -> bool:
        return self.type == "tree"


@dataclass(frozen=True)
class Tree:
    """
    A tree looked up in a repository.

    Attributes:
        id: The tree's own object id
        resolved_id: What the caller's input resolved to before a commit
            was dereferenced to its tree (equal to id for direct lookups)
        repository: Repository the tree belongs to
    """

    id: ObjectID
    resolved_id: ObjectID
    repository: "Repository"

    def entries(self) -> list[TreeEntry]:
        """List the direct entries of this tree."""
        return self.repository.objects.list_tree(self.id)
