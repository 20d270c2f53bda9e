"""Read access to a repository's object database."""

import logging
from pathlib import Path
from typing import Optional

from gitbridge.errors import ObjectNotFoundError, UnexpectedOutputError
from gitbridge.gate import GitEnvironment
from gitbridge.sha1 import ObjectID, parse_object_id
from gitbridge.tree import TreeEntry

logger = logging.getLogger(__name__)

# Annotated tags may point at other tags
MAX_TAG_DEPTH = 16


class ObjectStore:
    """Object reader backed by git's plumbing commands."""

    def __init__(self, path: Path, env: GitEnvironment):
        self.path = path
        self.env = env

    def object_type(self, oid: ObjectID) -> Optional[str]:
        """
        Return the type of an object ("commit", "tree", "blob", "tag").

        Returns:
            The type name, or None if the object is missing or unreadable
        """
        result = self.env.command("cat-file", "-t", oid.hex).run_result(
            cwd=self.path, check=False
        )
        if not result.success:
            logger.debug(f"Object {oid} not readable: {result.stderr.strip()}")
            return None
        return result.stdout.strip()

    def read_object(self, oid: ObjectID, kind: str) -> str:
        """
        Return the raw body of an object of the given type.

        Raises:
            ObjectNotFoundError: If the object is missing or of another type
        """
        result = self.env.command("cat-file", kind, oid.hex).run_result(
            cwd=self.path, check=False
        )
        if not result.success:
            raise ObjectNotFoundError(f"{kind} object {oid} not found: {result.stderr.strip()}")
        return result.stdout

    def _header(self, oid: ObjectID, kind: str, field_name: str) -> ObjectID:
        body = self.read_object(oid, kind)
        prefix = f"{field_name} "
        for line in body.splitlines():
            if not line:
                break
            if line.startswith(prefix):
                return parse_object_id(line[len(prefix) :])
        raise UnexpectedOutputError(f"{kind} {oid} has no {field_name} header")

    def commit_tree_id(self, oid: ObjectID) -> ObjectID:
        """Return the tree id recorded in a commit."""
        return self._header(oid, "commit", "tree")

    def peel_tag(self, oid: ObjectID) -> ObjectID:
        """Follow annotated tags until a non-tag object is reached."""
        for _ in range(MAX_TAG_DEPTH):
            if self.object_type(oid) != "tag":
                return oid
            oid = self._header(oid, "tag", "object")
        raise UnexpectedOutputError(f"Tag chain deeper than {MAX_TAG_DEPTH} at {oid}")

    def list_tree(self, oid: ObjectID) -> list[TreeEntry]:
        """
        List the direct entries of a tree.

        Raises:
            ObjectNotFoundError: If oid is not a readable tree
        """
        if self.object_type(oid) != "tree":
            raise ObjectNotFoundError(f"Tree {oid} not found")

        output = self.env.command("ls-tree", "-z", oid.hex).run(cwd=self.path)

        entries: list[TreeEntry] = []
        for record in output.split("\0"):
            if not record:
                continue
            meta, _, name = record.partition("\t")
            parts = meta.split()
            if len(parts) != 3 or not name:
                raise UnexpectedOutputError(f"Unexpected ls-tree record: {record!r}")
            mode, kind, hex_id = parts
            entries.append(TreeEntry(mode=mode, type=kind, id=ObjectID.from_hex(hex_id), name=name))

        logger.debug(f"Tree {oid} has {len(entries)} entries")
        return entries
