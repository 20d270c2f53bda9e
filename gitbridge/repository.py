"""Repository operations: resolution, trees, commit creation and fsck."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from gitbridge.command import PathLike
from gitbridge.errors import (
    CommandError,
    InvalidObjectIDError,
    ObjectNotFoundError,
    RepositoryError,
    UnexpectedOutputError,
)
from gitbridge.gate import CONFIG_KEY_MISSING, GitEnvironment, get_git_environment
from gitbridge.objects import ObjectStore
from gitbridge.sha1 import ObjectID, is_full_hex, parse_object_id
from gitbridge.signature import CommitTreeOptions, Signature, format_git_date
from gitbridge.tree import Tree

logger = logging.getLogger(__name__)


class Repository:
    """
    A git repository on disk.

    Args:
        path: Repository root (work tree or bare repository)
        env: Initialized git environment (defaults to the process-wide one)
    """

    def __init__(self, path: PathLike, env: Optional[GitEnvironment] = None):
        self.path = Path(path).resolve()
        self.env = env if env is not None else get_git_environment()
        self.objects = ObjectStore(self.path, self.env)

    @classmethod
    def open(cls, path: PathLike, env: Optional[GitEnvironment] = None) -> "Repository":
        """
        Open an existing repository, checking that git recognizes it.

        Raises:
            RepositoryError: If path is not a git repository
        """
        repo = cls(path, env)
        if not repo.path.is_dir():
            raise RepositoryError(f"Repository path does not exist: {repo.path}")
        try:
            repo.env.command("rev-parse", "--git-dir").run(cwd=repo.path)
        except CommandError as e:
            logger.error(f"Git repository check failed: {e}")
            raise RepositoryError(f"Not a Git repository: {repo.path}") from e
        logger.debug(f"Git repository opened: {repo.path}")
        return repo

    def __repr__(self) -> str:
        return f"Repository({str(self.path)!r})"

    def config_value(self, key: str) -> Optional[str]:
        """
        Read a config value as git sees it from this repository.

        Returns:
            The value, or None if the key is unset or blank

        Raises:
            CommandError: If git fails for a reason other than a missing key
        """
        cmd = self.env.command("config", "--get", key)
        result = cmd.run_result(cwd=self.path, check=False, description=f"get setting {key}")
        if result.returncode == CONFIG_KEY_MISSING and not result.stdout.strip():
            return None
        if not result.success:
            raise CommandError(cmd.argv, result.returncode, result.stdout, result.stderr)
        return result.stdout.strip() or None

    def resolve(self, id_or_ref: Union[str, ObjectID]) -> ObjectID:
        """
        Resolve an object id or any revision git understands to an ObjectID.

        Full 40-character ids are parsed directly; everything else goes
        through `git rev-parse --verify`, which accepts a single revision only.

        Raises:
            CommandError: If git cannot resolve the revision (including ranges)
            InvalidObjectIDError: If the input looks like an option or git's
                answer is not an object id
            UnexpectedOutputError: If git prints more than one line
        """
        if isinstance(id_or_ref, ObjectID):
            return id_or_ref
        if is_full_hex(id_or_ref):
            return ObjectID.from_hex(id_or_ref)

        if not id_or_ref or id_or_ref.startswith("-"):
            raise InvalidObjectIDError(f"Invalid revision: {id_or_ref!r}")

        # --verify refuses ranges and anything naming more than one object
        output = self.env.command("rev-parse", "--verify", id_or_ref).run(cwd=self.path)
        lines = output.rstrip("\r\n").splitlines()
        if len(lines) != 1:
            raise UnexpectedOutputError(f"Expected one object id for {id_or_ref!r}, got {output!r}")
        return parse_object_id(lines[0])

    def dereference(self, oid: ObjectID) -> ObjectID:
        """
        Return the tree of a commit (peeling annotated tags first).

        Any other object is returned unchanged.
        """
        target = self.objects.peel_tag(oid)
        if self.objects.object_type(target) != "commit":
            return target
        return self.objects.commit_tree_id(target)

    def get_tree(self, id_or_ref: Union[str, ObjectID]) -> Tree:
        """
        Look up a tree by tree id, commit id or revision.

        The returned tree keeps the id the input resolved to, so a branch
        name yields the branch's commit as resolved_id and that commit's
        tree as id.

        Raises:
            ObjectNotFoundError: If no tree exists behind the input
            CommandError: If the revision cannot be resolved
        """
        resolved_id = self.resolve(id_or_ref)
        tree_id = self.dereference(resolved_id)

        if self.objects.object_type(tree_id) != "tree":
            raise ObjectNotFoundError(f"Tree not found: {id_or_ref}")

        logger.debug(f"Tree {tree_id} resolved from {id_or_ref} ({resolved_id})")
        return Tree(id=tree_id, resolved_id=resolved_id, repository=self)

    def commit_tree(
        self,
        signature: Signature,
        tree: Union[Tree, ObjectID],
        options: Optional[CommitTreeOptions] = None,
    ) -> ObjectID:
        """
        Create a commit object for an existing tree.

        Only the object is written; no ref is updated.

        Args:
            signature: Used as both author and committer
            tree: Tree (or tree id) to commit
            options: Parents, message and signing settings

        Returns:
            The id of the new commit

        Raises:
            CommandError: If git refuses to create the commit
        """
        if options is None:
            options = CommitTreeOptions()
        tree_id = tree.id if isinstance(tree, Tree) else tree

        commit_time = format_git_date(signature.when or datetime.now().astimezone())

        # Hooks run by git may depend on the inherited environment
        env = {
            "GIT_AUTHOR_NAME": signature.name,
            "GIT_AUTHOR_EMAIL": signature.email,
            "GIT_AUTHOR_DATE": commit_time,
            "GIT_COMMITTER_NAME": signature.name,
            "GIT_COMMITTER_EMAIL": signature.email,
            "GIT_COMMITTER_DATE": commit_time,
        }

        cmd = self.env.command("commit-tree", tree_id.hex)
        for parent in options.parents:
            cmd.add_arguments("-p", parent)
        cmd.add_arguments("-m", options.message)

        if options.key_id and options.no_gpg_sign:
            logger.warning(
                f"Both signing key {options.key_id!r} and no_gpg_sign given; not signing"
            )
        elif options.key_id:
            cmd.add_arguments(f"-S{options.key_id}")

        if options.no_gpg_sign:
            cmd.add_arguments("--no-gpg-sign")

        output = cmd.run(cwd=self.path, env=env)
        commit_id = parse_object_id(output)
        logger.info(f"Created commit {commit_id} for tree {tree_id}")
        return commit_id

    def fsck(self, timeout: Optional[float] = None, *args: str) -> None:
        """Verify the repository's object database. See fsck()."""
        fsck(self.path, timeout, *args, env=self.env)


def fsck(
    repo_path: PathLike,
    timeout: Optional[float] = None,
    *args: str,
    env: Optional[GitEnvironment] = None,
) -> None:
    """
    Verify the connectivity and validity of the objects in the database.

    Args:
        repo_path: Repository to check
        timeout: Seconds before git is killed; None or <= 0 waits forever
        *args: Extra fsck arguments (e.g. "--no-dangling")
        env: Git environment (defaults to the process-wide one)

    Raises:
        CommandError: If fsck reports problems
        CommandTimeoutError: If fsck did not finish in time
    """
    if env is None:
        env = get_git_environment()
    env.command("fsck").add_arguments(*args).run(
        cwd=repo_path, timeout=timeout, description=f"fsck {repo_path}"
    )
    logger.debug(f"Fsck passed: {repo_path}")
