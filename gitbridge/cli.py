"""gitbridge CLI entrypoint."""

import json
import sys
from typing import NoReturn, Optional

import click

from gitbridge import __version__
from gitbridge.config import get_settings
from gitbridge.errors import GitBridgeError
from gitbridge.gate import GitEnvironment, get_git_environment
from gitbridge.logging import get_logger, setup_logging
from gitbridge.repository import Repository
from gitbridge.signature import CommitTreeOptions, Signature

logger = get_logger(__name__)


def _fail(error: GitBridgeError) -> NoReturn:
    click.echo(f"Error: {error.message}", err=True)
    sys.exit(error.exit_code)


def _environment() -> GitEnvironment:
    try:
        return get_git_environment(get_settings())
    except GitBridgeError as e:
        logger.error(f"Git initialization failed: {e}")
        _fail(e)


def _open(path: str) -> Repository:
    env = _environment()
    try:
        return Repository.open(path, env)
    except GitBridgeError as e:
        _fail(e)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.version_option(__version__)
def gitbridge(verbose: bool) -> None:
    """gitbridge - typed access to git plumbing."""
    setup_logging(verbose=verbose or get_settings().debug)


@gitbridge.command()
@click.option("--json", "json_output", is_flag=True, help="JSON output")
def check(json_output: bool) -> None:
    """
    Check that git is installed, recent enough and configured.

    Writes default identity settings to the global git config if missing.
    """
    env = _environment()
    if json_output:
        output = {"command": "check", "executable": env.executable, "version": env.version}
        click.echo(json.dumps(output, indent=2, sort_keys=True))
    else:
        click.echo(f"git {env.version} ({env.executable})")


@gitbridge.command()
@click.argument("repo", type=click.Path(exists=True, file_okay=False))
@click.argument("ref")
@click.option("--json", "json_output", is_flag=True, help="JSON output")
def tree(repo: str, ref: str, json_output: bool) -> None:
    """Show the tree behind REF (tree id, commit, branch or tag)."""
    repository = _open(repo)
    try:
        found = repository.get_tree(ref)
        entries = found.entries()
    except GitBridgeError as e:
        _fail(e)

    if json_output:
        output = {
            "command": "tree",
            "id": str(found.id),
            "resolved_id": str(found.resolved_id),
            "entries": [
                {"mode": e.mode, "type": e.type, "id": str(e.id), "name": e.name}
                for e in entries
            ],
        }
        click.echo(json.dumps(output, indent=2, sort_keys=True))
        return

    click.echo(f"tree {found.id}")
    if found.resolved_id != found.id:
        click.echo(f"resolved {found.resolved_id}")
    for entry in entries:
        click.echo(f"{entry.mode} {entry.type} {entry.id}\t{entry.name}")


@gitbridge.command("commit-tree")
@click.argument("repo", type=click.Path(exists=True, file_okay=False))
@click.argument("tree_ref")
@click.option("-m", "--message", required=True, help="Commit message")
@click.option("-p", "--parent", "parents", multiple=True, help="Parent commit (repeatable)")
@click.option("--name", help="Author/committer name (default: git user.name)")
@click.option("--email", help="Author/committer email (default: git user.email)")
@click.option("-S", "--gpg-sign", "key_id", default="", help="GPG key id to sign with")
@click.option("--no-gpg-sign", is_flag=True, help="Do not sign the commit")
def commit_tree(
    repo: str,
    tree_ref: str,
    message: str,
    parents: tuple[str, ...],
    name: Optional[str],
    email: Optional[str],
    key_id: str,
    no_gpg_sign: bool,
) -> None:
    """Create a commit object from TREE_REF and print its id."""
    settings = get_settings()
    repository = _open(repo)
    try:
        signature = Signature(
            name=name or repository.config_value("user.name") or settings.default_name,
            email=email or repository.config_value("user.email") or settings.default_email,
        )
    except GitBridgeError as e:
        _fail(e)
    options = CommitTreeOptions(
        parents=list(parents),
        message=message,
        key_id=key_id,
        no_gpg_sign=no_gpg_sign,
    )
    try:
        found = repository.get_tree(tree_ref)
        commit_id = repository.commit_tree(signature, found, options)
    except GitBridgeError as e:
        _fail(e)
    click.echo(str(commit_id))


@gitbridge.command(context_settings={"ignore_unknown_options": True})
@click.argument("repo", type=click.Path(exists=True, file_okay=False))
@click.option("--timeout", type=float, default=None, help="Seconds before fsck is killed")
@click.argument("fsck_args", nargs=-1, type=click.UNPROCESSED)
def fsck(repo: str, timeout: Optional[float], fsck_args: tuple[str, ...]) -> None:
    """Verify the object database of REPO (extra args go to git fsck)."""
    if timeout is None:
        timeout = get_settings().fsck_timeout
    repository = _open(repo)
    try:
        repository.fsck(timeout, *fsck_args)
    except GitBridgeError as e:
        _fail(e)
    click.echo("ok")


def main() -> None:
    gitbridge()


if __name__ == "__main__":
    main()
