"""
Command-line interface for sprig.

Every user-facing error is printed as a single line and the process exits
with status 0; only I/O failures escape as tracebacks.
"""

import sys
from pathlib import Path
from typing import Optional, Sequence

import click

from sprig.config import config
from sprig.logging import initialize_logging
from sprig.version_control import (
    NotFoundError,
    RemoteManager,
    Repository,
    ValidationError,
    VersionControlError,
    format_log,
    format_status,
)


class SprigGroup(click.Group):
    """Command group that reports errors as plain messages with exit status 0."""

    def main(self, args: Optional[Sequence[str]] = None, prog_name=None, **extra):
        args = list(sys.argv[1:] if args is None else args)
        if not args:
            click.echo("Please enter a command.")
            return 0

        extra["standalone_mode"] = False
        try:
            return super().main(args, prog_name, **extra)
        except VersionControlError as exc:
            click.echo(str(exc))
        except click.UsageError:
            if args[0] not in self.commands:
                click.echo("No command with that name exists.")
            else:
                click.echo("Incorrect operands.")
        return 0


class OperandsCommand(click.Command):
    """Command that sees its operands as typed, including `--` separators."""

    def parse_args(self, ctx, args):
        ctx.meta["operands"] = tuple(args)
        return super().parse_args(ctx, args)


def _open_repository() -> Repository:
    return Repository(Path.cwd())


@click.group(cls=SprigGroup)
@click.pass_context
def cli(ctx):
    """sprig - a small local version-control system."""
    initialize_logging(
        log_dir=Path(config.logging.log_dir),
        level=config.logging.level,
        format_string=config.logging.format,
        rotation=config.logging.rotation,
        retention=config.logging.retention,
        enable_file_logging=config.logging.enable_file_logging
        and Repository.is_repository(Path.cwd()),
        enable_console_logging=config.logging.enable_console_logging,
    )
    if ctx.invoked_subcommand != "init" and not Repository.is_repository(Path.cwd()):
        raise NotFoundError("Not in an initialized sprig directory.")


@cli.command()
def init():
    """Create a repository in the current directory."""
    Repository.init(Path.cwd())


@cli.command()
@click.argument("file")
def add(file):
    """Stage a file."""
    _open_repository().add(file)


@cli.command()
@click.argument("message")
def commit(message):
    """Commit the staged changes."""
    _open_repository().commit(message)


@cli.command()
@click.argument("file")
def rm(file):
    """Unstage a file, or stage its removal."""
    _open_repository().rm(file)


@cli.command(cls=OperandsCommand)
@click.argument("operands", nargs=-1)
@click.pass_context
def checkout(ctx, operands):
    """
    Restore files or switch branches.

    \b
    checkout -- FILE
    checkout COMMIT -- FILE
    checkout BRANCH
    """
    operands = ctx.meta["operands"]
    repo = _open_repository()
    if len(operands) == 1:
        repo.checkout_branch(operands[0])
    elif len(operands) == 2 and operands[0] == "--":
        repo.checkout_file(operands[1])
    elif len(operands) == 3 and operands[1] == "--":
        repo.checkout_file(operands[2], commit_ref=operands[0])
    else:
        raise ValidationError("Incorrect operands.")


@cli.command()
def log():
    """Show the history of the current branch."""
    click.echo(format_log(_open_repository().log()))


@cli.command("global-log")
def global_log():
    """Show every commit ever made."""
    click.echo(format_log(_open_repository().global_log()))


@cli.command()
@click.argument("message")
def find(message):
    """Print the ids of commits with the given message."""
    matches = _open_repository().find(message)
    if not matches:
        click.echo("Found no commit with that message.")
    for commit_id in matches:
        click.echo(commit_id)


@cli.command()
def status():
    """Show branches, staged changes and untracked files."""
    click.echo(format_status(_open_repository().status()))


@cli.command()
@click.argument("name")
def branch(name):
    """Create a branch at the current commit."""
    _open_repository().branch(name)


@cli.command("rm-branch")
@click.argument("name")
def rm_branch(name):
    """Delete a branch."""
    _open_repository().rm_branch(name)


@cli.command()
@click.argument("commit_id")
def reset(commit_id):
    """Move the current branch to a commit."""
    _open_repository().reset(commit_id)


@cli.command()
@click.argument("name")
def merge(name):
    """Merge a branch into the current branch."""
    result = _open_repository().merge(name)
    for line in result.messages():
        click.echo(line)


@cli.command("add-remote")
@click.argument("name")
@click.argument("path")
def add_remote(name, path):
    """Register another repository's metadata directory as a remote."""
    RemoteManager(_open_repository()).add_remote(name, path)


@cli.command("rm-remote")
@click.argument("name")
def rm_remote(name):
    """Forget a remote."""
    RemoteManager(_open_repository()).rm_remote(name)


@cli.command()
@click.argument("name")
@click.argument("branch_name")
def push(name, branch_name):
    """Copy the current branch to a remote branch."""
    RemoteManager(_open_repository()).push(name, branch_name)


@cli.command()
@click.argument("name")
@click.argument("branch_name")
def fetch(name, branch_name):
    """Copy a remote branch to NAME/BRANCH."""
    RemoteManager(_open_repository()).fetch(name, branch_name)


@cli.command()
@click.argument("name")
@click.argument("branch_name")
def pull(name, branch_name):
    """Fetch a remote branch and merge it."""
    result = RemoteManager(_open_repository()).pull(name, branch_name)
    for line in result.messages():
        click.echo(line)


def main() -> None:
    """Console script entry point."""
    sys.exit(cli.main())


if __name__ == "__main__":
    main()
