"""
Human-readable rendering of history and status.
"""

from datetime import datetime
from typing import Iterable, List, Tuple

from .objects import Commit

SECTION_BREAK = ""


def format_date(moment: datetime) -> str:
    """Render a timestamp like ``Thu Jan 1 00:00:00 1970 +0000`` in local time."""
    local = moment.astimezone()
    return f"{local:%a %b} {local.day} {local:%H:%M:%S %Y %z}"


def format_commit(commit_id: str, commit: Commit) -> str:
    """One log entry."""
    lines = [
        "===",
        f"commit {commit_id}",
        f"Date: {format_date(commit.created_at)}",
        commit.message,
    ]
    return "\n".join(lines) + "\n"


def format_log(entries: Iterable[Tuple[str, Commit]]) -> str:
    """Log entries separated by blank lines."""
    return "\n".join(format_commit(commit_id, commit) for commit_id, commit in entries)


def _section(title: str, lines: List[str]) -> List[str]:
    return [f"=== {title} ===", *lines, SECTION_BREAK]


def format_status(report) -> str:
    """
    Render a ``StatusReport``.

    Sections: branches (current marked with ``*``), staged files, removed
    files, unstaged modifications and untracked files.
    """
    branches = [
        f"*{name}" if name == report.current_branch else name for name in report.branches
    ]
    changes = sorted(
        [f"{path} (modified)" for path in report.modified]
        + [f"{path} (deleted)" for path in report.deleted]
    )

    lines: List[str] = []
    lines += _section("Branches", branches)
    lines += _section("Staged Files", list(report.staged))
    lines += _section("Removed Files", list(report.removed))
    lines += _section("Modifications Not Staged For Commit", changes)
    lines += _section("Untracked Files", list(report.untracked))
    return "\n".join(lines)
