"""
Error hierarchy for version control operations.

Every error here is user-facing and non-fatal: it carries a single message
and is raised before the operation mutates anything. I/O failures are not
wrapped and propagate as ``OSError``.
"""


class VersionControlError(Exception):
    """Base exception for version control errors."""

    pass


class NotFoundError(VersionControlError):
    """A commit, branch, file, blob or remote does not exist."""

    pass


class ValidationError(VersionControlError):
    """An argument is malformed (e.g. an empty commit message)."""

    pass


class NoOpError(VersionControlError):
    """The requested operation is already satisfied."""

    pass


class ConflictError(VersionControlError):
    """The operation would destroy or overwrite data."""

    pass
