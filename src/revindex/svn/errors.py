"""Subversion error types.

These describe a remote that cannot answer. The revision log propagates
them unchanged.
"""

import re

SVN_ERR_WC_NOT_WORKING_COPY = 155007
SVN_ERR_WC_UPGRADE_REQUIRED = 155036
SVN_ERR_RA_LOCAL_REPOS_OPEN_FAILED = 180001
SVN_ERR_RA_ILLEGAL_URL = 170000
SVN_WARN_PROPERTY_NOT_FOUND = 200017

_ERROR_CODE = re.compile(r"svn: (?:warning: )?[EW](\d{6}):")


def format_command(command: list[str]) -> str:
    """Command line for messages, with the password masked."""
    shown = list(command)
    for i, arg in enumerate(shown[:-1]):
        if arg == "--password":
            shown[i + 1] = "***"
    return " ".join(shown)


class SvnError(Exception):
    """Base error for svn operations."""

    pass


class SvnCommandError(SvnError):
    """An svn command exited with an error."""

    def __init__(self, command: list[str], returncode: int, stderr: str) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr.strip()
        self.code = parse_error_code(stderr)
        super().__init__(
            f"Command {format_command(command)!r} failed with exit code {returncode}: {self.stderr}"
        )


class NotAWorkingCopyError(SvnCommandError):
    """Path is not an svn working copy."""


class UpgradeRequiredError(SvnCommandError):
    """Working copy was created by an older client and needs "svn upgrade"."""


class NotARepositoryError(SvnCommandError):
    """URL does not point into a repository."""


class SvnTimeoutError(SvnError):
    """An svn command did not finish in time."""

    def __init__(self, command: list[str], timeout: float) -> None:
        super().__init__(f"Command {format_command(command)!r} timed out after {timeout}s")
        self.command = command
        self.timeout = timeout


class UnexpectedOutputError(SvnError):
    """svn produced output that could not be understood."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Unexpected svn output: {reason}")
        self.reason = reason


def parse_error_code(stderr: str) -> int | None:
    """Numeric code of the last ``svn: E...`` or ``svn: warning: W...`` line, if any."""
    codes = _ERROR_CODE.findall(stderr)
    return int(codes[-1]) if codes else None


def command_error(command: list[str], returncode: int, stderr: str) -> SvnCommandError:
    """Build the most specific error for a failed command."""
    code = parse_error_code(stderr)
    if code == SVN_ERR_WC_NOT_WORKING_COPY:
        return NotAWorkingCopyError(command, returncode, stderr)
    if code == SVN_ERR_WC_UPGRADE_REQUIRED:
        return UpgradeRequiredError(command, returncode, stderr)
    if code in (SVN_ERR_RA_ILLEGAL_URL, SVN_ERR_RA_LOCAL_REPOS_OPEN_FAILED):
        return NotARepositoryError(command, returncode, stderr)
    return SvnCommandError(command, returncode, stderr)
