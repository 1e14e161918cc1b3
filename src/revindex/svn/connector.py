"""Remote log source backed by the ``svn`` command line client."""

from __future__ import annotations

import subprocess
import time
from typing import TYPE_CHECKING, Protocol

import structlog

from revindex.config.constants import REMOTE_INFO_CACHE_DURATION
from revindex.svn.errors import (
    SVN_WARN_PROPERTY_NOT_FOUND,
    SvnCommandError,
    SvnError,
    SvnTimeoutError,
    command_error,
)
from revindex.svn.parsing import InfoEntry, parse_info_xml, parse_log_xml
from revindex.svn.paths import is_url

if TYPE_CHECKING:
    from revindex.cache.manager import CacheManager, Duration
    from revindex.config.models import RepositoryConfig
    from revindex.log.models import Commit

logger = structlog.get_logger()


class LogSource(Protocol):
    """What the revision log needs from a remote history."""

    def get_last_revision(self, target: str) -> int: ...

    def get_commit_range(self, target: str, from_revision: int, to_revision: int) -> list[Commit]: ...

    def get_property(self, name: str, target: str, revision: int | None = None) -> str: ...


def _normalize_cache_duration(duration: str | None) -> str | None:
    """Empty durations and ones starting with "0" disable caching."""
    if duration is None:
        return None
    text = str(duration).strip()
    if not text or text.startswith("0"):
        return None
    return text


class SvnConnector:
    """Runs svn commands, optionally caching their output.

    ``with_cache(duration)`` applies to the next command only.
    """

    def __init__(self, config: RepositoryConfig, cache_manager: CacheManager) -> None:
        self._config = config
        self._cache_manager = cache_manager
        self._next_command_cache_duration: Duration = None
        self._last_revision_cache_duration = _normalize_cache_duration(
            config.last_revision_cache_duration
        )

    def with_cache(self, duration: Duration) -> SvnConnector:
        self._next_command_cache_duration = duration
        return self

    def build_command(self, sub_command: str, *args: str) -> list[str]:
        if not sub_command or " " in sub_command:
            raise ValueError(f'The "{sub_command}" sub-command is invalid')

        command = [self._config.svn_command, "--non-interactive"]
        if self._config.username:
            command += ["--username", self._config.username]
        if self._config.password:
            command += ["--password", self._config.password]
        return [*command, sub_command, *args]

    def run(self, sub_command: str, *args: str) -> str:
        """Run a command and return its stdout, through the cache when requested."""
        cache_duration = self._next_command_cache_duration
        self._next_command_cache_duration = None
        command = self.build_command(sub_command, *args)

        if not cache_duration:
            return self._execute(command)

        # Credentials stay out of the cache key
        cache_name = "command:" + " ".join([sub_command, *args])
        output = self._cache_manager.get(cache_name, duration=cache_duration)
        if output is None:
            output = self._execute(command)
            self._cache_manager.set(cache_name, output, duration=cache_duration)
        return output

    def _execute(self, command: list[str]) -> str:
        started = time.perf_counter()
        timeout = self._config.command_timeout_sec
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise SvnTimeoutError(command, timeout) from e
        except FileNotFoundError as e:
            raise SvnError(f"svn client not found: {command[0]}") from e

        logger.debug(
            "svn_command",
            sub_command=command[command.index("--non-interactive") + 1],
            returncode=result.returncode,
            elapsed_sec=round(time.perf_counter() - started, 3),
        )
        if result.returncode != 0:
            raise command_error(command, result.returncode, result.stderr)
        return result.stdout

    def get_property(self, name: str, target: str, revision: int | None = None) -> str:
        args = [name, target]
        if revision is not None:
            args += ["--revision", str(revision)]
        try:
            return self.run("propget", *args).rstrip("\n")
        except SvnCommandError as e:
            if e.code == SVN_WARN_PROPERTY_NOT_FOUND:
                return ""
            raise

    def get_info(self, target: str, cache_duration: Duration = None) -> InfoEntry:
        # Cache "svn info" on remote URLs, never on a working copy
        if cache_duration is None and is_url(target):
            cache_duration = REMOTE_INFO_CACHE_DURATION
        return parse_info_xml(self.with_cache(cache_duration).run("info", "--xml", target))

    def get_root_url(self, target: str) -> str:
        return self.get_info(target).root_url

    def get_working_copy_url(self, target: str) -> str:
        if is_url(target):
            return target
        return self.get_info(target).url

    def get_last_revision(self, target: str) -> int:
        """Last changed revision of ``target``.

        Remote lookups are cached only for the configured duration so new
        commits show up promptly.
        """
        duration = self._last_revision_cache_duration if is_url(target) else None
        return self.get_info(target, cache_duration=duration or 0).last_changed_revision

    def get_first_revision(self, url: str) -> int:
        if not is_url(url):
            raise ValueError(f'The repository URL "{url}" is invalid')
        output = self.with_cache(REMOTE_INFO_CACHE_DURATION).run(
            "log", "-r", "1:HEAD", "--limit", "1", "--xml", url
        )
        commits = parse_log_xml(output)
        return commits[0].revision if commits else 0

    def get_commit_range(self, target: str, from_revision: int, to_revision: int) -> list[Commit]:
        output = self.run(
            "log",
            "--xml",
            "--verbose",
            "--use-merge-history",
            "-r",
            f"{from_revision}:{to_revision}",
            target,
        )
        return parse_log_xml(output)
