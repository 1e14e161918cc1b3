"""Subversion access: connector, output parsing, path helpers and errors."""

from revindex.svn.connector import LogSource, SvnConnector
from revindex.svn.errors import (
    NotARepositoryError,
    NotAWorkingCopyError,
    SvnCommandError,
    SvnError,
    UpgradeRequiredError,
)
from revindex.svn.parsing import parse_info_xml, parse_log_xml

__all__ = [
    "LogSource",
    "NotARepositoryError",
    "NotAWorkingCopyError",
    "SvnCommandError",
    "SvnConnector",
    "SvnError",
    "UpgradeRequiredError",
    "parse_info_xml",
    "parse_log_xml",
]
