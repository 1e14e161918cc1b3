"""Revision log: incremental commit index with pluggable extractors."""

from revindex.log.models import Commit, PathAction, PathChange
from revindex.log.revision_log import RevisionLog

__all__ = ["Commit", "PathAction", "PathChange", "RevisionLog"]
