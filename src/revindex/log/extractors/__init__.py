"""Built-in revision log extractors."""

from revindex.log.extractors.base import Extractor
from revindex.log.extractors.bugs import BugsExtractor
from revindex.log.extractors.merges import MergesExtractor
from revindex.log.extractors.paths import PathsExtractor
from revindex.log.extractors.refs import RefsExtractor
from revindex.log.extractors.summary import SummaryExtractor

__all__ = [
    "BugsExtractor",
    "Extractor",
    "MergesExtractor",
    "PathsExtractor",
    "RefsExtractor",
    "SummaryExtractor",
]
