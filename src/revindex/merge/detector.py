"""Merge source detection: where a branch usually receives merges from.

Each detector is a heuristic over a repository URL with an integer weight.
The aggregator asks detectors from the highest weight down and returns the
first answer; detectors with equal weights are asked in registration order.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod

import structlog

from revindex.svn.paths import get_project_url

logger = structlog.get_logger()

_REF_URL = re.compile(r"^(?P<project>.*?)/(?:branches|tags|releases)/[^/]+(?=/|$)")
_VERSION_BRANCH_URL = re.compile(
    r"^(?P<prefix>.*/branches/)(?P<major>\d+)\.(?P<minor>\d+)\.x(?=/|$)"
)


class MergeSourceDetector(ABC):
    def __init__(self, weight: int = 0) -> None:
        self.weight = weight

    @abstractmethod
    def detect(self, repository_url: str) -> str | None:
        """Merge source URL for ``repository_url``, or None when not applicable."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(weight={self.weight})"


class ClassicMergeSourceDetector(MergeSourceDetector):
    """Branches, tags and releases receive merges from the project trunk."""

    def detect(self, repository_url: str) -> str | None:
        if not _REF_URL.match(repository_url):
            return None
        return get_project_url(repository_url) + "/trunk"


class VersionBranchMergeSourceDetector(MergeSourceDetector):
    """``branches/5.2.x`` receives merges from ``branches/5.1.x``."""

    def detect(self, repository_url: str) -> str | None:
        match = _VERSION_BRANCH_URL.match(repository_url)
        if match is None:
            return None
        minor = int(match.group("minor"))
        if minor == 0:
            return None
        return f"{match.group('prefix')}{match.group('major')}.{minor - 1}.x"


class MergeSourceDetectorAggregator(MergeSourceDetector):
    """Asks registered detectors by descending weight; first answer wins."""

    def __init__(self, weight: int = 0) -> None:
        super().__init__(weight)
        self._detectors: list[MergeSourceDetector] = []

    def add_detector(self, detector: MergeSourceDetector) -> None:
        self._detectors.append(detector)
        # sorted() is stable: equal weights keep registration order
        self._detectors = sorted(self._detectors, key=lambda d: d.weight, reverse=True)

    @property
    def detectors(self) -> list[MergeSourceDetector]:
        return list(self._detectors)

    def detect(self, repository_url: str) -> str | None:
        for detector in self._detectors:
            result = detector.detect(repository_url)
            if result:
                logger.debug(
                    "merge_source_detected",
                    detector=type(detector).__name__,
                    repository_url=repository_url,
                    merge_source=result,
                )
                return result
        return None


def default_detector() -> MergeSourceDetectorAggregator:
    aggregator = MergeSourceDetectorAggregator()
    aggregator.add_detector(ClassicMergeSourceDetector(0))
    aggregator.add_detector(VersionBranchMergeSourceDetector(50))
    return aggregator
