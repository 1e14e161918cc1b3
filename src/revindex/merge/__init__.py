"""Merge source detection."""

from revindex.merge.detector import (
    ClassicMergeSourceDetector,
    MergeSourceDetector,
    MergeSourceDetectorAggregator,
    VersionBranchMergeSourceDetector,
    default_detector,
)

__all__ = [
    "ClassicMergeSourceDetector",
    "MergeSourceDetector",
    "MergeSourceDetectorAggregator",
    "VersionBranchMergeSourceDetector",
    "default_detector",
]
