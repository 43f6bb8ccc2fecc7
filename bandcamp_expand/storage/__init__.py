"""
Storage Layer.

This package handles the persistent music library tree.
"""

from .library import MergeSummary, TreeMerger

__all__ = ["MergeSummary", "TreeMerger"]
