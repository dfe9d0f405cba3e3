"""
Recency-based input selection shared by the analysis extractors.

Two truncations are applied, in this order:
  1. ``recent_analysis_slice()``: once, upstream: the N most recent analysis
     results regardless of type (default 10).
  2. ``recent_of_type()``: inside each extractor: the M most recent results
     of that extractor's type taken from the slice (default 3).

A type that is crowded out of the shared slice by newer records of other
types therefore contributes nothing, even if older records of it exist.
"""

from __future__ import annotations

from agri_advisor.models.analysis import AnalysisResult
from agri_advisor.utils.time_utils import sort_by_recency


def recent_analysis_slice(
    results: list[AnalysisResult],
    window: int = 10,
) -> list[AnalysisResult]:
    """Return the ``window`` most recent results (``None`` timestamps last)."""
    return sort_by_recency(results)[:window]


def recent_of_type(
    results: list[AnalysisResult],
    analysis_type: str,
    limit: int = 3,
) -> list[AnalysisResult]:
    """Return the ``limit`` most recent results whose ``type`` matches."""
    matching = [r for r in results if r.type == analysis_type]
    return sort_by_recency(matching)[:limit]
