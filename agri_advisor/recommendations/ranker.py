"""
Recommendation ranker: merges extractor output, orders it, and truncates.

Usage flow
----------
1. merge_candidates(business, forecast, optimization, chat, seasonal)
   -> list[RecommendationCandidate]  (plain concatenation, not interleaved)

2. rank_candidates(merged, limit=10)
   -> list[RecommendationCandidate]  (two sort passes, then truncation)

Ordering policy
---------------
Pass 1 (``sort_newest_first``):
    Stable sort by ``created_at``, newest first.

Pass 2 (``break_same_day_ties``):
    Comparator sort over the pass-1 output. Two candidates created on the same
    calendar day compare by confidence, highest first; candidates on different
    days compare equal and keep their pass-1 relative order.

The passes must run in sequence. Collapsing them into a single
``(day, confidence)`` key would reorder different-day candidates, which the
second pass deliberately leaves alone.
"""

from __future__ import annotations

from functools import cmp_to_key

from agri_advisor.models.recommendation import RecommendationCandidate
from agri_advisor.utils.time_utils import as_aware


def merge_candidates(
    *groups: list[RecommendationCandidate],
) -> list[RecommendationCandidate]:
    """Concatenate candidate lists in the order given."""
    merged: list[RecommendationCandidate] = []
    for group in groups:
        merged.extend(group)
    return merged


def sort_newest_first(
    candidates: list[RecommendationCandidate],
) -> list[RecommendationCandidate]:
    """First pass: stable sort by creation time, newest first."""
    return sorted(candidates, key=lambda c: as_aware(c.created_at), reverse=True)


def _calendar_day(candidate: RecommendationCandidate) -> str:
    return as_aware(candidate.created_at).date().isoformat()


def _same_day_confidence_cmp(
    a: RecommendationCandidate,
    b: RecommendationCandidate,
) -> int:
    if _calendar_day(a) != _calendar_day(b):
        return 0
    if a.confidence > b.confidence:
        return -1
    if a.confidence < b.confidence:
        return 1
    return 0


def break_same_day_ties(
    candidates: list[RecommendationCandidate],
) -> list[RecommendationCandidate]:
    """Second pass: same-day candidates ordered by confidence, highest first."""
    return sorted(candidates, key=cmp_to_key(_same_day_confidence_cmp))


def rank_candidates(
    candidates: list[RecommendationCandidate],
    limit: int = 10,
) -> list[RecommendationCandidate]:
    """Apply both ordering passes and keep the first ``limit`` candidates.

    Args:
        candidates: Merged extractor output.
        limit:      Maximum number of candidates to keep (the persisted set size).

    Returns:
        At most ``limit`` candidates in final rank order.
    """
    ranked = break_same_day_ties(sort_newest_first(candidates))
    return ranked[:limit]
