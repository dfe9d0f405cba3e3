"""
Narrative summary for a generated recommendation set.

Shape::

    "Based on your business feasibility analysis, demand forecasting, we recommend: "
    "Profitable Business Model. Growing Demand Trend. "
    "Consider adjusting your strategy for the winter season."

The opener lists the analysis types present in the *full* input (not the
recency slice). One representative title per type is appended in the fixed
order business, market, resource, crop, each the first of its type among the
top candidates.
"""

from __future__ import annotations

from typing import Optional

from agri_advisor.models.analysis import AnalysisResult
from agri_advisor.models.recommendation import RecommendationCandidate
from agri_advisor.taxonomy.recommendation_taxonomy import (
    AnalysisType,
    RecommendationType,
    Season,
)

FALLBACK_TEMPLATE = (
    "Insufficient data for personalized recommendations. Continue using "
    "{product_name} to analyze your agricultural business for tailored insights."
)

_OPENER_PHRASES: tuple[tuple[AnalysisType, str], ...] = (
    (AnalysisType.BUSINESS_FEASIBILITY, "business feasibility analysis, "),
    (AnalysisType.DEMAND_FORECAST,      "demand forecasting, "),
    (AnalysisType.OPTIMIZATION,         "optimization analysis, "),
)

_SUMMARY_TYPE_ORDER: tuple[RecommendationType, ...] = (
    RecommendationType.BUSINESS,
    RecommendationType.MARKET,
    RecommendationType.RESOURCE,
    RecommendationType.CROP,
)


def count_analysis_types(results: list[AnalysisResult]) -> dict[AnalysisType, int]:
    """Count results per known analysis type (unknown types are ignored)."""
    return {
        analysis_type: sum(1 for r in results if r.type == analysis_type.value)
        for analysis_type, _ in _OPENER_PHRASES
    }


def pick_representatives(
    top: list[RecommendationCandidate],
) -> list[RecommendationCandidate]:
    """First candidate of each type, in business/market/resource/crop order."""
    picked: list[RecommendationCandidate] = []
    for rec_type in _SUMMARY_TYPE_ORDER:
        match = next((c for c in top if c.type == rec_type), None)
        if match is not None:
            picked.append(match)
    return picked


def build_summary(
    top: list[RecommendationCandidate],
    analysis_results: list[AnalysisResult],
    season: Optional[Season] = None,
    product_name: str = "Agri Advisor",
) -> str:
    """Compose the summary paragraph.

    Args:
        top:              Leading candidates of the final ranking (top 5).
        analysis_results: The caller's full, untruncated analysis input.
        season:           Season supplied to the engine, if any.
        product_name:     Product name used in the fallback text.

    Returns:
        The summary text, or the fallback when ``top`` is empty.
    """
    if not top:
        return FALLBACK_TEMPLATE.format(product_name=product_name)

    counts = count_analysis_types(analysis_results)
    present = "".join(phrase for analysis_type, phrase in _OPENER_PHRASES if counts[analysis_type])
    if present:
        summary = f"Based on your {present}we recommend: "
    else:
        summary = "Based on your historical data, we recommend: "

    for candidate in pick_representatives(top):
        summary += f"{candidate.title}. "

    if season is not None:
        summary += f"Consider adjusting your strategy for the {Season(season).value} season."

    return summary
