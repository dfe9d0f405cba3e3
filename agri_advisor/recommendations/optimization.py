"""
Optimization extractor: allocation and bottleneck signals from solver runs.

Branches on the boolean ``feasible`` field of each record:

``feasible is True``
    - always  → "Optimal Resource Allocation"     (resource, 0.90)
    - top-3 variables with value > 0, by value desc
              → "Key Resource Allocation"         (resource, 0.80)
    - constraints with |slack| < 1e-3 (binding)
              → "Resource Bottlenecks Identified" (business, 0.85)

``feasible is False``
    - "Resource Constraints Too Tight"             (business, 0.90)

Anything else (missing, null, a string) yields no candidates.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from agri_advisor.models.analysis import AnalysisResult
from agri_advisor.models.recommendation import RecommendationCandidate
from agri_advisor.recommendations.payload import number, records, text
from agri_advisor.recommendations.selection import recent_of_type
from agri_advisor.taxonomy.recommendation_taxonomy import (
    AnalysisType,
    RecommendationSource,
    RecommendationType,
)

TOP_VARIABLES = 3
BINDING_SLACK_TOLERANCE = 1e-3


def _feasible_candidate(result: AnalysisResult, now: datetime) -> RecommendationCandidate:
    data = result.data
    objective = number(data, "objectiveValue")
    detail = (
        f"an objective value of {objective:.2f}"
        if objective is not None else "optimized resource allocation"
    )
    return RecommendationCandidate(
        id=f"opt-feasible-{result.id}",
        type=RecommendationType.RESOURCE,
        title="Optimal Resource Allocation",
        description=(
            f"Your {text(data, 'name', 'resource')} optimization model has a "
            f"feasible solution with {detail}."
        ),
        confidence=0.90,
        data={"optimizationName": data.get("name"), "objectiveValue": objective},
        source=RecommendationSource.ANALYSIS,
        created_at=now,
    )


def _key_resources_candidate(
    result: AnalysisResult, now: datetime
) -> Optional[RecommendationCandidate]:
    variables = records(result.data, "variables")
    if not variables:
        return None

    positive: list[tuple[dict[str, Any], float]] = []
    for var in variables:
        value = number(var, "value")
        if value is not None and value > 0:
            positive.append((var, value))
    if not positive:
        return None

    top = sorted(positive, key=lambda pair: pair[1], reverse=True)[:TOP_VARIABLES]
    listing = ", ".join(f"{text(var, 'name', 'unnamed')}: {value:.2f}" for var, value in top)

    return RecommendationCandidate(
        id=f"opt-resources-{result.id}",
        type=RecommendationType.RESOURCE,
        title="Key Resource Allocation",
        description=f"Focus on these resources for optimal results: {listing}",
        confidence=0.80,
        data={
            "optimizationName": result.data.get("name"),
            "topResources": [{"name": var.get("name"), "value": value} for var, value in top],
        },
        source=RecommendationSource.ANALYSIS,
        created_at=now,
    )


def _bottleneck_candidate(
    result: AnalysisResult, now: datetime
) -> Optional[RecommendationCandidate]:
    constraints = records(result.data, "constraints")
    if not constraints:
        return None

    binding: list[str] = []
    for constraint in constraints:
        slack = number(constraint, "slack")
        if slack is not None and (slack == 0 or abs(slack) < BINDING_SLACK_TOLERANCE):
            binding.append(text(constraint, "name", "unnamed constraint"))
    if not binding:
        return None

    return RecommendationCandidate(
        id=f"opt-constraints-{result.id}",
        type=RecommendationType.BUSINESS,
        title="Resource Bottlenecks Identified",
        description=(
            f"These factors are limiting your optimization: {', '.join(binding)}. "
            "Consider increasing these resources."
        ),
        confidence=0.85,
        data={"optimizationName": result.data.get("name"), "bindingConstraints": binding},
        source=RecommendationSource.ANALYSIS,
        created_at=now,
    )


def _infeasible_candidate(result: AnalysisResult, now: datetime) -> RecommendationCandidate:
    name = text(result.data, "name", "resource")
    return RecommendationCandidate(
        id=f"opt-infeasible-{result.id}",
        type=RecommendationType.BUSINESS,
        title="Resource Constraints Too Tight",
        description=(
            f"Your {name} optimization model doesn't have a feasible solution. "
            "Consider relaxing some constraints or adding more resources."
        ),
        confidence=0.90,
        data={"optimizationName": result.data.get("name")},
        source=RecommendationSource.ANALYSIS,
        created_at=now,
    )


def extract_optimization_recommendations(
    results: list[AnalysisResult],
    now: datetime,
    limit: int = 3,
) -> list[RecommendationCandidate]:
    """Turn the ``limit`` most recent optimization runs into candidates.

    Args:
        results: Shared recency slice of analysis results (any types).
        now:     Generation timestamp stamped on every candidate.
        limit:   How many ``optimization`` records to consider.

    Returns:
        Candidates in record order; within a feasible record the order is
        allocation, key resources, bottlenecks.
    """
    candidates: list[RecommendationCandidate] = []
    for result in recent_of_type(results, AnalysisType.OPTIMIZATION, limit):
        feasible = result.data.get("feasible")
        if feasible is True:
            candidates.append(_feasible_candidate(result, now))
            for build in (_key_resources_candidate, _bottleneck_candidate):
                candidate = build(result, now)
                if candidate is not None:
                    candidates.append(candidate)
        elif feasible is False:
            candidates.append(_infeasible_candidate(result, now))
    return candidates
