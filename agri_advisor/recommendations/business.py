"""
Business-feasibility extractor: profitability signals from feasibility studies.

Rules (each evaluated independently per record, in this order)
---------------------------------------------------------------
    biz-profit    : profitMargin > 0.25                         → business, 0.80
    biz-roi       : roi > 0.15                                  → business, 0.75
    biz-cost      : largest operational cost share > 0.30       → resource, 0.70
    biz-breakeven : breakEvenUnits / monthlySalesVolume < 0.5   → business, 0.85

A record may therefore yield 0 to 4 candidates. Candidate ids are
``<rule-tag>-<record-id>`` so re-running on the same data is deterministic.

Payload fields read: ``businessName``, ``profitMargin``, ``roi``,
``paybackPeriod``, ``operationalCosts`` (list of ``{name, amount}``),
``breakEvenUnits``, ``monthlySalesVolume``.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Optional

from agri_advisor.models.analysis import AnalysisResult
from agri_advisor.models.recommendation import RecommendationCandidate
from agri_advisor.recommendations.payload import number, pct, records, text
from agri_advisor.recommendations.selection import recent_of_type
from agri_advisor.taxonomy.recommendation_taxonomy import (
    AnalysisType,
    RecommendationSource,
    RecommendationType,
)

Rule = Callable[[AnalysisResult, datetime], Optional[RecommendationCandidate]]

PROFIT_MARGIN_THRESHOLD = 0.25
ROI_THRESHOLD = 0.15
COST_SHARE_THRESHOLD = 0.30
BREAK_EVEN_RATIO_THRESHOLD = 0.5


def _profit_margin_rule(result: AnalysisResult, now: datetime) -> Optional[RecommendationCandidate]:
    data = result.data
    margin = number(data, "profitMargin")
    if margin is None or margin <= PROFIT_MARGIN_THRESHOLD:
        return None
    name = text(data, "businessName", "business")
    return RecommendationCandidate(
        id=f"biz-profit-{result.id}",
        type=RecommendationType.BUSINESS,
        title="Profitable Business Model",
        description=(
            f"Your {name} shows a strong profit margin of {pct(margin)}. "
            "Consider scaling operations while maintaining current cost structure."
        ),
        confidence=0.80,
        data={
            "profitMargin": margin,
            "roi": number(data, "roi"),
            "businessName": data.get("businessName"),
        },
        source=RecommendationSource.ANALYSIS,
        created_at=now,
    )


def _roi_rule(result: AnalysisResult, now: datetime) -> Optional[RecommendationCandidate]:
    data = result.data
    roi = number(data, "roi")
    if roi is None or roi <= ROI_THRESHOLD:
        return None
    name = text(data, "businessName", "business")
    return RecommendationCandidate(
        id=f"biz-roi-{result.id}",
        type=RecommendationType.BUSINESS,
        title="Strong Return on Investment",
        description=(
            f"Your investment in {name} shows a {pct(roi)} ROI. "
            "Consider additional investment in similar ventures."
        ),
        confidence=0.75,
        data={"roi": roi, "paybackPeriod": data.get("paybackPeriod")},
        source=RecommendationSource.ANALYSIS,
        created_at=now,
    )


def _cost_concentration_rule(result: AnalysisResult, now: datetime) -> Optional[RecommendationCandidate]:
    costs = records(result.data, "operationalCosts")
    if not costs:
        return None

    priced = [(c, number(c, "amount")) for c in costs]
    priced = [(c, amount) for c, amount in priced if amount is not None]
    if not priced:
        return None

    total = sum(amount for _, amount in priced)
    if total <= 0:
        return None

    # Stable: on equal amounts the first listed cost wins.
    highest, highest_amount = max(priced, key=lambda pair: pair[1])
    share = highest_amount / total
    if share <= COST_SHARE_THRESHOLD:
        return None

    cost_name = text(highest, "name", "Your largest cost")
    return RecommendationCandidate(
        id=f"biz-cost-{result.id}",
        type=RecommendationType.RESOURCE,
        title="Cost Reduction Opportunity",
        description=(
            f"{cost_name} represents {pct(share)} of your operational costs. "
            "Reducing this could significantly improve profitability."
        ),
        confidence=0.70,
        data={
            "costName": highest.get("name"),
            "costAmount": highest_amount,
            "percentage": share,
        },
        source=RecommendationSource.ANALYSIS,
        created_at=now,
    )


def _break_even_rule(result: AnalysisResult, now: datetime) -> Optional[RecommendationCandidate]:
    data = result.data
    units = number(data, "breakEvenUnits")
    volume = number(data, "monthlySalesVolume")
    if not units or not volume:
        return None

    ratio = units / volume
    if ratio >= BREAK_EVEN_RATIO_THRESHOLD:
        return None

    return RecommendationCandidate(
        id=f"biz-breakeven-{result.id}",
        type=RecommendationType.BUSINESS,
        title="Favorable Break-Even Point",
        description=(
            f"You reach break-even at just {pct(ratio)} of your monthly sales volume. "
            "This gives you a safety margin in market fluctuations."
        ),
        confidence=0.85,
        data={
            "breakEvenUnits": units,
            "monthlySalesVolume": volume,
            "ratio": ratio,
        },
        source=RecommendationSource.ANALYSIS,
        created_at=now,
    )


_RULES: tuple[Rule, ...] = (
    _profit_margin_rule,
    _roi_rule,
    _cost_concentration_rule,
    _break_even_rule,
)


def extract_business_recommendations(
    results: list[AnalysisResult],
    now: datetime,
    limit: int = 3,
) -> list[RecommendationCandidate]:
    """Evaluate every business rule against the ``limit`` most recent studies.

    Args:
        results: Shared recency slice of analysis results (any types).
        now:     Generation timestamp stamped on every candidate.
        limit:   How many ``business_feasibility`` records to consider.

    Returns:
        Candidates in record order, then rule order.
    """
    candidates: list[RecommendationCandidate] = []
    for result in recent_of_type(results, AnalysisType.BUSINESS_FEASIBILITY, limit):
        for rule in _RULES:
            candidate = rule(result, now)
            if candidate is not None:
                candidates.append(candidate)
    return candidates
