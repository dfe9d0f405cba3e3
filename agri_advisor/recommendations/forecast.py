"""
Demand-forecast extractor: trend, seasonality and reliability signals.

Rules (evaluated independently per record)
------------------------------------------
trend:
    change = (last − first) / first over ``forecasted[*].forecast``.
    change > +0.10 → "Growing Demand Trend"   (market, 0.75)
    change < −0.10 → "Declining Demand Alert" (market, 0.75)
    Strict inequalities: exactly ±10% yields nothing. Needs >= 2 points and
    a non-zero first point.

seasonality:
    Over ``chart.historical[*].value``: peaks = points > 1.2 × mean.
    peaks >= 2 → "Seasonal Demand Pattern" (market, 0.70, source ``pattern``).

accuracy:
    ``accuracy.mape`` < 10 → "High Forecast Reliability"  (business, 0.80)
    ``accuracy.mape`` > 20 → "Forecast Uncertainty Alert" (business, 0.70)
    10 <= MAPE <= 20 → nothing.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Optional

from agri_advisor.models.analysis import AnalysisResult
from agri_advisor.models.recommendation import RecommendationCandidate
from agri_advisor.recommendations.payload import mapping, number, numbers, pct, records, text
from agri_advisor.recommendations.selection import recent_of_type
from agri_advisor.taxonomy.recommendation_taxonomy import (
    AnalysisType,
    RecommendationSource,
    RecommendationType,
)

Rule = Callable[[AnalysisResult, datetime], Optional[RecommendationCandidate]]

TREND_THRESHOLD = 0.10
PEAK_FACTOR = 1.2
MIN_PEAKS = 2
HIGH_ACCURACY_MAPE = 10.0
LOW_ACCURACY_MAPE = 20.0


def _trend_rule(result: AnalysisResult, now: datetime) -> Optional[RecommendationCandidate]:
    data = result.data
    points = records(data, "forecasted")
    if points is None or len(points) < 2:
        return None

    first = number(points[0], "forecast")
    last = number(points[-1], "forecast")
    if first is None or last is None or first == 0:
        return None

    change = (last - first) / first
    product = text(data, "productName", "your product")

    if change > TREND_THRESHOLD:
        return RecommendationCandidate(
            id=f"forecast-growth-{result.id}",
            type=RecommendationType.MARKET,
            title="Growing Demand Trend",
            description=(
                f"Demand for {product} is projected to grow by {pct(change)} over the "
                "forecast period. Consider increasing production capacity."
            ),
            confidence=0.75,
            data={
                "productName": data.get("productName"),
                "growthRate": change,
                "firstForecast": first,
                "lastForecast": last,
            },
            source=RecommendationSource.ANALYSIS,
            created_at=now,
        )

    if change < -TREND_THRESHOLD:
        return RecommendationCandidate(
            id=f"forecast-decline-{result.id}",
            type=RecommendationType.MARKET,
            title="Declining Demand Alert",
            description=(
                f"Demand for {product} is projected to decline by {pct(abs(change))} over "
                "the forecast period. Consider diversifying your product mix."
            ),
            confidence=0.75,
            data={
                "productName": data.get("productName"),
                "declineRate": abs(change),
                "firstForecast": first,
                "lastForecast": last,
            },
            source=RecommendationSource.ANALYSIS,
            created_at=now,
        )

    return None


def _seasonality_rule(result: AnalysisResult, now: datetime) -> Optional[RecommendationCandidate]:
    data = result.data
    history = records(mapping(data, "chart"), "historical")
    if not history:
        return None

    values = numbers(history, "value")
    if not values:
        return None

    mean = sum(values) / len(values)
    peaks = sum(1 for v in values if v > mean * PEAK_FACTOR)
    if peaks < MIN_PEAKS:
        return None

    product = text(data, "productName", "Your product")
    return RecommendationCandidate(
        id=f"forecast-seasonal-{result.id}",
        type=RecommendationType.MARKET,
        title="Seasonal Demand Pattern",
        description=(
            f"{product} shows seasonal demand patterns with {peaks} peak periods. "
            "Plan inventory and production to align with these patterns."
        ),
        confidence=0.70,
        data={
            "productName": data.get("productName"),
            "peakPeriods": peaks,
            "averageDemand": mean,
        },
        source=RecommendationSource.PATTERN,
        created_at=now,
    )


def _accuracy_rule(result: AnalysisResult, now: datetime) -> Optional[RecommendationCandidate]:
    data = result.data
    mape = number(mapping(data, "accuracy"), "mape")
    if mape is None:
        return None

    product = text(data, "productName", "product")
    evidence = {"productName": data.get("productName"), "mape": mape}

    if mape < HIGH_ACCURACY_MAPE:
        return RecommendationCandidate(
            id=f"forecast-accuracy-{result.id}",
            type=RecommendationType.BUSINESS,
            title="High Forecast Reliability",
            description=(
                f"Your {product} forecast has a high accuracy (MAPE: {mape:.1f}%). "
                "Use this forecast with confidence for planning."
            ),
            confidence=0.80,
            data=evidence,
            source=RecommendationSource.ANALYSIS,
            created_at=now,
        )

    if mape > LOW_ACCURACY_MAPE:
        return RecommendationCandidate(
            id=f"forecast-inaccuracy-{result.id}",
            type=RecommendationType.BUSINESS,
            title="Forecast Uncertainty Alert",
            description=(
                f"Your {product} forecast has a higher error rate (MAPE: {mape:.1f}%). "
                "Consider using more historical data or adjusting your forecast method."
            ),
            confidence=0.70,
            data=evidence,
            source=RecommendationSource.ANALYSIS,
            created_at=now,
        )

    return None


_RULES: tuple[Rule, ...] = (_trend_rule, _seasonality_rule, _accuracy_rule)


def extract_forecast_recommendations(
    results: list[AnalysisResult],
    now: datetime,
    limit: int = 3,
) -> list[RecommendationCandidate]:
    """Evaluate trend, seasonality and accuracy rules on recent forecasts.

    Args:
        results: Shared recency slice of analysis results (any types).
        now:     Generation timestamp stamped on every candidate.
        limit:   How many ``demand_forecast`` records to consider.

    Returns:
        Candidates in record order, then rule order.
    """
    candidates: list[RecommendationCandidate] = []
    for result in recent_of_type(results, AnalysisType.DEMAND_FORECAST, limit):
        for rule in _RULES:
            candidate = rule(result, now)
            if candidate is not None:
                candidates.append(candidate)
    return candidates
