"""
End-to-end tests for agri_advisor/recommendations/engine.py.

What we test
------------
  - Empty input -> no recommendations and the fallback summary.
  - Season only -> the two seasonal candidates and a season-specific summary.
  - Rich input -> at most 10 candidates, ordered by confidence (one shared
    timestamp), with the expected summary.
  - The same input and clock always produce the same output.
  - Engine limits come from ``EngineConfig``.
  - Invalid seasons are rejected.
"""

from __future__ import annotations

import pytest

from agri_advisor.config import EngineConfig
from agri_advisor.recommendations.engine import generate
from agri_advisor.taxonomy.recommendation_taxonomy import RecommendationSource


@pytest.fixture
def rich_input(make_analysis, make_message, feasibility_payload, forecast_payload, optimization_payload):
    analyses = [
        make_analysis("business_feasibility", feasibility_payload, result_id="biz1", age_days=3),
        make_analysis("demand_forecast", forecast_payload, result_id="fc1", age_days=2),
        make_analysis("optimization", optimization_payload, result_id="opt1", age_days=1),
    ]
    messages = [
        make_message("Consider ways to increase revenue this season.", age_minutes=10),
        make_message("How do I increase revenue?", role="user", age_minutes=11),
    ]
    return analyses, messages


class TestEmptyInput:
    def test_fallback_summary(self, fixed_clock):
        result = generate("user-1", [], [], clock=fixed_clock)
        assert result.recommendations == []
        assert result.summary.startswith("Insufficient data for personalized recommendations.")
        assert "Agri Advisor" in result.summary

    def test_product_name_from_config(self, fixed_clock):
        config = EngineConfig(product_name="FarmWise")
        result = generate("user-1", [], [], config=config, clock=fixed_clock)
        assert "Continue using FarmWise to analyze" in result.summary


class TestSeasonOnly:
    def test_two_seasonal_candidates(self, fixed_clock):
        result = generate("user-1", [], [], season="winter", clock=fixed_clock)
        assert [c.title for c in result.recommendations] == [
            "Winter Crop Recommendations",
            "Winter Activity Focus",
        ]
        assert all(c.source == RecommendationSource.SEASONAL for c in result.recommendations)

    def test_summary(self, fixed_clock):
        result = generate("user-1", [], [], season="winter", clock=fixed_clock)
        assert result.summary == (
            "Based on your historical data, we recommend: "
            "Winter Activity Focus. Winter Crop Recommendations. "
            "Consider adjusting your strategy for the winter season."
        )

    def test_invalid_season_rejected(self, fixed_clock):
        with pytest.raises(ValueError):
            generate("user-1", [], [], season="monsoon", clock=fixed_clock)


class TestRichInput:
    def test_truncated_to_ten(self, rich_input, fixed_clock):
        analyses, messages = rich_input
        result = generate("user-1", analyses, messages, season="fall", clock=fixed_clock)
        assert len(result.recommendations) == 10

    def test_ordered_by_confidence(self, rich_input, fixed_clock):
        analyses, messages = rich_input
        result = generate("user-1", analyses, messages, clock=fixed_clock)
        assert [c.id for c in result.recommendations] == [
            "opt-feasible-opt1",
            "biz-breakeven-biz1",
            "opt-constraints-opt1",
            "biz-profit-biz1",
            "forecast-accuracy-fc1",
            "opt-resources-opt1",
            "biz-roi-biz1",
            "forecast-growth-fc1",
            "biz-cost-biz1",
            "forecast-seasonal-fc1",
        ]
        confidences = [c.confidence for c in result.recommendations]
        assert confidences == sorted(confidences, reverse=True)

    def test_shared_timestamp(self, rich_input, fixed_clock, now):
        analyses, messages = rich_input
        result = generate("user-1", analyses, messages, clock=fixed_clock)
        assert result.created_at == now
        assert {c.created_at for c in result.recommendations} == {now}

    def test_summary(self, rich_input, fixed_clock):
        analyses, messages = rich_input
        result = generate("user-1", analyses, messages, season="fall", clock=fixed_clock)
        assert result.summary == (
            "Based on your business feasibility analysis, demand forecasting, "
            "optimization analysis, we recommend: "
            "Favorable Break-Even Point. Optimal Resource Allocation. "
            "Consider adjusting your strategy for the fall season."
        )

    def test_deterministic(self, rich_input, fixed_clock):
        analyses, messages = rich_input
        first = generate("user-1", analyses, messages, season="fall", clock=fixed_clock)
        second = generate("user-1", analyses, messages, season="fall", clock=fixed_clock)
        assert first == second

    def test_user_id_copied(self, rich_input, fixed_clock):
        analyses, messages = rich_input
        assert generate("farmer-7", analyses, messages, clock=fixed_clock).user_id == "farmer-7"


class TestConfigLimits:
    def test_max_recommendations(self, rich_input, fixed_clock):
        analyses, messages = rich_input
        config = EngineConfig(max_recommendations=4)
        result = generate("user-1", analyses, messages, config=config, clock=fixed_clock)
        assert len(result.recommendations) == 4

    def test_analysis_window(self, rich_input, fixed_clock):
        analyses, _ = rich_input
        # Only the newest analysis (the optimization run) survives the slice.
        config = EngineConfig(analysis_window=1)
        result = generate("user-1", analyses, [], config=config, clock=fixed_clock)
        assert {c.id.split("-")[0] for c in result.recommendations} == {"opt"}

    def test_chat_only(self, make_message, fixed_clock):
        messages = [make_message("Your soil needs more fertilizer.")]
        result = generate("user-1", [], messages, clock=fixed_clock)
        assert [c.title for c in result.recommendations] == ["Resource Optimization"]
        assert result.summary == (
            "Based on your historical data, we recommend: Resource Optimization. "
        )

    def test_out_of_range_field_does_not_abort_generation(self, make_analysis, fixed_clock):
        analyses = [make_analysis("business_feasibility", {"profitMargin": 10**400, "roi": 0.5})]
        result = generate("user-1", analyses, [], clock=fixed_clock)
        assert [c.title for c in result.recommendations] == ["Strong Return on Investment"]
