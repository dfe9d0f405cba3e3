"""Tests for analysis, chat and recommendation models."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from agri_advisor.models.analysis import AnalysisResult
from agri_advisor.models.chat import ChatMessage
from agri_advisor.models.recommendation import (
    RecommendationCandidate,
    RecommendationItem,
    RecommendationSet,
    RecommendationSetView,
)
from agri_advisor.taxonomy.recommendation_taxonomy import (
    CHAT_CATEGORY_TYPE_MAP,
    ChatCategory,
    MessageRole,
    RecommendationSource,
    RecommendationType,
)

_TS = datetime(2026, 3, 15, tzinfo=timezone.utc)


class TestAnalysisResult:
    def test_unknown_type_kept(self):
        result = AnalysisResult(user_id="u", type="soil_report")
        assert result.type == "soil_report"
        assert result.data == {}

    def test_type_stripped(self):
        assert AnalysisResult(user_id="u", type=" optimization ").type == "optimization"

    def test_empty_type_raises(self):
        with pytest.raises(ValidationError, match="type must not be empty"):
            AnalysisResult(user_id="u", type="  ")

    def test_frozen(self):
        result = AnalysisResult(user_id="u", type="optimization")
        with pytest.raises(ValidationError):
            result.type = "demand_forecast"


class TestChatMessage:
    def test_role_from_string(self):
        message = ChatMessage(conversation_id="c", role="assistant", content="Hi.")
        assert message.role == MessageRole.ASSISTANT

    def test_unknown_role_raises(self):
        with pytest.raises(ValidationError):
            ChatMessage(conversation_id="c", role="system", content="Hi.")


class TestRecommendationCandidate:
    def _make(self, confidence: float) -> RecommendationCandidate:
        return RecommendationCandidate(
            id="x",
            type=RecommendationType.MARKET,
            title="t",
            description="d",
            confidence=confidence,
            source=RecommendationSource.PATTERN,
            created_at=_TS,
        )

    @pytest.mark.parametrize("confidence", [0.0, 0.6, 1.0])
    def test_valid_confidence(self, confidence):
        assert self._make(confidence).confidence == confidence

    @pytest.mark.parametrize("confidence", [-0.01, 1.01])
    def test_confidence_out_of_range(self, confidence):
        with pytest.raises(ValidationError, match="confidence"):
            self._make(confidence)


class TestRecommendationSetView:
    def test_from_rows_converts_confidence(self):
        rec_set = RecommendationSet(id="s", user_id="u", summary="sum", created_at=_TS)
        item = RecommendationItem(
            id="i",
            set_id="s",
            type=RecommendationType.CROP,
            title="Fall Crop Recommendations",
            description="d",
            confidence=Decimal("0.7"),
            data={"season": "fall"},
            source=RecommendationSource.SEASONAL,
            created_at=_TS,
        )
        view = RecommendationSetView.from_rows(rec_set, [item])
        assert view.items[0].confidence == 0.7
        assert isinstance(view.items[0].confidence, float)
        assert view.model_dump(mode="json")["items"][0]["type"] == "crop"


class TestTaxonomy:
    def test_every_chat_category_mapped(self):
        assert set(CHAT_CATEGORY_TYPE_MAP) == set(ChatCategory)

    def test_mapping(self):
        assert CHAT_CATEGORY_TYPE_MAP[ChatCategory.SEASONAL] == RecommendationType.MARKET
        assert CHAT_CATEGORY_TYPE_MAP[ChatCategory.COST] == RecommendationType.RESOURCE
        assert CHAT_CATEGORY_TYPE_MAP[ChatCategory.RISK] == RecommendationType.BUSINESS
