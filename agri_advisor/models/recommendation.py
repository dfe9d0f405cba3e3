"""
Recommendation models: transient candidates, engine output, and stored rows.

``RecommendationCandidate`` is the unit the ranker orders. It is never stored
directly: the persistence adapter turns each selected candidate into a
``RecommendationItem`` under a freshly created ``RecommendationSet``.

``RecommendationItem.confidence`` is a ``Decimal`` because the store keeps the
value as exact decimal text; ``RecommendationSetView`` converts it back to a
float for callers.

All models are frozen: a recommendation set is created once per generation
call and never edited afterwards.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agri_advisor.taxonomy.recommendation_taxonomy import (
    RecommendationSource,
    RecommendationType,
)


class RecommendationCandidate(BaseModel):
    """A ranked-but-unpersisted recommendation produced by an extractor.

    Attributes:
        id: Provenance key plus source-record id, e.g. ``"biz-roi-<id>"``.
            Synthetic candidates (chat, seasonal) carry a timestamp instead.
        type: Business area targeted.
        title: Short headline; also used verbatim in the summary narrative.
        description: One or two sentences of advice.
        confidence: Evidence strength in ``[0, 1]``.
        data: Evidence payload (the numbers the rule fired on).
        source: Evidence class.
        created_at: Generation timestamp (shared by every candidate of a call).
    """

    model_config = ConfigDict(frozen=True)

    id: str
    type: RecommendationType
    title: str
    description: str
    confidence: float
    data: dict[str, Any] = Field(default_factory=dict)
    source: RecommendationSource
    created_at: datetime

    @field_validator("confidence")
    @classmethod
    def validate_confidence_range(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"confidence must be in [0.0, 1.0], got {v}.")
        return v


class GeneratedRecommendations(BaseModel):
    """Pure engine output: summary plus the final ranked candidates (<= 10)."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    summary: str
    recommendations: list[RecommendationCandidate]
    created_at: datetime


class RecommendationSet(BaseModel):
    """Stored header row for one generation call."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    summary: str
    created_at: Optional[datetime] = None


class RecommendationItem(BaseModel):
    """Stored recommendation belonging to exactly one ``RecommendationSet``."""

    model_config = ConfigDict(frozen=True)

    id: str
    set_id: str
    type: RecommendationType
    title: str
    description: str
    confidence: Decimal
    data: dict[str, Any] = Field(default_factory=dict)
    source: RecommendationSource
    created_at: Optional[datetime] = None


class RecommendationItemView(BaseModel):
    """Public shape of a stored item (confidence as a float)."""

    model_config = ConfigDict(frozen=True)

    id: str
    set_id: str
    type: RecommendationType
    title: str
    description: str
    confidence: float
    data: dict[str, Any]
    source: RecommendationSource
    created_at: Optional[datetime] = None

    @classmethod
    def from_item(cls, item: RecommendationItem) -> "RecommendationItemView":
        return cls(
            id=item.id,
            set_id=item.set_id,
            type=item.type,
            title=item.title,
            description=item.description,
            confidence=float(item.confidence),
            data=item.data,
            source=item.source,
            created_at=item.created_at,
        )


class RecommendationSetView(BaseModel):
    """Public shape of a stored set together with its items."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    summary: str
    created_at: Optional[datetime] = None
    items: list[RecommendationItemView] = Field(default_factory=list)

    @classmethod
    def from_rows(
        cls,
        rec_set: RecommendationSet,
        items: list[RecommendationItem],
    ) -> "RecommendationSetView":
        return cls(
            id=rec_set.id,
            user_id=rec_set.user_id,
            summary=rec_set.summary,
            created_at=rec_set.created_at,
            items=[RecommendationItemView.from_item(i) for i in items],
        )
