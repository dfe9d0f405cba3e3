"""
Stored analysis artifact model.

``AnalysisResult`` wraps one saved run of a business-feasibility study, demand
forecast, or optimization model. The ``data`` payload is opaque: its shape
depends on ``type`` and is only ever read defensively by the extractors in
``agri_advisor.recommendations``: a missing field means "rule does not fire".

The model is frozen. Only ``updated_at`` ever changes in the store, and that
happens through the repository, not by mutating an instance.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AnalysisResult(BaseModel):
    """One persisted analysis artifact owned by a user.

    Attributes:
        id: Store-assigned identifier (UUID text); ``None`` before insertion.
        user_id: Owning user.
        type: Analysis kind, usually an ``AnalysisType`` value. Unknown kinds
            are kept as-is and ignored by the engine.
        data: Type-dependent payload, e.g. ``{"profitMargin": 0.3, ...}``.
        created_at: UTC creation time, or ``None`` if the store has none.
        updated_at: UTC time of the last update, or ``None``.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    user_id: str
    type: str
    data: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("type")
    @classmethod
    def validate_type_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("type must not be empty.")
        return v.strip()
