"""
Shared pytest fixtures for the Agri Advisor test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the full
    schema applied. Created anew for each test that requests it.
  - ``now`` / ``fixed_clock``: A pinned generation timestamp.
  - Factories for analysis results and chat messages, plus realistic
    payloads for each analysis type.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Generator, Optional

import pytest

from agri_advisor.db.schema import apply_schema
from agri_advisor.models.analysis import AnalysisResult
from agri_advisor.models.chat import ChatMessage
from agri_advisor.taxonomy.recommendation_taxonomy import MessageRole

NOW = datetime(2026, 3, 15, 9, 30, 0, tzinfo=timezone.utc)


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the full schema applied.

    Connection is closed after the test.
    """
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    apply_schema(conn)
    yield conn
    conn.close()


# ── Time ──────────────────────────────────────────────────────────────────────

@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: NOW


# ── Factories ─────────────────────────────────────────────────────────────────

@pytest.fixture
def make_analysis() -> Callable[..., AnalysisResult]:
    """Build an ``AnalysisResult``; ``age_days`` sets ``created_at`` before NOW."""

    def _make(
        analysis_type: str,
        data: dict[str, Any],
        result_id: str = "a-1",
        user_id: str = "user-1",
        age_days: Optional[float] = 1,
    ) -> AnalysisResult:
        created = NOW - timedelta(days=age_days) if age_days is not None else None
        return AnalysisResult(
            id=result_id,
            user_id=user_id,
            type=analysis_type,
            data=data,
            created_at=created,
            updated_at=created,
        )

    return _make


@pytest.fixture
def make_message() -> Callable[..., ChatMessage]:
    """Build a ``ChatMessage``; ``age_minutes`` sets ``created_at`` before NOW."""

    def _make(
        content: str,
        role: MessageRole = MessageRole.ASSISTANT,
        age_minutes: float = 5,
        conversation_id: str = "conv-1",
    ) -> ChatMessage:
        return ChatMessage(
            conversation_id=conversation_id,
            role=role,
            content=content,
            created_at=NOW - timedelta(minutes=age_minutes),
        )

    return _make


# ── Sample payloads ───────────────────────────────────────────────────────────

@pytest.fixture
def feasibility_payload() -> dict[str, Any]:
    """Fires every business rule: margin, ROI, cost share, break-even."""
    return {
        "businessName": "Organic Tomato Farm",
        "profitMargin": 0.32,
        "roi": 0.18,
        "paybackPeriod": 2.5,
        "operationalCosts": [
            {"name": "Labor", "amount": 4000},
            {"name": "Seeds", "amount": 1000},
            {"name": "Water", "amount": 1000},
            {"name": "Transport", "amount": 2000},
        ],
        "breakEvenUnits": 300,
        "monthlySalesVolume": 1000,
    }


@pytest.fixture
def forecast_payload() -> dict[str, Any]:
    """Growing trend, two historical peaks, high accuracy."""
    return {
        "productName": "Sweet Corn",
        "forecasted": [
            {"period": "2026-04", "forecast": 100},
            {"period": "2026-05", "forecast": 115},
            {"period": "2026-06", "forecast": 130},
        ],
        "chart": {
            "historical": [
                {"period": "2025-01", "value": 100},
                {"period": "2025-02", "value": 100},
                {"period": "2025-03", "value": 200},
                {"period": "2025-04", "value": 100},
                {"period": "2025-05", "value": 200},
                {"period": "2025-06", "value": 100},
            ]
        },
        "accuracy": {"mape": 7.5},
    }


@pytest.fixture
def optimization_payload() -> dict[str, Any]:
    """Feasible plan with four positive variables and one binding constraint."""
    return {
        "name": "Crop Mix",
        "feasible": True,
        "objectiveValue": 12500.0,
        "variables": [
            {"name": "Wheat", "value": 40},
            {"name": "Corn", "value": 25},
            {"name": "Soy", "value": 0},
            {"name": "Barley", "value": 10},
            {"name": "Oats", "value": 55},
        ],
        "constraints": [
            {"name": "Land", "slack": 0},
            {"name": "Water", "slack": 12.5},
            {"name": "Labor", "slack": 0.0004},
        ],
    }
