"""
Engine facade: the single, pure entry point for recommendation generation.

``generate()`` performs no I/O. Given the user's analysis results, chat
messages, and an optional season, it runs every extractor, ranks the merged
candidates, and builds the summary. Persisting the output is the job of
``agri_advisor.services.recommendation_service``.

The clock is read exactly once per call, so every candidate in a generation
shares one ``created_at`` and the synthetic chat/seasonal ids are
reproducible when a fixed clock is injected.
"""

from __future__ import annotations

import logging
from typing import Optional

from agri_advisor.config import EngineConfig
from agri_advisor.models.analysis import AnalysisResult
from agri_advisor.models.chat import ChatMessage
from agri_advisor.models.recommendation import GeneratedRecommendations
from agri_advisor.recommendations.business import extract_business_recommendations
from agri_advisor.recommendations.chat import extract_chat_insights
from agri_advisor.recommendations.forecast import extract_forecast_recommendations
from agri_advisor.recommendations.optimization import extract_optimization_recommendations
from agri_advisor.recommendations.ranker import merge_candidates, rank_candidates
from agri_advisor.recommendations.seasonal import seasonal_recommendations
from agri_advisor.recommendations.selection import recent_analysis_slice
from agri_advisor.recommendations.summary import build_summary
from agri_advisor.taxonomy.recommendation_taxonomy import Season
from agri_advisor.utils.time_utils import Clock, utcnow

logger = logging.getLogger(__name__)


def generate(
    user_id: str,
    analysis_results: list[AnalysisResult],
    chat_history: list[ChatMessage],
    season: Optional[Season | str] = None,
    *,
    config: Optional[EngineConfig] = None,
    clock: Clock = utcnow,
) -> GeneratedRecommendations:
    """Generate a ranked recommendation set for one user.

    Args:
        user_id:          Owner of the inputs; copied onto the output.
        analysis_results: All of the user's analysis results, any order.
        chat_history:     All of the user's chat messages, any conversation.
        season:           Current season, or ``None``.
        config:           Engine limits and wording; defaults to ``EngineConfig()``.
        clock:            Timestamp source for candidates and synthetic ids.

    Returns:
        ``GeneratedRecommendations`` with at most ``config.max_recommendations``
        candidates and the narrative summary.

    Raises:
        ValueError: If ``season`` is not a valid ``Season`` value.
    """
    config = config or EngineConfig()
    season = Season(season) if season is not None else None
    now = clock()

    recent = recent_analysis_slice(analysis_results, window=config.analysis_window)
    business = extract_business_recommendations(recent, now, limit=config.per_type_limit)
    forecast = extract_forecast_recommendations(recent, now, limit=config.per_type_limit)
    optimization = extract_optimization_recommendations(recent, now, limit=config.per_type_limit)
    chat = extract_chat_insights(
        chat_history, now, window=config.chat_window, confidence=config.chat_confidence
    )
    seasonal = seasonal_recommendations(season, now)

    merged = merge_candidates(business, forecast, optimization, chat, seasonal)
    ranked = rank_candidates(merged, limit=config.max_recommendations)
    summary = build_summary(
        ranked[: config.summary_top_n],
        analysis_results,
        season=season,
        product_name=config.product_name,
    )

    logger.debug(
        "Generated recommendations for user_id=%s | business=%d forecast=%d "
        "optimization=%d chat=%d seasonal=%d | kept=%d of %d",
        user_id, len(business), len(forecast), len(optimization),
        len(chat), len(seasonal), len(ranked), len(merged),
    )

    return GeneratedRecommendations(
        user_id=user_id,
        summary=summary,
        recommendations=ranked,
        created_at=now,
    )
