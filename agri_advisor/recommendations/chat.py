"""
Chat-insight extractor: keyword-bucketed sentences from assistant replies.

Algorithm
---------
1. Keep assistant messages only, newest first, and take the 10 most recent.
2. For each message and each keyword in ``CHAT_KEYWORDS`` (fixed order): if
   the lower-cased content contains the keyword, split the original content
   into sentences on runs of ``.``, ``!`` and ``?`` and append the first
   sentence containing the keyword to that keyword's category bucket. One
   sentence can land in several buckets when several keywords match.
3. Emit one candidate per non-empty bucket, in ``ChatCategory`` order, using
   the bucket's first sentence as the description.

Chat evidence is weaker than stored analyses, so every candidate carries the
same low confidence (0.60 by default). A bucket aggregates many messages and
has no single source record; its id is ``chat-<category>-<epoch-ms>``.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime

from agri_advisor.models.chat import ChatMessage
from agri_advisor.models.recommendation import RecommendationCandidate
from agri_advisor.taxonomy.recommendation_taxonomy import (
    CHAT_CATEGORY_TYPE_MAP,
    ChatCategory,
    MessageRole,
    RecommendationSource,
)
from agri_advisor.utils.time_utils import epoch_millis, sort_by_recency

logger = logging.getLogger(__name__)

CHAT_KEYWORDS: dict[str, ChatCategory] = {
    "increase":   ChatCategory.GROWTH,
    "expand":     ChatCategory.GROWTH,
    "grow":       ChatCategory.GROWTH,
    "profit":     ChatCategory.PROFIT,
    "revenue":    ChatCategory.PROFIT,
    "cost":       ChatCategory.COST,
    "expense":    ChatCategory.COST,
    "save":       ChatCategory.COST,
    "risk":       ChatCategory.RISK,
    "market":     ChatCategory.MARKET,
    "demand":     ChatCategory.MARKET,
    "customer":   ChatCategory.MARKET,
    "season":     ChatCategory.SEASONAL,
    "weather":    ChatCategory.SEASONAL,
    "climate":    ChatCategory.SEASONAL,
    "resource":   ChatCategory.RESOURCE,
    "water":      ChatCategory.RESOURCE,
    "soil":       ChatCategory.RESOURCE,
    "fertilizer": ChatCategory.RESOURCE,
    "pest":       ChatCategory.RESOURCE,
    "equipment":  ChatCategory.RESOURCE,
}

CATEGORY_TITLES: dict[ChatCategory, str] = {
    ChatCategory.GROWTH:   "Growth Opportunity",
    ChatCategory.PROFIT:   "Profit Enhancement",
    ChatCategory.COST:     "Cost Saving Opportunity",
    ChatCategory.RISK:     "Risk Management",
    ChatCategory.MARKET:   "Market Intelligence",
    ChatCategory.SEASONAL: "Seasonal Planning",
    ChatCategory.RESOURCE: "Resource Optimization",
}

_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def _first_sentence_with(content: str, keyword: str) -> str | None:
    for sentence in _SENTENCE_SPLIT.split(content):
        if keyword in sentence.lower():
            return sentence.strip()
    return None


def collect_chat_sentences(
    messages: list[ChatMessage],
    window: int = 10,
) -> dict[ChatCategory, list[str]]:
    """Bucket keyword sentences from the ``window`` newest assistant messages.

    Returns:
        Every ``ChatCategory`` mapped to its (possibly empty) sentence list.
    """
    assistant = [m for m in messages if m.role == MessageRole.ASSISTANT]
    recent = sort_by_recency(assistant)[:window]

    buckets: dict[ChatCategory, list[str]] = {category: [] for category in ChatCategory}
    for message in recent:
        lowered = message.content.lower()
        for keyword, category in CHAT_KEYWORDS.items():
            if keyword not in lowered:
                continue
            sentence = _first_sentence_with(message.content, keyword)
            if sentence:
                buckets[category].append(sentence)
    return buckets


def extract_chat_insights(
    messages: list[ChatMessage],
    now: datetime,
    window: int = 10,
    confidence: float = 0.60,
) -> list[RecommendationCandidate]:
    """Build one low-confidence candidate per chat category with evidence.

    Args:
        messages:   All of the user's messages, any conversation, any role.
        now:        Generation timestamp; also embedded in candidate ids.
        window:     Number of newest assistant messages to mine.
        confidence: Confidence stamped on every chat candidate.

    Returns:
        Candidates in ``ChatCategory`` declaration order.
    """
    buckets = collect_chat_sentences(messages, window=window)
    stamp = epoch_millis(now)

    candidates: list[RecommendationCandidate] = []
    for category, sentences in buckets.items():
        if not sentences:
            continue
        candidates.append(
            RecommendationCandidate(
                id=f"chat-{category}-{stamp}",
                type=CHAT_CATEGORY_TYPE_MAP[category],
                title=CATEGORY_TITLES[category],
                description=sentences[0],
                confidence=confidence,
                data={"category": category.value, "relatedSentences": list(sentences)},
                source=RecommendationSource.CHAT,
                created_at=now,
            )
        )

    logger.debug(
        "Chat insights: %d categories from %d messages", len(candidates), len(messages)
    )
    return candidates
