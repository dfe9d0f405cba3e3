"""
Recommendation taxonomy for the agricultural advisory engine.

Every candidate recommendation is described along two dimensions:
  - ``RecommendationType``  : the *what*: which area of the farm business it targets.
  - ``RecommendationSource``: the *where from*: which kind of evidence produced it.

Inputs are described by ``AnalysisType`` (stored analysis artifacts),
``MessageRole`` (chat transcripts) and ``Season`` (calendar context).
``ChatCategory`` groups chat keywords into the insight buckets emitted by the
chat extractor.

This module has NO imports from any other ``agri_advisor`` package.
"""

from enum import StrEnum


class AnalysisType(StrEnum):
    """Kind of stored analysis artifact.

    The store may hold other types; extractors ignore anything not listed here.
    """

    BUSINESS_FEASIBILITY = "business_feasibility"
    """Profitability, ROI, cost structure and break-even study of a venture."""

    DEMAND_FORECAST = "demand_forecast"
    """Forecast series plus historical demand chart for a product."""

    OPTIMIZATION = "optimization"
    """Linear-programming style resource allocation run."""


class RecommendationType(StrEnum):
    """Business area a recommendation targets."""

    BUSINESS = "business"
    MARKET = "market"
    RESOURCE = "resource"
    CROP = "crop"


class RecommendationSource(StrEnum):
    """Evidence class a recommendation was derived from."""

    ANALYSIS = "analysis"
    """A rule fired on a stored analysis payload."""

    PATTERN = "pattern"
    """A pattern detected in a historical series (e.g. seasonality)."""

    CHAT = "chat"
    """Keyword match over assistant chat messages: weakest evidence."""

    SEASONAL = "seasonal"
    """Static per-season advice, independent of stored data."""


class Season(StrEnum):
    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"
    WINTER = "winter"


class MessageRole(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatCategory(StrEnum):
    """Insight bucket for chat keywords. Declaration order is emission order."""

    GROWTH = "growth"
    PROFIT = "profit"
    COST = "cost"
    RISK = "risk"
    MARKET = "market"
    SEASONAL = "seasonal"
    RESOURCE = "resource"


# Canonical chat category → recommendation type contract.
CHAT_CATEGORY_TYPE_MAP: dict[ChatCategory, RecommendationType] = {
    ChatCategory.GROWTH:   RecommendationType.BUSINESS,
    ChatCategory.PROFIT:   RecommendationType.BUSINESS,
    ChatCategory.COST:     RecommendationType.RESOURCE,
    ChatCategory.RISK:     RecommendationType.BUSINESS,
    ChatCategory.MARKET:   RecommendationType.MARKET,
    ChatCategory.SEASONAL: RecommendationType.MARKET,
    ChatCategory.RESOURCE: RecommendationType.RESOURCE,
}
