"""
Seasonal advisor: two fixed recommendations per season, no stored data needed.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from agri_advisor.models.recommendation import RecommendationCandidate
from agri_advisor.taxonomy.recommendation_taxonomy import (
    RecommendationSource,
    RecommendationType,
    Season,
)
from agri_advisor.utils.time_utils import epoch_millis

SEASONAL_CROPS: dict[Season, list[str]] = {
    Season.SPRING: ["Corn", "Soybeans", "Rice", "Cotton", "Vegetables"],
    Season.SUMMER: ["Sunflower", "Sorghum", "Millet", "Vegetables", "Fruits"],
    Season.FALL:   ["Winter Wheat", "Barley", "Rapeseed", "Root vegetables"],
    Season.WINTER: ["Planning", "Equipment maintenance", "Soil preparation"],
}

SEASONAL_ACTIVITIES: dict[Season, list[str]] = {
    Season.SPRING: ["Planting", "Soil preparation", "Fertilizing", "Pest management planning"],
    Season.SUMMER: ["Irrigation management", "Pest control", "Crop monitoring", "Early harvest planning"],
    Season.FALL:   ["Harvesting", "Storage preparation", "Market research", "Winter crop planting"],
    Season.WINTER: ["Equipment maintenance", "Financial planning", "Education", "Crop planning"],
}


def seasonal_recommendations(
    season: Optional[Season | str],
    now: datetime,
) -> list[RecommendationCandidate]:
    """Return the crop-focus and activity-focus candidates for ``season``.

    Args:
        season: Current season, or ``None`` for no seasonal advice.
        now:    Generation timestamp; also embedded in candidate ids.

    Returns:
        ``[]`` when ``season`` is ``None``, otherwise exactly two candidates.

    Raises:
        ValueError: If ``season`` is a string that is not a ``Season`` value.
    """
    if season is None:
        return []
    season = Season(season)
    label = season.value.capitalize()
    stamp = epoch_millis(now)
    crops = SEASONAL_CROPS[season]
    activities = SEASONAL_ACTIVITIES[season]

    return [
        RecommendationCandidate(
            id=f"seasonal-crop-{stamp}",
            type=RecommendationType.CROP,
            title=f"{label} Crop Recommendations",
            description=f"Consider focusing on these crops this {season}: {', '.join(crops)}.",
            confidence=0.70,
            data={"season": season.value, "recommendedCrops": list(crops)},
            source=RecommendationSource.SEASONAL,
            created_at=now,
        ),
        RecommendationCandidate(
            id=f"seasonal-activity-{stamp}",
            type=RecommendationType.BUSINESS,
            title=f"{label} Activity Focus",
            description=f"Key activities for this {season}: {', '.join(activities)}.",
            confidence=0.70,
            data={"season": season.value, "recommendedActivities": list(activities)},
            source=RecommendationSource.SEASONAL,
            created_at=now,
        ),
    ]
