from __future__ import annotations

from dataclasses import dataclass, field

from ..catalog.models import TagCategory


def _default_category_weights() -> dict[str, float]:
    return {
        TagCategory.type.value: 2.0,
        TagCategory.culture.value: 1.8,
        TagCategory.geography.value: 1.5,
        TagCategory.activity.value: 1.3,
        TagCategory.season.value: 1.0,
        TagCategory.budget.value: 0.8,
        TagCategory.crowd.value: 0.7,
    }


@dataclass(frozen=True)
class RecommendationConfig:
    tag_match_points: int = 20
    rating_multiplier: float = 3.0
    max_score: int = 100
    top_n: int = 15
    default_top_n: int = 8
    default_match_score: int = 75
    fallback_tag_count: int = 3
    similar_limit: int = 5
    default_category_weight: float = 1.0
    category_weights: dict[str, float] = field(default_factory=_default_category_weights)


DEFAULT_RECOMMENDATION_CONFIG = RecommendationConfig()
