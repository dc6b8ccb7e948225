from __future__ import annotations

import logging

from ..catalog.models import Site, Tag
from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from .models import (
    RecommendationOutcome,
    RecommendationStrategy,
    UserPreference,
)
from .scoring import default_recommendations, rank_sites
from .similarity import similar_spots, similarity

logger = logging.getLogger(__name__)

RECOMMENDATION_ERROR_MESSAGE = "Failed to generate recommendations"


class RecommendationEngine:
    """Stateless facade over scoring and similarity.

    Inputs are explicit snapshots of the catalog and the user's preferences;
    nothing is cached between calls.
    """

    def __init__(self, config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG):
        self.config = config

    def recommend(
        self,
        catalog: list[Site],
        tag_catalog: list[Tag],
        preference: UserPreference,
    ) -> RecommendationOutcome:
        """Rank *catalog* for *preference*. Never raises.

        Unexpected failures are logged and answered with the default
        top-rated list; the displayable message goes into ``error``.
        """
        if not catalog:
            return RecommendationOutcome(strategy=RecommendationStrategy.empty)

        try:
            results = rank_sites(catalog, preference, self.config)
        except Exception:
            logger.warning(
                "Recommendation scoring failed, falling back to top rated sites",
                exc_info=True,
            )
            return self._fallback(catalog, error=RECOMMENDATION_ERROR_MESSAGE)

        if not results:
            logger.info("No matching results, using default recommendations")
            return self._fallback(catalog)

        strategy = (
            RecommendationStrategy.personalized
            if preference.tags
            else RecommendationStrategy.default
        )
        return RecommendationOutcome(results=results, strategy=strategy)

    def _fallback(self, catalog: list[Site], error: str | None = None) -> RecommendationOutcome:
        try:
            results = default_recommendations(catalog, self.config)
        except Exception:
            logger.warning("Default recommendations failed", exc_info=True)
            results = []
        return RecommendationOutcome(
            results=results,
            strategy=RecommendationStrategy.default,
            error=error,
        )

    def similarity(self, site_a: Site, site_b: Site, tag_catalog: list[Tag]) -> float:
        return similarity(site_a, site_b, tag_catalog, self.config)

    def similar_spots(
        self,
        target_id: str,
        catalog: list[Site],
        tag_catalog: list[Tag],
        limit: int | None = None,
    ) -> list[Site]:
        if limit is None:
            limit = self.config.similar_limit
        return similar_spots(target_id, catalog, tag_catalog, limit, self.config)
