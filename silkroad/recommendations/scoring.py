from __future__ import annotations

import math

from ..catalog.models import Site
from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from .models import RecommendResult, UserPreference


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _unique_tags(site: Site) -> list[str]:
    return list(dict.fromkeys(site.tags))


def score_site(
    site: Site,
    preference_tags: set[str],
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> tuple[float, list[str]]:
    """Score one site against the preferred tags.

    Returns ``(score, matched_tags)`` where *matched_tags* keeps the site's
    own tag order and *score* is clamped to ``[0, max_score]``.
    """
    matched_tags = [tag_id for tag_id in _unique_tags(site) if tag_id in preference_tags]
    base_score = len(matched_tags) * config.tag_match_points
    rating_bonus = site.rating * config.rating_multiplier
    score = _clamp(base_score + rating_bonus, 0, config.max_score)
    return score, matched_tags


def default_recommendations(
    catalog: list[Site],
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> list[RecommendResult]:
    """Highest rated sites with a fixed score, used when there is nothing to match on."""
    top_sites = sorted(catalog, key=lambda s: s.rating, reverse=True)[: config.default_top_n]
    return [
        RecommendResult(
            site=site,
            match_score=config.default_match_score,
            match_tags=_unique_tags(site)[: config.fallback_tag_count],
        )
        for site in top_sites
    ]


def rank_sites(
    catalog: list[Site],
    preference: UserPreference,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> list[RecommendResult]:
    if not catalog:
        return []
    if not preference.tags:
        return default_recommendations(catalog, config)

    preference_tags = set(preference.tags)
    scored = [(site, *score_site(site, preference_tags, config)) for site in catalog]

    # Stable sort: catalog order breaks ties
    scored.sort(key=lambda item: item[1], reverse=True)

    results: list[RecommendResult] = []
    for site, score, matched_tags in scored[: config.top_n]:
        results.append(RecommendResult(
            site=site,
            match_score=_round_half_up(score),
            match_tags=matched_tags or _unique_tags(site)[: config.fallback_tag_count],
        ))
    return results
