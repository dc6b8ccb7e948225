from __future__ import annotations

import numpy as np

from ..catalog.models import Site, Tag
from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig


def category_weight(
    category: str | None,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> float:
    """Weight of a tag category; unknown or empty categories get the default."""
    if not category:
        return config.default_category_weight
    return config.category_weights.get(category, config.default_category_weight)


def _tag_categories(tag_catalog: list[Tag]) -> dict[str, str]:
    return {tag.id: tag.category for tag in tag_catalog}


def similarity(
    site_a: Site,
    site_b: Site,
    tag_catalog: list[Tag],
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> float:
    """Weighted Jaccard similarity of two sites' tag sets.

    Each tag counts with the weight of its category instead of 1. Tags that
    the catalog does not know weigh ``default_category_weight``. Two sites
    without any tags have similarity 0.
    """
    categories = _tag_categories(tag_catalog)
    tags_a = set(site_a.tags)
    tags_b = set(site_b.tags)

    weighted_intersection = 0.0
    weighted_union = 0.0
    # Fixed summation order keeps similarity(a, b) == similarity(b, a) exactly
    for tag_id in sorted(tags_a | tags_b):
        weight = category_weight(categories.get(tag_id), config)
        if tag_id in tags_a and tag_id in tags_b:
            weighted_intersection += weight
        weighted_union += weight

    if weighted_union <= 0:
        return 0.0
    return weighted_intersection / weighted_union


def similar_spots(
    target_id: str,
    catalog: list[Site],
    tag_catalog: list[Tag],
    limit: int = DEFAULT_RECOMMENDATION_CONFIG.similar_limit,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> list[Site]:
    """Sites most similar to *target_id*, best first; empty if the id is unknown."""
    target = next((site for site in catalog if site.id == target_id), None)
    if target is None:
        return []

    scored = [
        (other, similarity(target, other, tag_catalog, config))
        for other in catalog
        if other.id != target_id
    ]
    scored.sort(key=lambda item: item[1], reverse=True)
    return [site for site, _ in scored[: max(limit, 0)]]


def similarity_matrix(
    catalog: list[Site],
    tag_catalog: list[Tag],
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> np.ndarray:
    """Pairwise weighted Jaccard similarity for the whole catalog.

    Builds a site-by-tag incidence matrix and a per-tag weight vector, so
    ``matrix[i, j] == similarity(catalog[i], catalog[j])``.
    """
    categories = _tag_categories(tag_catalog)
    tag_ids = sorted({tag_id for site in catalog for tag_id in site.tags})
    if not catalog:
        return np.zeros((0, 0))

    column = {tag_id: idx for idx, tag_id in enumerate(tag_ids)}
    incidence = np.zeros((len(catalog), len(tag_ids)), dtype=bool)
    for row, site in enumerate(catalog):
        for tag_id in site.tags:
            incidence[row, column[tag_id]] = True

    weights = np.array(
        [category_weight(categories.get(tag_id), config) for tag_id in tag_ids],
        dtype=float,
    )
    weighted = incidence.astype(float) * weights
    intersection = weighted @ incidence.T.astype(float)
    per_site = weighted.sum(axis=1)
    union = per_site[:, None] + per_site[None, :] - intersection

    with np.errstate(divide="ignore", invalid="ignore"):
        matrix = np.where(union > 0, intersection / union, 0.0)
    return matrix
