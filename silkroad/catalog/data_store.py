from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any

import pandas as pd

from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .models import Site, SiteCreate, SiteUpdate, Tag, TagCreate, TagGroup, TagUpdate

logger = logging.getLogger(__name__)

_LIST_COLUMNS = ("tags", "images", "best_visit_season")
_OPTIONAL_FLOAT_COLUMNS = ("latitude", "longitude", "price_child", "price_student")
_NUMERIC_COLUMNS = _OPTIONAL_FLOAT_COLUMNS + ("price_adult", "rating")

# Fields an update may clear with an explicit null
_NULLABLE_SITE_FIELDS = frozenset(_OPTIONAL_FLOAT_COLUMNS)
_NULLABLE_TAG_FIELDS = frozenset({"color"})

_sites: list[Site] | None = None
_tags: list[Tag] | None = None


class DuplicateSiteError(ValueError):
    """Raised when a site id is already present in the catalog."""


class DuplicateTagError(ValueError):
    """Raised when a tag id is already present in the catalog."""


def _split_list(value: Any) -> list[str]:
    if pd.isna(value):
        return []
    return [part.strip() for part in str(value).split("|") if part.strip()]


def _load_tags_frame(config: CatalogConfig) -> pd.DataFrame:
    df = pd.read_csv(config.tags_path, dtype=str, keep_default_na=False)
    df["category"] = df["category"].str.strip().str.lower()
    return df


def _load_sites_frame(config: CatalogConfig) -> pd.DataFrame:
    df = pd.read_csv(config.sites_path, dtype=str, keep_default_na=False)

    # Pre-parse pipe-separated columns into lists
    for column in _LIST_COLUMNS:
        if column in df.columns:
            df[column] = df[column].apply(_split_list)
        else:
            df[column] = [[] for _ in range(len(df))]

    for column in _NUMERIC_COLUMNS:
        if column in df.columns:
            df[column] = pd.to_numeric(df[column], errors="coerce")

    if "rating" in df.columns:
        df["rating"] = df["rating"].clip(1.0, 5.0).fillna(3.0)
    if "price_adult" in df.columns:
        df["price_adult"] = df["price_adult"].fillna(0.0)
    return df


def _row_to_site(row: pd.Series) -> Site:
    data: dict[str, Any] = {}
    for key, value in row.items():
        if key in _LIST_COLUMNS:
            data[key] = list(value)
        elif key in _OPTIONAL_FLOAT_COLUMNS:
            data[key] = float(value) if pd.notna(value) else None
        elif isinstance(value, float) and pd.isna(value):
            continue
        else:
            data[key] = value
    return Site(**data)


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _generate_id(prefix: str, taken: set[str]) -> str:
    stamp = int(time.time() * 1000)
    while f"{prefix}-{stamp}" in taken:
        stamp += 1
    return f"{prefix}-{stamp}"


def _patch_fields(payload: Any, nullable: frozenset[str], **dump_kwargs: Any) -> dict[str, Any]:
    """Fields set on an update payload; null only counts for *nullable* ones."""
    return {
        key: value
        for key, value in payload.model_dump(exclude_unset=True, **dump_kwargs).items()
        if value is not None or key in nullable
    }


def load_tags(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> list[Tag]:
    """Return the in-memory tag catalog, loading the seed CSV on first call."""
    global _tags
    if _tags is None:
        df = _load_tags_frame(config)
        _tags = [
            Tag(
                id=row["id"],
                name=row["name"],
                category=row["category"],
                color=row["color"] or None,
            )
            for _, row in df.iterrows()
        ]
        logger.info("Loaded %d tags from %s", len(_tags), config.tags_path)
    return _tags


def load_sites(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> list[Site]:
    """Return the in-memory site catalog, loading the seed CSV on first call."""
    global _sites
    if _sites is None:
        df = _load_sites_frame(config)
        _sites = [_row_to_site(row) for _, row in df.iterrows()]
        logger.info("Loaded %d sites from %s", len(_sites), config.sites_path)
    return _sites


def reset_catalog() -> None:
    """Drop in-memory state so the next access reloads the seed data."""
    global _sites, _tags
    _sites = None
    _tags = None


# ── Lookups ──────────────────────────────────────────────────────────────


def get_site_by_id(site_id: str) -> Site | None:
    for site in load_sites():
        if site.id == site_id:
            return site
    return None


def get_tag_map() -> dict[str, Tag]:
    return {tag.id: tag for tag in load_tags()}


def filter_sites_by_tags(tag_ids: list[str]) -> list[Site]:
    """Sites carrying any of *tag_ids*; every site when the filter is empty."""
    sites = load_sites()
    if not tag_ids:
        return list(sites)
    wanted = set(tag_ids)
    return [site for site in sites if wanted & set(site.tags)]


def get_site_tags(site: Site) -> list[Tag]:
    """Resolve a site's tag ids to Tag objects, dropping dangling ids."""
    tag_map = get_tag_map()
    return [tag_map[tag_id] for tag_id in site.tags if tag_id in tag_map]


def tags_by_category() -> list[TagGroup]:
    groups: dict[str, list[Tag]] = {}
    for tag in load_tags():
        groups.setdefault(tag.category, []).append(tag)
    return [TagGroup(category=category, tags=tags) for category, tags in groups.items()]


# ── Site mutations ───────────────────────────────────────────────────────


def add_site(payload: SiteCreate) -> Site:
    sites = load_sites()
    taken = {site.id for site in sites}
    site_id = payload.id or _generate_id("scenic", taken)
    if site_id in taken:
        raise DuplicateSiteError(f"Site {site_id!r} already exists")
    now = _now_iso()
    data = payload.model_dump(exclude={"id"})
    site = Site(
        id=site_id,
        created_at=now,
        updated_at=now,
        **data,
    )
    sites.append(site)
    logger.info("Added site %s", site.id)
    return site


def update_site(site_id: str, payload: SiteUpdate) -> Site | None:
    sites = load_sites()
    for index, site in enumerate(sites):
        if site.id == site_id:
            updates = _patch_fields(payload, _NULLABLE_SITE_FIELDS)
            updates["updated_at"] = _now_iso()
            updated = Site(**{**site.model_dump(), **updates})
            sites[index] = updated
            logger.info("Updated site %s", site_id)
            return updated
    return None


def delete_site(site_id: str) -> bool:
    sites = load_sites()
    remaining = [site for site in sites if site.id != site_id]
    if len(remaining) == len(sites):
        return False
    sites[:] = remaining
    logger.info("Deleted site %s", site_id)
    return True


# ── Tag mutations ────────────────────────────────────────────────────────


def add_tag(payload: TagCreate) -> Tag:
    tags = load_tags()
    taken = {tag.id for tag in tags}
    tag_id = payload.id or _generate_id("tag", taken)
    if tag_id in taken:
        raise DuplicateTagError(f"Tag {tag_id!r} already exists")
    tag = Tag(
        id=tag_id,
        name=payload.name,
        category=payload.category.value,
        color=payload.color,
    )
    tags.append(tag)
    logger.info("Added tag %s", tag.id)
    return tag


def update_tag(tag_id: str, payload: TagUpdate) -> Tag | None:
    tags = load_tags()
    for index, tag in enumerate(tags):
        if tag.id == tag_id:
            updates = _patch_fields(payload, _NULLABLE_TAG_FIELDS, mode="json")
            updated = tag.model_copy(update=updates)
            tags[index] = updated
            logger.info("Updated tag %s", tag_id)
            return updated
    return None


def delete_tag(tag_id: str) -> bool:
    """Remove a tag and strip its id from every site that references it."""
    tags = load_tags()
    remaining = [tag for tag in tags if tag.id != tag_id]
    if len(remaining) == len(tags):
        return False
    tags[:] = remaining

    sites = load_sites()
    touched = 0
    for index, site in enumerate(sites):
        if tag_id in site.tags:
            sites[index] = site.model_copy(
                update={"tags": [t for t in site.tags if t != tag_id]}
            )
            touched += 1
    logger.info("Deleted tag %s (removed from %d sites)", tag_id, touched)
    return True
