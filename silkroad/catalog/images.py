"""
Placeholder artwork for sites.

External photos are no longer fetched; cards render a gradient derived from
the site's leading tag instead.
"""
from __future__ import annotations

from .models import Site, Tag

_FALLBACK_COLOR = "#7f8c8d"


def placeholder_gradient(site: Site, tag_map: dict[str, Tag]) -> str:
    """Return a CSS linear-gradient keyed on the site's first resolvable tag color."""
    color = _FALLBACK_COLOR
    for tag_id in site.tags:
        tag = tag_map.get(tag_id)
        if tag is not None and tag.color:
            color = tag.color
            break
    return f"linear-gradient(135deg, {color} 0%, #2c3e50 100%)"
