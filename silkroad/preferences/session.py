from __future__ import annotations

import logging
from typing import Any, MutableMapping

from pydantic import ValidationError

from ..recommendations.models import PreferenceUpdate, UserPreference

logger = logging.getLogger(__name__)

SESSION_KEY = "preferences"


def get_preferences(session: MutableMapping[str, Any]) -> UserPreference:
    """Return the preferences stored in the session, or an empty record."""
    raw = session.get(SESSION_KEY)
    if not raw:
        return UserPreference()
    try:
        return UserPreference(**raw)
    except (TypeError, ValidationError):
        logger.warning("Discarding unreadable preferences in session", exc_info=True)
        return UserPreference()


def update_preferences(
    session: MutableMapping[str, Any],
    patch: PreferenceUpdate,
) -> UserPreference:
    """Merge *patch* into the stored preferences and persist the result."""
    current = get_preferences(session)
    updates = {}
    for key, value in patch.model_dump(exclude_unset=True).items():
        if value is None:
            # Explicit null clears the field back to its default
            value = UserPreference.model_fields[key].get_default(call_default_factory=True)
        updates[key] = value
    merged = current.model_copy(update=updates)
    session[SESSION_KEY] = merged.model_dump()
    return merged

