"""Persisted per-browser preferences.

The dashboard remembers the last selected business and whether the sidebar is
collapsed. Both are best effort: a store that is unavailable or was cleared
behaves as if the value was never set.
"""
from __future__ import annotations

from typing import Any

from flask import current_app, session

CURRENT_BUSINESS_KEY = "oe_current_business_id"
SIDEBAR_COLLAPSED_KEY = "oe_sidebar_collapsed"


class PreferenceStore:
    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def clear(self, key: str) -> None:
        raise NotImplementedError


class MemoryPreferenceStore(PreferenceStore):
    def __init__(self, initial: "dict | None" = None):
        self.values: dict = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.values[key] = value

    def clear(self, key: str) -> None:
        self.values.pop(key, None)


class SessionPreferenceStore(PreferenceStore):
    """Preferences kept in the signed session cookie of the current request."""

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return session.get(key, default)
        except RuntimeError:
            # outside of a request context
            return default

    def set(self, key: str, value: Any) -> None:
        try:
            session[key] = value
        except RuntimeError:
            current_app.logger.debug("preference %s not stored: no request context", key)

    def clear(self, key: str) -> None:
        try:
            session.pop(key, None)
        except RuntimeError:
            pass


def cached_business_id(store: PreferenceStore) -> "int | None":
    raw = store.get(CURRENT_BUSINESS_KEY)
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        # garbage written by an older client; drop it
        store.clear(CURRENT_BUSINESS_KEY)
        return None


def sidebar_collapsed(store: PreferenceStore) -> bool:
    return bool(store.get(SIDEBAR_COLLAPSED_KEY, False))


def toggle_sidebar(store: PreferenceStore) -> bool:
    collapsed = not sidebar_collapsed(store)
    store.set(SIDEBAR_COLLAPSED_KEY, collapsed)
    return collapsed
