"""Cookie consent preferences over a plain string key-value storage.

Storage is anything with ``get`` and ``__setitem__`` (a dict, a cookie jar
copy, a Redis-backed mapping). Essential cookies cannot be turned off.
"""

from __future__ import annotations

import json
import logging
from collections.abc import MutableMapping

from pydantic import BaseModel, ValidationError, field_validator

logger = logging.getLogger(__name__)

STORAGE_KEY = "cookiePreferences"
COOKIE_MAX_AGE_SECONDS = 365 * 24 * 60 * 60


class CookiePreferences(BaseModel):
    essential: bool = True
    analytics: bool = False
    marketing: bool = False
    preferences: bool = False

    @field_validator("essential", mode="before")
    @classmethod
    def _essential_always_on(cls, v: object) -> bool:
        return True


DEFAULT_PREFERENCES = CookiePreferences()
ALL_ACCEPTED = CookiePreferences(analytics=True, marketing=True, preferences=True)


class CookiePreferenceStore:
    def __init__(self, storage: MutableMapping[str, str]) -> None:
        self.storage = storage

    def load(self) -> CookiePreferences:
        raw = self.storage.get(STORAGE_KEY)
        if not raw:
            return DEFAULT_PREFERENCES.model_copy()
        try:
            return CookiePreferences.model_validate(json.loads(raw))
        except (ValueError, ValidationError):
            logger.warning("cookie_preferences_corrupt resetting to defaults")
            return DEFAULT_PREFERENCES.model_copy()

    def save(self, prefs: CookiePreferences) -> CookiePreferences:
        prefs = CookiePreferences.model_validate(prefs.model_dump())
        self.storage[STORAGE_KEY] = prefs.model_dump_json()
        return prefs

    def accept_all(self) -> CookiePreferences:
        return self.save(ALL_ACCEPTED)

    def reject_optional(self) -> CookiePreferences:
        return self.save(DEFAULT_PREFERENCES)
