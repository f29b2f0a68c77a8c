import json

from parafort_core.preferences.cookie_preferences import (
    STORAGE_KEY,
    CookiePreferences,
    CookiePreferenceStore,
)


def test_missing_value_loads_defaults():
    prefs = CookiePreferenceStore({}).load()

    assert prefs == CookiePreferences(essential=True, analytics=False, marketing=False, preferences=False)


def test_reject_optional_persists_essential_only():
    storage: dict[str, str] = {}
    store = CookiePreferenceStore(storage)
    store.accept_all()

    prefs = store.reject_optional()

    assert prefs.model_dump() == {"essential": True, "analytics": False, "marketing": False, "preferences": False}
    assert json.loads(storage[STORAGE_KEY]) == {
        "essential": True,
        "analytics": False,
        "marketing": False,
        "preferences": False,
    }


def test_accept_all_enables_every_category():
    storage: dict[str, str] = {}

    CookiePreferenceStore(storage).accept_all()

    assert CookiePreferenceStore(storage).load() == CookiePreferences(analytics=True, marketing=True, preferences=True)


def test_corrupt_value_falls_back_to_defaults():
    for raw in ("{not json", "42", '{"analytics": "maybe"}'):
        prefs = CookiePreferenceStore({STORAGE_KEY: raw}).load()
        assert prefs.analytics is False
        assert prefs.essential is True


def test_essential_cannot_be_disabled():
    storage: dict[str, str] = {}
    store = CookiePreferenceStore(storage)

    saved = store.save(CookiePreferences(essential=False, analytics=True))

    assert saved.essential is True
    assert json.loads(storage[STORAGE_KEY])["essential"] is True
    assert CookiePreferenceStore({STORAGE_KEY: '{"essential": false}'}).load().essential is True
