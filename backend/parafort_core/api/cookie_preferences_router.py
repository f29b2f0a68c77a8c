from fastapi import APIRouter, Request, Response

from parafort_core.core.config import get_settings
from parafort_core.preferences.cookie_preferences import (
    COOKIE_MAX_AGE_SECONDS,
    STORAGE_KEY,
    CookiePreferences,
    CookiePreferenceStore,
)
from parafort_core.schemas.cookie_preferences import CookiePreferencesUpdateRequest

router = APIRouter(prefix="/api/cookie-preferences", tags=["cookie-preferences"])


def _store_for(request: Request) -> CookiePreferenceStore:
    return CookiePreferenceStore(dict(request.cookies))


def _write_cookie(response: Response, store: CookiePreferenceStore) -> None:
    response.set_cookie(
        key=STORAGE_KEY,
        value=store.storage[STORAGE_KEY],
        max_age=COOKIE_MAX_AGE_SECONDS,
        samesite="lax",
        secure=get_settings().is_production,
        httponly=False,
    )


@router.get("", response_model=CookiePreferences)
async def get_preferences(request: Request) -> CookiePreferences:
    return _store_for(request).load()


@router.put("", response_model=CookiePreferences)
async def save_preferences(
    payload: CookiePreferencesUpdateRequest, request: Request, response: Response
) -> CookiePreferences:
    store = _store_for(request)
    prefs = store.save(CookiePreferences(**payload.model_dump()))
    _write_cookie(response, store)
    return prefs


@router.post("/accept-all", response_model=CookiePreferences)
async def accept_all(request: Request, response: Response) -> CookiePreferences:
    store = _store_for(request)
    prefs = store.accept_all()
    _write_cookie(response, store)
    return prefs


@router.post("/reject-optional", response_model=CookiePreferences)
async def reject_optional(request: Request, response: Response) -> CookiePreferences:
    store = _store_for(request)
    prefs = store.reject_optional()
    _write_cookie(response, store)
    return prefs
