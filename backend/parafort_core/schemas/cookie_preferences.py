from pydantic import BaseModel


class CookiePreferencesUpdateRequest(BaseModel):
    analytics: bool = False
    marketing: bool = False
    preferences: bool = False
