import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

AnnouncementType = Literal["general", "promotion", "maintenance", "security", "feature"]
AnnouncementPriority = Literal["low", "normal", "high", "urgent"]
AnnouncementAudience = Literal["all", "clients", "admins"]
AnnouncementStatus = Literal["draft", "scheduled", "published", "paused", "archived"]


class AnnouncementCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    type: AnnouncementType = "general"
    priority: AnnouncementPriority = "normal"
    background_color: str = Field(default="#10b981", max_length=16)
    text_color: str = Field(default="#ffffff", max_length=16)
    icon_type: str = Field(default="info", max_length=32)
    target_audience: AnnouncementAudience = "all"
    status: AnnouncementStatus = "draft"
    publish_date: datetime | None = None
    expiration_date: datetime | None = None
    display_location: str = Field(default="dashboard", max_length=32)
    is_dismissible: bool = True

    @model_validator(mode="after")
    def _window(self) -> "AnnouncementCreateRequest":
        if self.publish_date and self.expiration_date and self.expiration_date <= self.publish_date:
            raise ValueError("expiration_date must be after publish_date")
        return self


class AnnouncementUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = Field(default=None, min_length=1)
    type: AnnouncementType | None = None
    priority: AnnouncementPriority | None = None
    background_color: str | None = Field(default=None, max_length=16)
    text_color: str | None = Field(default=None, max_length=16)
    icon_type: str | None = Field(default=None, max_length=32)
    target_audience: AnnouncementAudience | None = None
    status: AnnouncementStatus | None = None
    publish_date: datetime | None = None
    expiration_date: datetime | None = None
    display_location: str | None = Field(default=None, max_length=32)
    is_dismissible: bool | None = None

    @field_validator(
        "title",
        "content",
        "type",
        "priority",
        "background_color",
        "text_color",
        "icon_type",
        "target_audience",
        "status",
        "display_location",
        "is_dismissible",
    )
    @classmethod
    def _not_null(cls, v: object) -> object:
        # Omit a field to leave it unchanged; only the dates may be cleared.
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class AnnouncementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_by: uuid.UUID
    title: str
    content: str
    type: str
    priority: str
    background_color: str
    text_color: str
    icon_type: str
    target_audience: str
    status: str
    publish_date: datetime | None
    expiration_date: datetime | None
    display_location: str
    is_dismissible: bool
    created_at: datetime
    updated_at: datetime


class AnnouncementListResponse(BaseModel):
    items: list[AnnouncementResponse]
    total: int
    limit: int
    offset: int
