import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from parafort_core.db.base import Base, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin

PRIORITY_RANK: dict[str, int] = {"urgent": 0, "high": 1, "normal": 2, "low": 3}


class Announcement(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "announcements"

    created_by: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False, default="general")
    priority: Mapped[str] = mapped_column(String(16), nullable=False, default="normal")

    background_color: Mapped[str] = mapped_column(String(16), nullable=False, default="#10b981")
    text_color: Mapped[str] = mapped_column(String(16), nullable=False, default="#ffffff")
    icon_type: Mapped[str] = mapped_column(String(32), nullable=False, default="info")

    target_audience: Mapped[str] = mapped_column(String(16), nullable=False, default="all")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="draft")
    publish_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expiration_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    display_location: Mapped[str] = mapped_column(String(32), nullable=False, default="dashboard")
    is_dismissible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
