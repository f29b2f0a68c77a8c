from decimal import Decimal

from sqlalchemy import Boolean, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from parafort_core.db.base import Base, TimestampMixin


class Service(Base, TimestampMixin):
    __tablename__ = "services"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    service_type: Mapped[str] = mapped_column(String(32), nullable=False, default="one_time")
    one_time_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    recurring_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    recurring_interval: Mapped[str | None] = mapped_column(String(16), nullable=True)
    expedited_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    questionnaire: Mapped[str] = mapped_column(String(32), nullable=False, default="general")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
