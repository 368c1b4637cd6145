from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class TurfModel(Base):
    __tablename__ = 'turf'

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    owner_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sport_type: Mapped[str] = mapped_column(String(50), nullable=False, default='football')
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    operating_hours_start: Mapped[int] = mapped_column(Integer, nullable=False, default=6)
    operating_hours_end: Mapped[int] = mapped_column(Integer, nullable=False, default=23)
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    price_1h: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    price_2h: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    price_3h: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    weekday_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    weekend_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    peak_hour_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)


class BlockedSlotModel(Base):
    __tablename__ = 'blocked_slot'

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    turf_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey('turf.id'), nullable=False, index=True
    )
    blocked_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_hour: Mapped[int] = mapped_column(Integer, nullable=False)
    end_hour: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(255), nullable=False, default='')
