"""Task ORM — check-in / check-out task for one apartment on one day.

Invariants:
    - checkin_time / checkout_time, when set, are "HH:00" strings (enforced by the dispatcher)
    - updated_by holds the Telegram id of the last editor

Design Decisions:
    - Natural string primary key ("2025-03-15_562_checkin"): the provider quotes it verbatim
"""

from datetime import datetime, timezone

from sqlalchemy import String, Float, Integer, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from taskpilot.core.domain_types import TaskStatus
from taskpilot.db.base import Base


class Task(Base):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    reservation_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    apartment_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TaskStatus.PENDING.value,
    )
    guest_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    checkin_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    checkout_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    sum_to_collect: Mapped[float | None] = mapped_column(Float, nullable=True)
    keys_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
