from __future__ import annotations
import uuid
from datetime import date, datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Date, DateTime, Text, Uuid, CheckConstraint, func
from flagbot.db import Base

class Challenge(Base):
    __tablename__ = "challenges"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(120), unique=True, index=True, nullable=False)
    date_begin: Mapped[date] = mapped_column(Date, nullable=False)
    date_end: Mapped[date] = mapped_column(Date, nullable=False)
    url: Mapped[str] = mapped_column(Text(), nullable=False)
    solutions: Mapped[str] = mapped_column(Text(), nullable=False)  # JSON list of accepted answers
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("date_end >= date_begin", name="ck_challenges_window_order"),
    )
