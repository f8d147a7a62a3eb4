from __future__ import annotations
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, Text, DateTime, func
from flagbot.db import Base

CONFIG_ROW_ID = 1

class BotConfig(Base):
    __tablename__ = "bot_config"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=CONFIG_ROW_ID)
    help_text: Mapped[str] = mapped_column(Text(), nullable=False, default="")
    secret: Mapped[str | None] = mapped_column(Text(), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
