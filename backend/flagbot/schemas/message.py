from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, Field


class InboundMessage(BaseModel):
    username: str = Field(min_length=1, max_length=255)
    user_type: str = Field(min_length=1, max_length=32)
    message: str = Field(max_length=4096)
    created_at: datetime | None = None


class OutboundPublic(BaseModel):
    id: int
    username: str
    user_type: str
    text: str
    status: str
    created_at: datetime
    sent_at: datetime | None = None
