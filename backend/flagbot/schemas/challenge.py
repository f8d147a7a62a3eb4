from __future__ import annotations
from datetime import date
from uuid import UUID
from pydantic import BaseModel, Field, field_validator, model_validator


class ChallengeUpsert(BaseModel):
    date_begin: date
    date_end: date
    url: str = Field(min_length=1)
    solutions: list[str]

    @field_validator("solutions")
    @classmethod
    def non_empty(cls, v: list[str]):
        if not v:
            raise ValueError("solutions must contain at least one answer")
        return v

    @model_validator(mode="after")
    def window_order(self):
        if self.date_end < self.date_begin:
            raise ValueError("date_end must not precede date_begin")
        return self


class ChallengePublic(BaseModel):
    id: UUID
    name: str
    date_begin: date
    date_end: date
    url: str


class ConfigUpdate(BaseModel):
    help_text: str
    secret: str | None = None
