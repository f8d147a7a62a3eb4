"""Typed records exchanged between the incoming handler and a Store."""
from __future__ import annotations
from datetime import date
from uuid import UUID
from pydantic import BaseModel, ConfigDict


class UserRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    code: str


class ChallengeRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    name: str
    date_begin: date
    date_end: date
    url: str
    solutions: str  # serialized JSON list, parsed only when scoring


class SubmissionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    hash: str
    is_correct: bool


class BotConfigRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    help_text: str
