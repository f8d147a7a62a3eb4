from __future__ import annotations
from datetime import datetime
from typing import Protocol
from uuid import UUID
from flagbot.schemas.records import BotConfigRecord, ChallengeRecord, SubmissionRecord, UserRecord


class Store(Protocol):
    """
    Persistence and delivery collaborator used by the incoming handler.

    Implementations own atomicity: registering a user must keep the first code
    stored for (username, user_type), and upserting a submission must leave at
    most one row per (user, challenge).
    """

    async def get_code(self, username: str, user_type: str) -> str | None: ...

    async def register_user(self, username: str, user_type: str, code: str) -> None: ...

    async def get_user(self, username: str, user_type: str) -> UserRecord | None: ...

    async def get_challenge(self, name: str) -> ChallengeRecord | None: ...

    async def get_submission(self, username: str, user_type: str, challenge_id: UUID) -> SubmissionRecord | None: ...

    async def add_or_update_submission(
        self, user_id: UUID, challenge_id: UUID, is_correct: bool, hash: str, timestamp: datetime
    ) -> None: ...

    async def get_secret(self) -> str | None: ...

    async def get_config(self) -> BotConfigRecord: ...

    async def queue_dm(self, username: str, user_type: str, text: str) -> None: ...
