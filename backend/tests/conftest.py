from __future__ import annotations
import os

# Keep app imports off the production database; tests wire their own engine.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ADMIN_TOKEN", "test-admin-token")

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from flagbot.db import Base
from flagbot.schemas.records import BotConfigRecord, ChallengeRecord, SubmissionRecord, UserRecord
from flagbot.services.sql_store import SqlStore

TODAY = date(2025, 6, 15)


@dataclass
class FakeStore:
    """In-memory Store that records every outbound message."""
    users: dict = field(default_factory=dict)          # (username, user_type) -> UserRecord
    challenges: dict = field(default_factory=dict)     # name -> ChallengeRecord
    submissions: dict = field(default_factory=dict)    # (user_id, challenge_id) -> dict
    secret: str | None = None
    help_text: str = "try: give me my code"
    sent: list = field(default_factory=list)           # (username, user_type, text)
    calls: list = field(default_factory=list)

    def add_challenge(self, name: str, begin: date, end: date, solutions: str = '["flag{x}"]', url: str = "https://ctf.example/x") -> ChallengeRecord:
        ch = ChallengeRecord(id=uuid.uuid4(), name=name, date_begin=begin, date_end=end, url=url, solutions=solutions)
        self.challenges[name] = ch
        return ch

    async def get_code(self, username, user_type):
        self.calls.append("get_code")
        user = self.users.get((username, user_type))
        return user.code if user else None

    async def register_user(self, username, user_type, code):
        self.calls.append("register_user")
        self.users.setdefault((username, user_type), UserRecord(id=uuid.uuid4(), code=code))

    async def get_user(self, username, user_type):
        self.calls.append("get_user")
        return self.users.get((username, user_type))

    async def get_challenge(self, name):
        self.calls.append("get_challenge")
        return self.challenges.get(name)

    async def get_submission(self, username, user_type, challenge_id):
        self.calls.append("get_submission")
        user = self.users.get((username, user_type))
        if user is None:
            return None
        row = self.submissions.get((user.id, challenge_id))
        return SubmissionRecord(hash=row["hash"], is_correct=row["is_correct"]) if row else None

    async def add_or_update_submission(self, user_id, challenge_id, is_correct, hash, timestamp):
        self.calls.append("add_or_update_submission")
        self.submissions[(user_id, challenge_id)] = {"is_correct": is_correct, "hash": hash, "created_at": timestamp}

    async def get_secret(self):
        self.calls.append("get_secret")
        return self.secret

    async def get_config(self):
        self.calls.append("get_config")
        return BotConfigRecord(help_text=self.help_text)

    async def queue_dm(self, username, user_type, text):
        self.calls.append("queue_dm")
        self.sent.append((username, user_type, text))


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def created_at() -> datetime:
    return datetime(2025, 6, 15, 12, 30)


@pytest_asyncio.fixture
async def sql_store():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield SqlStore(async_sessionmaker(engine, expire_on_commit=False))
    await engine.dispose()
