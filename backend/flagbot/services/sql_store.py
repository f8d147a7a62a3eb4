from __future__ import annotations
import json
from datetime import date, datetime, timezone as dt_tz
from uuid import UUID
import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from flagbot.models.bot_config import BotConfig, CONFIG_ROW_ID
from flagbot.models.challenge import Challenge
from flagbot.models.outbound import OutboundMessage
from flagbot.models.submission import Submission
from flagbot.models.user import User
from flagbot.schemas.records import BotConfigRecord, ChallengeRecord, SubmissionRecord, UserRecord

log = structlog.get_logger()

DEFAULT_HELP_TEXT = (
    "commands: give me my code | submit <challenge> <hash> | check <challenge> | help <challenge>"
)


def _challenge_record(ch: Challenge) -> ChallengeRecord:
    return ChallengeRecord(
        id=ch.id, name=ch.name, date_begin=ch.date_begin, date_end=ch.date_end,
        url=ch.url, solutions=ch.solutions,
    )


class SqlStore:
    """Store backed by the SQLAlchemy models; every call runs in its own session."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]):
        self._sessionmaker = sessionmaker

    async def _find_user(self, session: AsyncSession, username: str, user_type: str) -> User | None:
        return await session.scalar(
            select(User).where(User.username == username, User.user_type == user_type)
        )

    async def get_code(self, username: str, user_type: str) -> str | None:
        async with self._sessionmaker() as session:
            user = await self._find_user(session, username, user_type)
            return user.code if user else None

    async def register_user(self, username: str, user_type: str, code: str) -> None:
        async with self._sessionmaker() as session:
            session.add(User(username=username, user_type=user_type, code=code))
            try:
                await session.commit()
            except IntegrityError:
                # Lost a race with another first registration; the stored code stands.
                await session.rollback()
                log.info("register_conflict", username=username, user_type=user_type)

    async def get_user(self, username: str, user_type: str) -> UserRecord | None:
        async with self._sessionmaker() as session:
            user = await self._find_user(session, username, user_type)
            return UserRecord(id=user.id, code=user.code) if user else None

    async def get_challenge(self, name: str) -> ChallengeRecord | None:
        async with self._sessionmaker() as session:
            ch = await session.scalar(select(Challenge).where(Challenge.name == name))
            return _challenge_record(ch) if ch else None

    async def get_submission(self, username: str, user_type: str, challenge_id: UUID) -> SubmissionRecord | None:
        async with self._sessionmaker() as session:
            sub = await session.scalar(
                select(Submission)
                .join(User, User.id == Submission.user_id)
                .where(
                    User.username == username,
                    User.user_type == user_type,
                    Submission.challenge_id == challenge_id,
                )
            )
            return SubmissionRecord(hash=sub.hash, is_correct=sub.is_correct) if sub else None

    async def add_or_update_submission(
        self, user_id: UUID, challenge_id: UUID, is_correct: bool, hash: str, timestamp: datetime
    ) -> None:
        # Second pass covers a concurrent insert of the same (user, challenge) row.
        for attempt in range(2):
            async with self._sessionmaker() as session:
                sub = await session.scalar(
                    select(Submission).where(
                        Submission.user_id == user_id, Submission.challenge_id == challenge_id
                    )
                )
                if sub:
                    sub.is_correct = is_correct
                    sub.hash = hash
                    sub.created_at = timestamp
                else:
                    session.add(Submission(
                        user_id=user_id, challenge_id=challenge_id,
                        is_correct=is_correct, hash=hash, created_at=timestamp,
                    ))
                try:
                    await session.commit()
                    return
                except IntegrityError:
                    await session.rollback()
                    if attempt:
                        raise

    async def get_secret(self) -> str | None:
        async with self._sessionmaker() as session:
            cfg = await session.get(BotConfig, CONFIG_ROW_ID)
            return cfg.secret if cfg else None

    async def get_config(self) -> BotConfigRecord:
        async with self._sessionmaker() as session:
            cfg = await session.get(BotConfig, CONFIG_ROW_ID)
            return BotConfigRecord(help_text=cfg.help_text if cfg else DEFAULT_HELP_TEXT)

    async def queue_dm(self, username: str, user_type: str, text: str) -> None:
        async with self._sessionmaker() as session:
            session.add(OutboundMessage(username=username, user_type=user_type, text=text))
            await session.commit()

    # --- admin / delivery helpers, not part of the Store protocol ---

    async def upsert_challenge(
        self, name: str, date_begin: date, date_end: date, url: str, solutions: list[str]
    ) -> ChallengeRecord:
        async with self._sessionmaker() as session:
            ch = await session.scalar(select(Challenge).where(Challenge.name == name))
            if ch is None:
                ch = Challenge(name=name)
                session.add(ch)
            ch.date_begin = date_begin
            ch.date_end = date_end
            ch.url = url
            ch.solutions = json.dumps(solutions)
            await session.commit()
            return _challenge_record(ch)

    async def list_challenges(self) -> list[ChallengeRecord]:
        async with self._sessionmaker() as session:
            rows = (await session.scalars(select(Challenge).order_by(Challenge.date_begin, Challenge.name))).all()
            return [_challenge_record(ch) for ch in rows]

    async def set_config(self, help_text: str, secret: str | None) -> None:
        async with self._sessionmaker() as session:
            cfg = await session.get(BotConfig, CONFIG_ROW_ID)
            if cfg is None:
                cfg = BotConfig(id=CONFIG_ROW_ID)
                session.add(cfg)
            cfg.help_text = help_text
            cfg.secret = secret
            await session.commit()

    async def list_outbox(self, limit: int) -> list[OutboundMessage]:
        async with self._sessionmaker() as session:
            rows = await session.scalars(
                select(OutboundMessage)
                .where(OutboundMessage.status == "queued")
                .order_by(OutboundMessage.id)
                .limit(limit)
            )
            return list(rows.all())

    async def mark_sent(self, message_id: int) -> bool:
        async with self._sessionmaker() as session:
            msg = await session.get(OutboundMessage, message_id)
            if msg is None:
                return False
            msg.status = "sent"
            msg.sent_at = datetime.now(dt_tz.utc)
            await session.commit()
            return True
