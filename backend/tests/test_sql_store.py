from __future__ import annotations
import json
from datetime import date, datetime, timedelta
import pytest
from sqlalchemy import Text
from flagbot.models.submission import Submission
from flagbot.services.incoming import IncomingHandler
from flagbot.services.sql_store import DEFAULT_HELP_TEXT
from flagbot.services.submission_code import answer_hash


@pytest.mark.asyncio
async def test_register_keeps_first_code(sql_store):
    assert await sql_store.get_code("bob", "twitter") is None
    await sql_store.register_user("bob", "twitter", "first")
    await sql_store.register_user("bob", "twitter", "second")
    assert await sql_store.get_code("bob", "twitter") == "first"
    user = await sql_store.get_user("bob", "twitter")
    assert user is not None and user.code == "first"
    assert await sql_store.get_user("bob", "slack") is None


@pytest.mark.asyncio
async def test_challenge_round_trip(sql_store):
    assert await sql_store.get_challenge("ctf1") is None
    created = await sql_store.upsert_challenge("ctf1", date(2025, 1, 1), date(2025, 1, 8), "https://x/1", ["a", "b"])
    fetched = await sql_store.get_challenge("ctf1")
    assert fetched == created
    assert json.loads(fetched.solutions) == ["a", "b"]

    updated = await sql_store.upsert_challenge("ctf1", date(2025, 1, 1), date(2025, 1, 9), "https://x/1b", ["c"])
    assert updated.id == created.id
    assert updated.date_end == date(2025, 1, 9)
    assert [c.name for c in await sql_store.list_challenges()] == ["ctf1"]


@pytest.mark.asyncio
async def test_submission_upsert_keeps_one_row(sql_store):
    ch = await sql_store.upsert_challenge("ctf1", date(2025, 1, 1), date(2025, 1, 8), "https://x/1", ["a"])
    await sql_store.register_user("bob", "twitter", "k")
    user = await sql_store.get_user("bob", "twitter")
    t0 = datetime(2025, 1, 2, 10, 0)

    assert await sql_store.get_submission("bob", "twitter", ch.id) is None
    await sql_store.add_or_update_submission(user.id, ch.id, True, "aaa", t0)
    await sql_store.add_or_update_submission(user.id, ch.id, False, "bbb", t0 + timedelta(hours=1))

    sub = await sql_store.get_submission("bob", "twitter", ch.id)
    assert sub.hash == "bbb" and sub.is_correct is False
    assert await sql_store.get_submission("bob", "slack", ch.id) is None


@pytest.mark.asyncio
async def test_config_and_secret(sql_store):
    assert await sql_store.get_secret() is None
    assert (await sql_store.get_config()).help_text == DEFAULT_HELP_TEXT

    await sql_store.set_config("ask me anything", "psst")
    assert await sql_store.get_secret() == "psst"
    assert (await sql_store.get_config()).help_text == "ask me anything"

    await sql_store.set_config("ask me anything", None)
    assert await sql_store.get_secret() is None


@pytest.mark.asyncio
async def test_outbox_queue_and_ack(sql_store):
    await sql_store.queue_dm("bob", "twitter", "one")
    await sql_store.queue_dm("amy", "slack", "two")

    queued = await sql_store.list_outbox(10)
    assert [(m.username, m.text, m.status) for m in queued] == [("bob", "one", "queued"), ("amy", "two", "queued")]

    assert await sql_store.mark_sent(queued[0].id) is True
    assert await sql_store.mark_sent(999999) is False
    assert [m.text for m in await sql_store.list_outbox(10)] == ["two"]
    assert [m.text for m in await sql_store.list_outbox(1)] == ["two"]


@pytest.mark.asyncio
async def test_handler_against_sql_store(sql_store):
    today = date(2025, 3, 10)
    await sql_store.upsert_challenge("ctf1", today - timedelta(days=1), today + timedelta(days=1), "https://x/1", ["flag"])
    h = IncomingHandler(sql_store, code_factory=lambda: "beef", today=lambda: today)
    at = datetime(2025, 3, 10, 9, 0)

    await h.handle("bob", "twitter", "give me my code", at)
    await h.handle("bob", "twitter", f"submit ctf1 {answer_hash('flag', 'beef')}", at)

    ch = await sql_store.get_challenge("ctf1")
    sub = await sql_store.get_submission("bob", "twitter", ch.id)
    assert sub.is_correct is True
    assert [m.text for m in await sql_store.list_outbox(10)] == [
        "your submission code is beef",
        "ctf1 answer received. challenge ends 2025-03-11",
    ]


def test_submission_hash_column_is_unbounded():
    col = Submission.__table__.c.hash
    assert isinstance(col.type, Text)
    assert getattr(col.type, "length", None) is None


@pytest.mark.asyncio
async def test_long_hash_is_stored_whole(sql_store):
    ch = await sql_store.upsert_challenge("ctf1", date(2025, 1, 1), date(2025, 1, 8), "https://x/1", ["a"])
    await sql_store.register_user("bob", "twitter", "k")
    user = await sql_store.get_user("bob", "twitter")
    long_hash = "a1" * 300

    await sql_store.add_or_update_submission(user.id, ch.id, False, long_hash, datetime(2025, 1, 2))
    assert (await sql_store.get_submission("bob", "twitter", ch.id)).hash == long_hash
