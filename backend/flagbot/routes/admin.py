from __future__ import annotations
import re
from fastapi import APIRouter, Depends, HTTPException, Path
from flagbot.deps import get_store, require_admin
from flagbot.schemas.challenge import ChallengePublic, ChallengeUpsert, ConfigUpdate
from flagbot.services.intents import CHALLENGE_NAME
from flagbot.services.sql_store import SqlStore

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

_NAME_RE = re.compile(rf"\A{CHALLENGE_NAME}\Z")

@router.put("/challenges/{name}", response_model=ChallengePublic)
async def put_challenge(
    payload: ChallengeUpsert,
    name: str = Path(..., max_length=120),
    store: SqlStore = Depends(get_store),
):
    # users can only address names the command patterns accept
    if not _NAME_RE.match(name):
        raise HTTPException(status_code=422, detail="Challenge name may only contain letters, digits, '-' and '_'")
    ch = await store.upsert_challenge(name, payload.date_begin, payload.date_end, payload.url, payload.solutions)
    return ChallengePublic(id=ch.id, name=ch.name, date_begin=ch.date_begin, date_end=ch.date_end, url=ch.url)

@router.get("/challenges", response_model=list[ChallengePublic])
async def list_challenges(store: SqlStore = Depends(get_store)):
    return [
        ChallengePublic(id=ch.id, name=ch.name, date_begin=ch.date_begin, date_end=ch.date_end, url=ch.url)
        for ch in await store.list_challenges()
    ]

@router.put("/config")
async def put_config(payload: ConfigUpdate, store: SqlStore = Depends(get_store)):
    await store.set_config(payload.help_text, payload.secret)
    return {"status": "ok"}
