from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Path, Query
from flagbot.config import settings
from flagbot.deps import get_store, require_admin
from flagbot.schemas.message import OutboundPublic
from flagbot.services.sql_store import SqlStore

router = APIRouter(prefix="/outbox", tags=["outbox"], dependencies=[Depends(require_admin)])

@router.get("", response_model=list[OutboundPublic])
async def list_queued(
    limit: int = Query(default=settings.outbox_page_size, ge=1, le=500),
    store: SqlStore = Depends(get_store),
):
    rows = await store.list_outbox(limit)
    return [
        OutboundPublic(
            id=m.id, username=m.username, user_type=m.user_type, text=m.text,
            status=m.status, created_at=m.created_at, sent_at=m.sent_at,
        )
        for m in rows
    ]

@router.post("/{message_id}/sent")
async def mark_sent(message_id: int = Path(...), store: SqlStore = Depends(get_store)):
    if not await store.mark_sent(message_id):
        raise HTTPException(status_code=404, detail="Message not found")
    return {"id": message_id, "status": "sent"}
