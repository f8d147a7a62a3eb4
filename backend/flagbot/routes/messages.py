from __future__ import annotations
from datetime import datetime, timezone as dt_tz
import structlog
from fastapi import APIRouter, Depends
from flagbot.deps import get_handler
from flagbot.schemas.message import InboundMessage
from flagbot.services.incoming import IncomingHandler

router = APIRouter(tags=["messages"])
log = structlog.get_logger()

@router.post("/messages", status_code=202)
async def receive_message(payload: InboundMessage, handler: IncomingHandler = Depends(get_handler)):
    created_at = payload.created_at or datetime.now(dt_tz.utc)
    try:
        await handler.handle(payload.username, payload.user_type, payload.message, created_at)
    except Exception:
        log.exception("handle_failed", username=payload.username, user_type=payload.user_type)
        raise
    return {"status": "accepted"}
