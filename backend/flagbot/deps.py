from __future__ import annotations
import secrets
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from flagbot.config import settings
from flagbot.db import SessionLocal
from flagbot.services.incoming import IncomingHandler
from flagbot.services.sql_store import SqlStore

security = HTTPBearer(auto_error=False)

_store = SqlStore(SessionLocal)

def get_store() -> SqlStore:
    return _store

def get_handler(store: SqlStore = Depends(get_store)) -> IncomingHandler:
    return IncomingHandler(store)

async def require_admin(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> None:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing token")
    if not secrets.compare_digest(credentials.credentials.encode(), settings.admin_token.encode()):
        raise HTTPException(status_code=401, detail="Invalid token")
