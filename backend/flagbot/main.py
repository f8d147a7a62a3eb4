from __future__ import annotations
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from flagbot.config import settings
from flagbot.logging_setup import configure_logging
from flagbot.routes.system import router as system_router
from flagbot.routes.messages import router as messages_router
from flagbot.routes.outbox import router as outbox_router
from flagbot.routes.admin import router as admin_router
import structlog

configure_logging()
log = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log.info("startup", env=settings.environment, version=settings.app_version, git_sha=settings.git_sha)
    yield
    # Shutdown
    log.info("shutdown")

app = FastAPI(
    title="flagbot API",
    version=settings.app_version,
    lifespan=lifespan,
    description="Command interpreter and scoring for capture-the-flag challenges",
)

app.include_router(system_router)
app.include_router(messages_router)
app.include_router(outbox_router)
app.include_router(admin_router)

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    structlog.contextvars.bind_contextvars(request_id=rid)
    try:
        response: Response = await call_next(request)
    finally:
        structlog.contextvars.clear_contextvars()
    response.headers["X-Request-ID"] = rid
    return response

def run():
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
