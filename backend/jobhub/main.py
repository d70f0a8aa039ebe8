from __future__ import annotations
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobhub.api import feed, health, jobs, providers, users
from jobhub.core.config import settings
from jobhub.core.errors import JobValidationError, PersistenceError
from jobhub.core.logging import configure_logging
from jobhub.db.init_db import init_db
from jobhub.services.presence import OnlineUsers

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
app.state.online_users = OnlineUsers(settings.online_users_initial)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(JobValidationError)
async def validation_error_handler(_: Request, exc: JobValidationError):
    return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})


@app.exception_handler(PersistenceError)
async def persistence_error_handler(_: Request, exc: PersistenceError):
    logger.error("request failed to persist jobs: %s", exc)
    return JSONResponse(status_code=503, content={"success": False, "error": "Job store is unavailable"})


@app.on_event("startup")
async def on_startup():
    configure_logging()
    init_db()
    app.state.online_users.start()


@app.on_event("shutdown")
async def on_shutdown():
    await app.state.online_users.stop()


app.include_router(health.router, prefix=settings.api_prefix)
app.include_router(jobs.router, prefix=settings.api_prefix)
app.include_router(feed.router, prefix=settings.api_prefix)
app.include_router(providers.router, prefix=settings.api_prefix)
app.include_router(users.router, prefix=settings.api_prefix)
