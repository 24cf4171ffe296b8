"""FastAPI application factory.

Assembles CORS, the pipeline error handler, and all API routers.
This module is the authoritative app object; labelsplit/main.py re-exports it.
"""
from __future__ import annotations

import asyncio
import logging
import shutil
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from labelsplit.api.routes.health import router as health_router
from labelsplit.api.routes.labels import router as labels_router
from labelsplit.api.routes.outputs import router as outputs_router
from labelsplit.core.errors import LabelSplitError
from labelsplit.core.logging import setup_logging
from labelsplit.core.settings import get_settings

logger = logging.getLogger(__name__)

OUTPUT_SWEEP_INTERVAL = 60 * 5  # 5 minutes


def sweep_expired_outputs(output_root: Path, ttl_seconds: int, now: float | None = None) -> int:
    """Delete output directories older than *ttl_seconds*; return how many."""
    if not output_root.is_dir():
        return 0
    now = time.time() if now is None else now
    removed = 0
    for child in output_root.iterdir():
        if not child.is_dir():
            continue
        age = now - child.stat().st_mtime
        if age > ttl_seconds:
            logger.info("Sweeping expired output directory: %s", child.name)
            shutil.rmtree(child, ignore_errors=True)
            removed += 1
    return removed


async def _sweep_loop() -> None:
    """Periodically delete output directories older than the configured TTL."""
    settings = get_settings()
    while True:
        await asyncio.sleep(OUTPUT_SWEEP_INTERVAL)
        sweep_expired_outputs(Path(settings.output_dir), settings.output_ttl_seconds)


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    Path(get_settings().output_dir).mkdir(parents=True, exist_ok=True)
    task = asyncio.create_task(_sweep_loop())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[
        "Content-Disposition",
        "X-Output-Id",
        "X-Pages-Emitted",
        "X-Pages-Skipped",
        "X-Pages-Dropped",
    ],
)


@app.exception_handler(LabelSplitError)
async def labelsplit_error_handler(request: Request, exc: LabelSplitError) -> JSONResponse:
    logger.warning("%s on %s: %s", exc.kind, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(health_router)
app.include_router(labels_router)
app.include_router(outputs_router)
