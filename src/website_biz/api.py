"""FastAPI application exposing the job queue and pipeline actions.

Endpoints:
- GET /health - Liveness check
- POST /api/jobs - Enqueue a job
- GET /api/jobs - List recent jobs
- GET /api/jobs/{job_id} - Fetch one job
- POST|GET /api/worker - Process the next queued job (cron trigger)
- POST /api/run - Run an action synchronously
- GET /api/status - Pipeline status summary

Example:
    uvicorn website_biz.api:app --host 0.0.0.0 --port 8787
"""

import hmac
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Header, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .actions import run_action
from .config import Config, config
from .errors import UnknownActionError
from .models import JobType
from .queue import JobQueue
from .stages import PipelineContext
from .status import get_status
from .worker import JobRunner

logger = logging.getLogger(__name__)


class JobCreateRequest(BaseModel):
    """Body of ``POST /api/jobs``."""

    type: str
    payload: dict[str, Any] = Field(default_factory=dict)


class RunRequest(BaseModel):
    """Body of ``POST /api/run``."""

    action: str
    params: dict[str, Any] = Field(default_factory=dict)


def worker_request_allowed(
    cfg: Config,
    header_token: Optional[str],
    query_token: Optional[str],
    cron_header: Optional[str],
) -> bool:
    """Check whether a worker trigger may run.

    Without WORKER_TOKEN every request is allowed. Otherwise the request must
    carry the token (header or query) or come from the scheduler's cron
    header.
    """
    if not cfg.WORKER_TOKEN or cron_header == "1":
        return True
    supplied = header_token or query_token or ""
    return hmac.compare_digest(supplied.encode(), cfg.WORKER_TOKEN.encode())


def create_app(ctx: Optional[PipelineContext] = None) -> FastAPI:
    """Create the API application.

    Args:
        ctx: Pipeline context to serve. When None, one is built from the
            global configuration at startup and closed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = ctx is None
        app.state.ctx = ctx or PipelineContext.from_config(config)
        app.state.queue = JobQueue(app.state.ctx.store, now=app.state.ctx.utc_timestamp)
        app.state.runner = JobRunner(app.state.ctx, app.state.queue)
        logger.info("API ready (data dir %s)", app.state.ctx.local.data_dir)
        yield
        if owned:
            await app.state.ctx.close()
        logger.info("API shut down")

    app = FastAPI(
        title="website-biz",
        description="Lead generation job queue and pipeline actions",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health_check() -> dict[str, Any]:
        return {"ok": True}

    @app.post("/api/jobs")
    async def create_job(body: JobCreateRequest, request: Request) -> dict[str, Any]:
        if body.type not in JobType.values():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"unknown_job_type:{body.type}",
            )
        job = await request.app.state.queue.create(body.type, body.payload)
        return job.to_dict()

    @app.get("/api/jobs")
    async def list_jobs(
        request: Request, limit: int = Query(25, ge=1, le=500)
    ) -> list[dict[str, Any]]:
        jobs = await request.app.state.queue.list(limit)
        return [job.to_dict() for job in jobs]

    @app.get("/api/jobs/{job_id}")
    async def get_job(job_id: str, request: Request) -> dict[str, Any]:
        job = await request.app.state.queue.get(job_id)
        if job is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="job_not_found")
        return job.to_dict()

    @app.api_route("/api/worker", methods=["GET", "POST"])
    async def process_next(
        request: Request,
        token: Optional[str] = Query(None),
        x_worker_token: Optional[str] = Header(None),
        x_vercel_cron: Optional[str] = Header(None),
    ) -> dict[str, Any]:
        cfg = request.app.state.ctx.config
        if not worker_request_allowed(cfg, x_worker_token, token, x_vercel_cron):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="unauthorized")
        result = await request.app.state.runner.process_next_job()
        return result.to_dict()

    @app.post("/api/run")
    async def run(body: RunRequest, request: Request):
        try:
            result = await run_action(request.app.state.ctx, body.action, body.params)
        except UnknownActionError:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"ok": False, "error": "unknown_action"},
            )
        except Exception as e:
            logger.exception("Action %s failed", body.action)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"ok": False, "error": str(e) or "unknown_error"},
            )
        return {"ok": True, "result": result}

    @app.get("/api/status")
    async def pipeline_status(request: Request) -> dict[str, Any]:
        return await get_status(request.app.state.ctx)

    return app


app = create_app()
