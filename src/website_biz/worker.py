"""Job dispatch and the cooperative worker loop."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from . import quota
from .config import parse_bool
from .errors import InvalidPayloadError, UnknownJobTypeError, WebsiteBizError
from .models import Job, JobType
from .queue import JobQueue
from .stages import PipelineContext, enrich_leads, generate_site, scrape_leads, send_outreach

logger = logging.getLogger(__name__)

StageHandler = Callable[[PipelineContext, dict[str, Any]], Awaitable[Any]]


def _require(payload: dict[str, Any], key: str) -> Any:
    value = payload.get(key)
    if value is None or value == "":
        raise InvalidPayloadError(f"payload.{key} is required")
    return value


async def _run_scrape(ctx: PipelineContext, payload: dict[str, Any]) -> Any:
    return await scrape_leads(
        ctx,
        _require(payload, "query"),
        _require(payload, "location"),
        max_results=payload.get("maxResults"),
    )


async def _run_enrich(ctx: PipelineContext, payload: dict[str, Any]) -> Any:
    return await enrich_leads(ctx, _require(payload, "leadsFile"))


async def _run_generate(ctx: PipelineContext, payload: dict[str, Any]) -> Any:
    return await generate_site(
        ctx,
        _require(payload, "leadsFile"),
        _require(payload, "index"),
        template_style=payload.get("templateStyle"),
        force=parse_bool(payload.get("forceRegenerate")),
    )


async def _run_send(ctx: PipelineContext, payload: dict[str, Any]) -> Any:
    return await send_outreach(ctx, _require(payload, "leadsFile"))


async def _run_daily_set(ctx: PipelineContext, payload: dict[str, Any]) -> Any:
    return await quota.set_daily_target(
        ctx, _require(payload, "query"), _require(payload, "location")
    )


async def _run_daily_run(ctx: PipelineContext, payload: dict[str, Any]) -> Any:
    return await quota.run_daily(ctx)


STAGE_HANDLERS: dict[str, StageHandler] = {
    JobType.SCRAPE.value: _run_scrape,
    JobType.ENRICH.value: _run_enrich,
    JobType.GENERATE_SITE.value: _run_generate,
    JobType.SEND.value: _run_send,
    JobType.DAILY_SET.value: _run_daily_set,
    JobType.DAILY_RUN.value: _run_daily_run,
}


@dataclass
class ProcessResult:
    """Outcome of one ``process_next_job`` call.

    Attributes:
        ok: False only when a claimed job failed.
        idle: True when there was nothing to claim.
        job: The job in its final state, None when idle.
    """

    ok: bool
    idle: bool
    job: Optional[Job] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"ok": self.ok, "idle": self.idle}
        if self.job is not None:
            data["job"] = self.job.to_dict()
        return data


class JobRunner:
    """Claims one job at a time and runs the stage its type names.

    Args:
        ctx: Pipeline context the stages run with.
        queue: Queue to claim from; defaults to a queue on ``ctx.store``.
    """

    def __init__(self, ctx: PipelineContext, queue: Optional[JobQueue] = None):
        self.ctx = ctx
        self.queue = queue or JobQueue(ctx.store, now=ctx.utc_timestamp)

    async def dispatch(self, job: Job) -> Any:
        """Run the stage for ``job`` and return its result.

        Raises:
            UnknownJobTypeError: If no stage is registered for the job type.
        """
        handler = STAGE_HANDLERS.get(job.type)
        if handler is None:
            raise UnknownJobTypeError(job.type)
        return await handler(self.ctx, job.payload or {})

    async def process_next_job(self) -> ProcessResult:
        """Claim the oldest queued job, run it and record the outcome."""
        job = await self.queue.claim_next()
        if job is None:
            return ProcessResult(ok=True, idle=True)

        try:
            result = await self.dispatch(job)
        except Exception as e:
            if isinstance(e, WebsiteBizError):
                logger.error("Job %s (%s) failed: %s", job.id, job.type, e,
                             extra={"job_id": job.id})
            else:
                logger.exception("Job %s (%s) failed", job.id, job.type,
                                 extra={"job_id": job.id})
            failed = await self.queue.fail(job.id, str(e) or e.__class__.__name__)
            return ProcessResult(ok=False, idle=False, job=failed or job)

        done = await self.queue.complete(job.id, result)
        logger.info("Job %s (%s) done", job.id, job.type, extra={"job_id": job.id})
        return ProcessResult(ok=True, idle=False, job=done or job)


class Worker:
    """Single-threaded polling loop around a ``JobRunner``.

    Jobs run back to back while the queue has work; an idle queue is polled
    every ``poll_seconds``. The loop ends once ``stop`` is set, after the
    job in flight (if any) has finished.

    Example:
        >>> stop = asyncio.Event()
        >>> await Worker(runner, poll_seconds=3).run(stop)
    """

    def __init__(self, runner: JobRunner, poll_seconds: float = 3.0):
        self.runner = runner
        self.poll_seconds = poll_seconds

    async def run(self, stop: asyncio.Event) -> int:
        """Process jobs until ``stop`` is set.

        Returns:
            Number of jobs processed.
        """
        processed = 0
        logger.info("Worker started (poll every %.1fs)", self.poll_seconds)
        while not stop.is_set():
            result = await self.runner.process_next_job()
            if not result.idle:
                processed += 1
                continue
            try:
                await asyncio.wait_for(stop.wait(), timeout=self.poll_seconds)
            except asyncio.TimeoutError:
                pass
        logger.info("Worker stopped after %d jobs", processed)
        return processed
