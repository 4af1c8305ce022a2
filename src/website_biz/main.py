#!/usr/bin/env python3
"""CLI entry point for the website-biz pipeline.

Every command prints its result as JSON on stdout. Logs go to stderr, and a
failing command prints ``ERROR: <message>`` to stderr and exits with 1.

Usage:
    website-biz scrape "dentist" Austin TX --max-results 20
    website-biz enrich leads-dentist-austin-tx.json
    website-biz generate-site leads-dentist-austin-tx.json 0 --style minimal-luxe
    website-biz send leads-dentist-austin-tx.json
    website-biz job-create scrape --payload '{"query": "dentist", "location": "Austin TX"}'
    website-biz worker
    website-biz serve --port 8787

Example:
    # Set the recurring target once, then let cron call daily-run
    website-biz daily-set "hvac" "Springfield IL"
    website-biz daily-run
"""

import argparse
import asyncio
import json
import logging
import signal
import sys
from typing import Any, Optional

from .actions import run_action
from .config import Config, config
from .errors import InvalidPayloadError
from .logging_utils import setup_logging
from .queue import JobQueue
from .stages import PipelineContext
from .worker import JobRunner, Worker

logger = logging.getLogger(__name__)

# CLI commands that map one-to-one onto a synchronous action
ACTION_COMMANDS = {
    "check",
    "status",
    "history",
    "scrape",
    "enrich",
    "generate-site",
    "send",
    "template-list",
    "template-add",
    "template-default",
    "template-delete",
    "daily-set",
    "daily-run",
}


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="website-biz",
        description="Lead scraping, enrichment, site generation and outreach pipeline",
        epilog="""
Examples:
  %(prog)s scrape dentist Austin TX
  %(prog)s job-create enrich --payload '{"leadsFile": "leads-dentist-austin-tx.json"}'
  %(prog)s worker --poll-seconds 5
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")

    sub = parser.add_subparsers(dest="command", required=True, metavar="command")

    sub.add_parser("check", help="Report which environment variables are set")
    sub.add_parser("status", help="Summarize leads, websites, outreach and daily state")
    history = sub.add_parser("history", help="Show lead samples, websites and the outreach log")
    history.add_argument("--limit-per-file", type=int, default=20)

    scrape = sub.add_parser("scrape", help="Scrape new leads from Google Places")
    scrape.add_argument("query", help="Business category, e.g. 'dentist'")
    scrape.add_argument("location", nargs="+", help="Location, e.g. 'Austin TX'")
    scrape.add_argument("--max-results", type=int, default=None,
                        help="Maximum number of new leads (default: SCRAPE_MAX_RESULTS)")

    enrich = sub.add_parser("enrich", help="Extract emails and socials from lead websites")
    enrich.add_argument("leads_file")

    generate = sub.add_parser("generate-site", help="Generate a demo site for one lead")
    generate.add_argument("leads_file")
    generate.add_argument("index", type=int)
    generate.add_argument("--style", default=None,
                          help="neo-glass, minimal-luxe, bold-editorial or ai-premium")
    generate.add_argument("--force", action="store_true", help="Regenerate an existing site")

    send = sub.add_parser("send", help="Send outreach emails for a leads file")
    send.add_argument("leads_file")
    send.add_argument("--daily-limit", type=int, default=None)

    sub.add_parser("template-list", help="List email templates")
    template_add = sub.add_parser("template-add", help="Add an email template")
    template_add.add_argument("name")
    template_add.add_argument("subject")
    template_add.add_argument("body")
    template_default = sub.add_parser("template-default", help="Set the default template")
    template_default.add_argument("name")
    template_delete = sub.add_parser("template-delete", help="Delete a template")
    template_delete.add_argument("name")

    daily_set = sub.add_parser("daily-set", help="Set the daily scrape target")
    daily_set.add_argument("query")
    daily_set.add_argument("location", nargs="+")
    sub.add_parser("daily-run", help="Run the daily pipeline for the stored target")

    job_create = sub.add_parser("job-create", help="Enqueue a background job")
    job_create.add_argument("type")
    job_create.add_argument("--payload", default="{}", help="Job payload as a JSON object")
    job_list = sub.add_parser("job-list", help="List recent jobs, newest first")
    job_list.add_argument("--limit", type=int, default=25)
    job_get = sub.add_parser("job-get", help="Show one job")
    job_get.add_argument("job_id")
    sub.add_parser("process-next", help="Claim and run the next queued job")

    worker = sub.add_parser("worker", help="Process queued jobs until interrupted")
    worker.add_argument("--poll-seconds", type=float, default=None)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    return parser


def action_params(args: argparse.Namespace) -> dict[str, Any]:
    """Translate parsed CLI arguments into action parameters."""
    command = args.command
    if command == "history":
        return {"limitPerFile": args.limit_per_file}
    if command == "scrape":
        return {
            "query": args.query,
            "location": " ".join(args.location),
            "maxResults": args.max_results,
        }
    if command in ("enrich", "send"):
        params: dict[str, Any] = {"leadsFile": args.leads_file}
        if command == "send":
            params["dailyLimit"] = args.daily_limit
        return params
    if command == "generate-site":
        return {
            "leadsFile": args.leads_file,
            "index": args.index,
            "templateStyle": args.style,
            "forceRegenerate": args.force,
        }
    if command == "template-add":
        return {"name": args.name, "subject": args.subject, "body": args.body}
    if command in ("template-default", "template-delete"):
        return {"name": args.name}
    if command == "daily-set":
        return {"query": args.query, "location": " ".join(args.location)}
    return {}


def parse_payload(raw: str) -> dict[str, Any]:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidPayloadError(f"payload is not valid JSON: {e.msg}") from e
    if not isinstance(payload, dict):
        raise InvalidPayloadError("payload must be a JSON object")
    return payload


async def run_worker(ctx: PipelineContext, poll_seconds: float) -> dict[str, Any]:
    """Run the worker loop until SIGINT or SIGTERM."""
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows event loops have no signal handlers
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(stop.set))
    processed = await Worker(JobRunner(ctx), poll_seconds=poll_seconds).run(stop)
    return {"processed": processed}


async def run_command(args: argparse.Namespace, ctx: PipelineContext) -> Any:
    """Execute a parsed command against ``ctx`` and return its result."""
    command = args.command
    if command in ACTION_COMMANDS:
        return await run_action(ctx, command, action_params(args))

    queue = JobQueue(ctx.store, now=ctx.utc_timestamp)
    if command == "job-create":
        job = await queue.create(args.type, parse_payload(args.payload))
        return job.to_dict()
    if command == "job-list":
        return [job.to_dict() for job in await queue.list(args.limit)]
    if command == "job-get":
        job = await queue.get(args.job_id)
        if job is None:
            raise InvalidPayloadError(f"job_not_found:{args.job_id}")
        return job.to_dict()
    if command == "process-next":
        result = await JobRunner(ctx, queue).process_next_job()
        return result.to_dict()
    if command == "worker":
        poll = args.poll_seconds or ctx.config.WORKER_POLL_SECONDS
        return await run_worker(ctx, poll)
    raise InvalidPayloadError(f"unknown command: {command}")


async def _run(args: argparse.Namespace, cfg: Config) -> Any:
    ctx = PipelineContext.from_config(cfg)
    try:
        return await run_command(args, ctx)
    finally:
        await ctx.close()


def serve(cfg: Config, host: Optional[str], port: Optional[int]) -> None:
    """Run the HTTP API under uvicorn."""
    import uvicorn

    from .api import create_app

    uvicorn.run(
        create_app(),
        host=host or cfg.API_HOST,
        port=port or cfg.API_PORT,
        log_config=None,
    )


def main(argv: Optional[list[str]] = None, cfg: Optional[Config] = None) -> int:
    """Main entry point for the CLI.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    parser = create_parser()
    args = parser.parse_args(argv)
    cfg = cfg or config

    level = "DEBUG" if args.debug else ("INFO" if args.verbose else cfg.LOG_LEVEL)
    setup_logging(level=level)

    try:
        if args.command == "serve":
            serve(cfg, args.host, args.port)
            return 0
        result = asyncio.run(_run(args, cfg))
    except KeyboardInterrupt:
        print("ERROR: interrupted", file=sys.stderr)
        return 1
    except Exception as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"ERROR: {str(e) or e.__class__.__name__}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
