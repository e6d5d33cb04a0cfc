from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

import httpx

from docgen.client.poller import DEFAULT_INTERVAL_SECONDS, DEFAULT_MAX_ATTEMPTS, JobPoller
from docgen.logger import logger


async def generate_document(
    *,
    base_url: str,
    prompt: str,
    out: Path,
    interval: float,
    max_attempts: int,
    job_id: str | None = None,
    project_id: str | None = None,
) -> int:
    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        poller = JobPoller(
            client,
            interval=interval,
            max_attempts=max_attempts,
            on_update=lambda _html: logger.info("Document content updated"),
        )
        if job_id:
            outcome = await poller.resume(job_id, prompt)
        else:
            extra = {"projectId": project_id} if project_id else {}
            outcome = await poller.generate(prompt, **extra)

    out.write_text(outcome.html, encoding="utf-8")
    logger.info(
        f"Document written to {out}",
        extra={
            "outcome": outcome.status,
            "job_id": outcome.job_id,
            "project_id": outcome.project_id,
            "attempts": outcome.attempts,
        },
    )
    return 0 if outcome.status == "completed" else 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Submit a document generation request and wait for the result.",
    )
    parser.add_argument("--base-url", default="http://localhost:8000", help="API base URL.")
    parser.add_argument("--prompt", default="", help="Generation prompt.")
    parser.add_argument("--job-id", default=None, help="Follow an existing job instead of submitting.")
    parser.add_argument("--project-id", default=None, help="Continue an existing document (follow-up prompt).")
    parser.add_argument("--out", type=Path, default=Path("document.html"), help="Where to write the HTML.")
    parser.add_argument("--interval", type=float, default=DEFAULT_INTERVAL_SECONDS, help="Seconds between polls.")
    parser.add_argument("--max-attempts", type=int, default=DEFAULT_MAX_ATTEMPTS, help="Polls before giving up.")
    return parser


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()
    if not args.prompt and not args.job_id:
        parser.error("either --prompt or --job-id is required")
    sys.exit(asyncio.run(generate_document(
        base_url=args.base_url,
        prompt=args.prompt,
        out=args.out,
        interval=args.interval,
        max_attempts=args.max_attempts,
        job_id=args.job_id,
        project_id=args.project_id,
    )))


if __name__ == "__main__":
    main()
