import asyncio
import json
import sys

import structlog
from prometheus_client import CollectorRegistry

from ccstatus.cache import TranscriptCache
from ccstatus.cli import parse_args
from ccstatus.logging import setup_logging
from ccstatus.metrics import MetricsUpdater
from ccstatus.models import Hook, Transcript
from ccstatus.pricing import load_pricing
from ccstatus.reporter import UsageReporter
from ccstatus.transcript import load_transcripts, transcripts_dir

logger = structlog.get_logger()


def _read_hook(raw: "str") -> "Hook":
    """
    decodes the hook payload. Exits with status 1 on invalid input.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SystemExit(f"invalid hook payload: {exc}")

    if not isinstance(data, dict):
        raise SystemExit("invalid hook payload: not a JSON object")

    return Hook.from_dict(data)


def main(argv: "list[str] | None" = None) -> "None":
    config = parse_args(argv)
    setup_logging(config.log_level)

    hook = _read_hook(sys.stdin.read())
    logger.debug("hook_received", session_id=hook.session_id)

    def _load() -> "list[Transcript]":
        return load_transcripts(transcripts_dir(config.projects_dir))

    cache = TranscriptCache(_load)
    metrics = MetricsUpdater(CollectorRegistry()) if config.metrics_enabled else None

    async def _run() -> "str":
        pricing = await load_pricing(config.pricing_url)
        reporter = UsageReporter(cache, pricing, metrics)
        return await reporter.report(hook)

    print(asyncio.run(_run()))

    if metrics is not None:
        metrics.write_textfile(config.metrics_textfile)
        logger.debug("metrics_written", path=config.metrics_textfile)


if __name__ == "__main__":
    main()
