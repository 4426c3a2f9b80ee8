import asyncio
from datetime import datetime, timezone

import structlog

from ccstatus.cache import TranscriptCache
from ccstatus.errors import TranscriptError
from ccstatus.formatting import (
    PART_SEPARATOR,
    bold,
    format_unavailable,
    format_usage,
)
from ccstatus.metrics import MetricsUpdater
from ccstatus.models import Hook, Usage
from ccstatus.pricing import PricingTable
from ccstatus.usage import (
    date_usage,
    day_window,
    hour_window,
    session_usage,
    week_window,
)

logger = structlog.get_logger()

# reporting windows, in display order
WINDOWS: "tuple[str, ...]" = ("session", "hour", "day", "week")


class UsageReporter:
    """
    UsageReporter builds the usage part of the status line. It
    queries the session, hour, day and week usage concurrently
    against one shared TranscriptCache and formats the results.
    When transcripts can't be loaded, each usage field reads
    "unavailable" instead of failing the whole line.
    """

    def __init__(
        self,
        cache: "TranscriptCache",
        pricing: "PricingTable",
        metrics: "MetricsUpdater | None" = None,
    ) -> "None":
        self._cache = cache
        self._pricing = pricing
        self._metrics = metrics

    async def report(self, hook: "Hook", now: "datetime | None" = None) -> "str":
        if now is None:
            now = datetime.now(timezone.utc)

        # each query runs in its own thread; the cache makes sure
        # the transcripts are read from disk only once
        results = await asyncio.gather(
            *(
                asyncio.to_thread(self._query, window, hook.session_id, now)
                for window in WINDOWS
            ),
            return_exceptions=True,
        )

        parts: "list[str]" = []
        if hook.model_display_name:
            parts.append(bold(hook.model_display_name))

        error: "TranscriptError | None" = None
        for window, result in zip(WINDOWS, results):
            if isinstance(result, TranscriptError):
                error = result
                parts.append(format_unavailable(window))
                continue
            if isinstance(result, BaseException):
                raise result

            parts.append(format_usage(window, result, self._pricing))
            if self._metrics is not None:
                self._metrics.update_usage(window, result, self._pricing)

        if error is not None:
            logger.warning("transcript_load_failed", error=str(error))
            if self._metrics is not None:
                self._metrics.inc_load_error(type(error).__name__)

        if self._metrics is not None and self._cache.loaded:
            self._metrics.observe_load_duration(self._cache.load_seconds)

        return PART_SEPARATOR.join(parts)

    def _query(
        self, window: "str", session_id: "str", now: "datetime"
    ) -> "dict[str, Usage]":
        transcripts = self._cache.get()
        if window == "session":
            return session_usage(transcripts, session_id)
        if window == "hour":
            return date_usage(transcripts, *hour_window(now))
        if window == "day":
            return date_usage(transcripts, *day_window(now))
        if window == "week":
            return date_usage(transcripts, *week_window(now))
        raise ValueError(f"unknown window: {window}")
