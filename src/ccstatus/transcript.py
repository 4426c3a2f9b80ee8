import json
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

import structlog

from ccstatus.errors import (
    ConfigurationError,
    TranscriptDecodeError,
    TranscriptReadError,
)
from ccstatus.models import Event, EventMessage, Transcript, Usage

logger = structlog.get_logger()

TRANSCRIPT_EXTENSION = ".jsonl"

# keys of the usage object, in the order they are validated
_USAGE_KEYS: "tuple[str, ...]" = (
    "input_tokens",
    "cache_creation_input_tokens",
    "cache_read_input_tokens",
    "output_tokens",
)


def transcripts_dir(projects_dir: "str" = "") -> "Path":
    """
    resolves the directory holding the transcript files. An explicit
    projects_dir wins, otherwise <home>/.claude/projects is used.
    """
    if projects_dir:
        return Path(projects_dir).expanduser()

    try:
        home = Path.home()
    except (RuntimeError, KeyError) as exc:
        raise ConfigurationError("cannot resolve user home directory") from exc

    # expanduser() leaves "~" untouched on interpreters that don't raise
    if str(home) == "~":
        raise ConfigurationError("cannot resolve user home directory")

    return home / ".claude" / "projects"


def load_transcripts(root: "Path") -> "list[Transcript]":
    """
    walks root recursively and parses every .jsonl file below it.
    Files without any usage-bearing event are left out. The first
    failure aborts the whole load.
    """
    started = time.monotonic()
    transcripts: "list[Transcript]" = []

    for path in _transcript_files(root):
        rel = os.path.relpath(path, root)
        try:
            with open(path, encoding="utf-8") as f:
                events = parse_events(f, rel)
        except OSError as exc:
            raise TranscriptReadError("read transcript", rel) from exc
        except UnicodeDecodeError as exc:
            raise TranscriptDecodeError("transcript is not valid UTF-8", rel) from exc

        logger.debug("transcript_parsed", file=rel, events=len(events))
        if events:
            transcripts.append(Transcript(file=rel, events=tuple(events)))

    logger.debug(
        "transcripts_loaded",
        root=str(root),
        count=len(transcripts),
        duration_seconds=round(time.monotonic() - started, 3),
    )
    return transcripts


def _transcript_files(root: "Path") -> "list[str]":
    """
    lists every .jsonl file below root, sorted so loads are
    deterministic across filesystems.
    """

    def _fail(exc: "OSError") -> "None":
        raise exc

    files: "list[str]" = []
    try:
        for dirpath, dirnames, filenames in os.walk(root, onerror=_fail):
            dirnames.sort()
            for name in sorted(filenames):
                if os.path.splitext(name)[1] == TRANSCRIPT_EXTENSION:
                    files.append(os.path.join(dirpath, name))
    except OSError as exc:
        raise TranscriptReadError("walk transcripts directory", str(root)) from exc

    return files


def parse_events(lines: "Iterable[str]", file: "str" = "") -> "list[Event]":
    """
    parses newline-delimited JSON records into events, dropping
    records that carry no usage.

    A record that fails to decode is tolerated only when nothing but
    whitespace follows it: the writer may still be appending to the
    file. A malformed record followed by another one is an error.
    """
    events: "list[Event]" = []
    # line number and error of a record that failed to decode
    pending: "tuple[int, json.JSONDecodeError] | None" = None

    for lineno, line in enumerate(lines, start=1):
        if not line.strip():
            continue

        if pending is not None:
            raise TranscriptDecodeError(
                "malformed record", file, pending[0]
            ) from pending[1]

        try:
            raw = json.loads(line)
        except json.JSONDecodeError as exc:
            pending = (lineno, exc)
            continue

        event = _parse_event(raw, file, lineno)
        if event is not None:
            events.append(event)

    if pending is not None:
        logger.debug("transcript_truncated", file=file, line=pending[0])

    return events


def _parse_event(raw: "Any", file: "str", lineno: "int") -> "Event | None":
    """
    converts one decoded record into an Event. Returns None for
    records without usage (user prompts, summaries, tool results).
    """
    if not isinstance(raw, dict):
        raise TranscriptDecodeError("record is not a JSON object", file, lineno)

    message = raw.get("message")
    if not isinstance(message, dict):
        return None

    raw_usage = message.get("usage")
    if not isinstance(raw_usage, dict):
        return None

    for key in _USAGE_KEYS:
        value = raw_usage.get(key)
        if value is None:
            continue
        # bool is an int subclass, but never a token count
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise TranscriptDecodeError(f"invalid usage counter {key!r}", file, lineno)

    usage = Usage.from_dict(raw_usage)
    if usage.is_empty():
        return None

    return Event(
        session_id=_string(raw, "sessionId", file, lineno),
        timestamp=_timestamp(raw.get("timestamp"), file, lineno),
        message=EventMessage(
            id=_string(message, "id", file, lineno),
            model=_string(message, "model", file, lineno),
            usage=usage,
        ),
    )


def _string(raw: "dict[str, Any]", key: "str", file: "str", lineno: "int") -> "str":
    value = raw.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TranscriptDecodeError(f"field {key!r} is not a string", file, lineno)
    return value


def _timestamp(value: "Any", file: "str", lineno: "int") -> "datetime":
    if not isinstance(value, str):
        raise TranscriptDecodeError("missing timestamp", file, lineno)

    try:
        ts = datetime.fromisoformat(value)
    except ValueError as exc:
        raise TranscriptDecodeError(
            f"invalid timestamp {value!r}", file, lineno
        ) from exc

    # timestamps must carry an offset, otherwise windows can't be compared
    if ts.tzinfo is None:
        raise TranscriptDecodeError(
            f"timestamp {value!r} has no timezone", file, lineno
        )

    return ts
