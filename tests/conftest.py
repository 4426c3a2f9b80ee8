import json
from pathlib import Path
from typing import Any, Callable

import pytest
from prometheus_client import CollectorRegistry


@pytest.fixture()
def registry() -> "CollectorRegistry":
    """
    fresh Prometheus registry to avoid cross-test state.
    """
    return CollectorRegistry()


def make_record(
    message_id: "str" = "",
    session_id: "str" = "s1",
    timestamp: "str" = "2024-01-01T00:30:00Z",
    model: "str" = "claude-sonnet-4-20250514",
    input_tokens: "int" = 0,
    output_tokens: "int" = 0,
    cache_write: "int" = 0,
    cache_read: "int" = 0,
) -> "dict[str, Any]":
    """
    builds an assistant transcript line as the CLI writes it.
    """
    return {
        "type": "assistant",
        "sessionId": session_id,
        "timestamp": timestamp,
        "cwd": "/work",
        "message": {
            "id": message_id,
            "type": "message",
            "role": "assistant",
            "model": model,
            "usage": {
                "input_tokens": input_tokens,
                "cache_creation_input_tokens": cache_write,
                "cache_read_input_tokens": cache_read,
                "output_tokens": output_tokens,
            },
        },
    }


@pytest.fixture()
def write_transcript(tmp_path: "Path") -> "Callable[..., Path]":
    """
    writes records as a .jsonl file below tmp_path/projects and
    returns its path. Strings are written verbatim.
    """
    root = tmp_path / "projects"

    def _write(name: "str", *records: "dict[str, Any] | str") -> "Path":
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def projects_root(tmp_path: "Path") -> "Path":
    root = tmp_path / "projects"
    root.mkdir(exist_ok=True)
    return root
