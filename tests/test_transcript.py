import json
import os
from datetime import datetime, timezone
from pathlib import Path

import pytest
from conftest import make_record

from ccstatus.errors import (
    ConfigurationError,
    TranscriptDecodeError,
    TranscriptReadError,
)
from ccstatus.models import Usage
from ccstatus.transcript import load_transcripts, parse_events, transcripts_dir


class TestParseEvents:
    def test_parses_usage_bearing_record(self) -> "None":
        record = make_record(
            message_id="msg_1",
            session_id="s1",
            timestamp="2024-05-01T10:15:00.250Z",
            input_tokens=10,
            output_tokens=5,
            cache_write=3,
            cache_read=7,
        )
        events = parse_events([json.dumps(record)], "a.jsonl")

        assert len(events) == 1
        event = events[0]
        assert event.session_id == "s1"
        assert event.timestamp == datetime(
            2024, 5, 1, 10, 15, 0, 250000, tzinfo=timezone.utc
        )
        assert event.message.id == "msg_1"
        assert event.message.model == "claude-sonnet-4-20250514"
        assert event.message.usage == Usage(
            input_tokens=10,
            output_tokens=5,
            cache_write_tokens=3,
            cache_read_tokens=7,
        )

    def test_drops_zero_usage_records(self) -> "None":
        lines = [
            json.dumps(make_record(message_id="empty")),
            json.dumps(make_record(message_id="full", output_tokens=1)),
        ]
        events = parse_events(lines)
        assert [e.message.id for e in events] == ["full"]

    def test_drops_records_without_usage(self) -> "None":
        lines = [
            json.dumps({"type": "summary", "summary": "Refactor", "leafUuid": "x"}),
            json.dumps(
                {
                    "type": "user",
                    "sessionId": "s1",
                    "timestamp": "2024-05-01T10:00:00Z",
                    "message": {"role": "user", "content": "hi"},
                }
            ),
        ]
        assert parse_events(lines) == []

    def test_ignores_unknown_fields(self) -> "None":
        record = make_record(output_tokens=2)
        record["gitBranch"] = "main"
        record["message"]["usage"]["service_tier"] = "standard"
        record["message"]["content"] = [{"type": "text", "text": "ok"}]
        assert len(parse_events([json.dumps(record)])) == 1

    def test_missing_counters_default_to_zero(self) -> "None":
        record = make_record(output_tokens=4)
        del record["message"]["usage"]["cache_read_input_tokens"]
        events = parse_events([json.dumps(record)])
        assert events[0].message.usage == Usage(output_tokens=4)

    def test_skips_blank_lines_and_trailing_whitespace(self) -> "None":
        lines = [
            "",
            json.dumps(make_record(output_tokens=1)),
            "   ",
            json.dumps(make_record(output_tokens=2)),
            "\n",
            "\t \n",
        ]
        assert len(parse_events(lines)) == 2

    def test_tolerates_malformed_last_record(self) -> "None":
        lines = [
            json.dumps(make_record(output_tokens=1)),
            # a partially flushed line from a writer still appending
            json.dumps(make_record(output_tokens=2))[:40],
            "",
        ]
        events = parse_events(lines)
        assert len(events) == 1
        assert events[0].message.usage.output_tokens == 1

    def test_malformed_record_in_middle_raises(self) -> "None":
        lines = [
            json.dumps(make_record(output_tokens=1)),
            "{not json",
            json.dumps(make_record(output_tokens=2)),
        ]
        with pytest.raises(TranscriptDecodeError) as exc_info:
            parse_events(lines, "broken.jsonl")

        assert exc_info.value.path == "broken.jsonl"
        assert exc_info.value.line == 2

    def test_non_object_record_raises(self) -> "None":
        with pytest.raises(TranscriptDecodeError):
            parse_events(["[1, 2, 3]"])

    def test_negative_counter_raises(self) -> "None":
        record = make_record(output_tokens=-1)
        with pytest.raises(TranscriptDecodeError):
            parse_events([json.dumps(record)])

    def test_non_integer_counter_raises(self) -> "None":
        record = make_record(output_tokens=1)
        record["message"]["usage"]["input_tokens"] = "10"
        with pytest.raises(TranscriptDecodeError):
            parse_events([json.dumps(record)])

    def test_invalid_timestamp_raises(self) -> "None":
        record = make_record(output_tokens=1, timestamp="yesterday")
        with pytest.raises(TranscriptDecodeError):
            parse_events([json.dumps(record)])

    def test_timestamp_without_offset_raises(self) -> "None":
        record = make_record(output_tokens=1, timestamp="2024-05-01T10:00:00")
        with pytest.raises(TranscriptDecodeError):
            parse_events([json.dumps(record)])

    def test_missing_timestamp_on_empty_usage_is_ignored(self) -> "None":
        record = make_record()
        del record["timestamp"]
        assert parse_events([json.dumps(record)]) == []


class TestLoadTranscripts:
    def test_loads_jsonl_files_recursively(
        self, write_transcript: "object", projects_root: "Path"
    ) -> "None":
        write_transcript("-work-a/one.jsonl", make_record(output_tokens=1))
        write_transcript("-work-b/nested/two.jsonl", make_record(output_tokens=2))

        transcripts = load_transcripts(projects_root)

        files = sorted(t.file for t in transcripts)
        assert files == [
            os.path.join("-work-a", "one.jsonl"),
            os.path.join("-work-b", "nested", "two.jsonl"),
        ]

    def test_ignores_other_extensions(
        self, write_transcript: "object", projects_root: "Path"
    ) -> "None":
        write_transcript("a.jsonl", make_record(output_tokens=1))
        write_transcript("b.json", make_record(output_tokens=1))
        write_transcript("c.jsonl.bak", make_record(output_tokens=1))

        transcripts = load_transcripts(projects_root)
        assert [t.file for t in transcripts] == ["a.jsonl"]

    def test_excludes_files_without_events(
        self, write_transcript: "object", projects_root: "Path"
    ) -> "None":
        write_transcript("empty.jsonl", make_record())
        write_transcript("full.jsonl", make_record(output_tokens=3))

        transcripts = load_transcripts(projects_root)
        assert [t.file for t in transcripts] == ["full.jsonl"]
        assert all(t.events for t in transcripts)

    def test_keeps_file_order(
        self, write_transcript: "object", projects_root: "Path"
    ) -> "None":
        write_transcript(
            "a.jsonl",
            make_record(message_id="late", timestamp="2024-01-02T00:00:00Z", output_tokens=1),
            make_record(message_id="early", timestamp="2024-01-01T00:00:00Z", output_tokens=1),
        )
        (transcript,) = load_transcripts(projects_root)
        assert [e.message.id for e in transcript.events] == ["late", "early"]

    def test_decode_error_aborts_whole_load(
        self, write_transcript: "object", projects_root: "Path"
    ) -> "None":
        write_transcript("good.jsonl", make_record(output_tokens=1))
        write_transcript(
            "bad.jsonl", "{broken", make_record(output_tokens=1)
        )

        with pytest.raises(TranscriptDecodeError) as exc_info:
            load_transcripts(projects_root)
        assert exc_info.value.path == "bad.jsonl"

    def test_missing_root_raises_read_error(self, tmp_path: "Path") -> "None":
        with pytest.raises(TranscriptReadError):
            load_transcripts(tmp_path / "does-not-exist")

    def test_invalid_utf8_raises_decode_error(self, projects_root: "Path") -> "None":
        (projects_root / "binary.jsonl").write_bytes(b"\xff\xfe\x00garbage\n")
        with pytest.raises(TranscriptDecodeError):
            load_transcripts(projects_root)


class TestTranscriptsDir:
    def test_explicit_directory_wins(self, tmp_path: "Path") -> "None":
        assert transcripts_dir(str(tmp_path)) == tmp_path

    def test_defaults_to_home(
        self, monkeypatch: "pytest.MonkeyPatch", tmp_path: "Path"
    ) -> "None":
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert transcripts_dir() == tmp_path / ".claude" / "projects"

    def test_unresolvable_home_raises(self, monkeypatch: "pytest.MonkeyPatch") -> "None":
        def _fail(cls: "type[Path]") -> "Path":
            raise RuntimeError("Could not determine home directory.")

        monkeypatch.setattr(Path, "home", classmethod(_fail))
        with pytest.raises(ConfigurationError):
            transcripts_dir()
