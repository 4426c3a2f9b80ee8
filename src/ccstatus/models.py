from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class Usage:
    """
    Usage is an additive accumulator of the four token
    counters reported for a model response.
    """

    input_tokens: "int" = 0
    output_tokens: "int" = 0
    cache_write_tokens: "int" = 0
    cache_read_tokens: "int" = 0

    @classmethod
    def from_dict(cls, raw: "dict[str, Any]") -> "Usage":
        """
        builds a Usage from the transcript's usage object. Missing
        counters default to zero, unknown keys are ignored.
        """
        return cls(
            input_tokens=raw.get("input_tokens") or 0,
            output_tokens=raw.get("output_tokens") or 0,
            cache_write_tokens=raw.get("cache_creation_input_tokens") or 0,
            cache_read_tokens=raw.get("cache_read_input_tokens") or 0,
        )

    def total(self) -> "int":
        return (
            self.input_tokens
            + self.output_tokens
            + self.cache_write_tokens
            + self.cache_read_tokens
        )

    def is_empty(self) -> "bool":
        return self == Usage()

    def __add__(self, other: "Usage") -> "Usage":
        if not isinstance(other, Usage):
            return NotImplemented
        return Usage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
            cache_write_tokens=self.cache_write_tokens + other.cache_write_tokens,
            cache_read_tokens=self.cache_read_tokens + other.cache_read_tokens,
        )


@dataclass(frozen=True, slots=True)
class EventMessage:
    # may be empty; only non-empty ids are used for deduplication
    id: "str"
    model: "str"
    usage: "Usage"


@dataclass(frozen=True, slots=True)
class Event:
    """
    Event is one usage-bearing line of a transcript file.
    """

    session_id: "str"
    timestamp: "datetime"
    message: "EventMessage"


@dataclass(frozen=True, slots=True)
class Transcript:
    """
    Transcript holds the events parsed from a single .jsonl file,
    in file order.
    """

    # path relative to the transcripts root
    file: "str"
    events: "tuple[Event, ...]"


@dataclass(frozen=True, slots=True)
class DayModel:
    # start of the calendar day, in the event's own timezone
    day: "datetime"
    model: "str"


@dataclass(frozen=True, slots=True)
class Hook:
    """
    Hook is the subset of the status line hook payload
    the reporter needs.
    """

    session_id: "str" = ""
    model_display_name: "str" = ""

    @classmethod
    def from_dict(cls, raw: "dict[str, Any]") -> "Hook":
        model = raw.get("model")
        if not isinstance(model, dict):
            model = {}
        return cls(
            session_id=raw.get("session_id") or "",
            model_display_name=model.get("display_name") or "",
        )
