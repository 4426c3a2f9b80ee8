from datetime import datetime, timedelta, timezone
from typing import Iterable

from ccstatus.dedup import deduplicate_events
from ccstatus.models import DayModel, Transcript, Usage

HOUR = timedelta(hours=1)
DAY = timedelta(days=1)
WEEK = timedelta(days=7)


def sessions(transcripts: "Iterable[Transcript]") -> "list[str]":
    """
    returns the distinct non-empty session ids, sorted.
    """
    found: "set[str]" = set()
    for t in transcripts:
        for e in t.events:
            if e.session_id:
                found.add(e.session_id)
    return sorted(found)


def session_usage(
    transcripts: "Iterable[Transcript]",
    session_id: "str",
) -> "dict[str, Usage]":
    """
    sums usage per model over every deduplicated event of the
    given session. Unknown sessions yield an empty dict.
    """
    usages: "dict[str, Usage]" = {}
    for t in transcripts:
        for e in deduplicate_events(t.events):
            if e.session_id != session_id:
                continue
            model = e.message.model
            usages[model] = usages.get(model, Usage()) + e.message.usage
    return usages


def date_usage(
    transcripts: "Iterable[Transcript]",
    from_: "datetime",
    to: "datetime",
) -> "dict[str, Usage]":
    """
    sums usage per model over events strictly between from_ and to.

    Both bounds are exclusive: an event stamped exactly at from_ or
    at to is dropped. The hour/day/week windows below are built as
    [from_, to), so an event landing exactly on a window start is
    counted by no window at all. Kept as is until the intended
    boundary rule is confirmed.
    """
    usages: "dict[str, Usage]" = {}
    for t in transcripts:
        for e in deduplicate_events(t.events):
            if not from_ < e.timestamp < to:
                continue
            model = e.message.model
            usages[model] = usages.get(model, Usage()) + e.message.usage
    return usages


def usage_by_date(transcripts: "Iterable[Transcript]") -> "dict[DayModel, Usage]":
    """
    sums usage per (day, model) over every deduplicated event.
    """
    usages: "dict[DayModel, Usage]" = {}
    for t in transcripts:
        for e in deduplicate_events(t.events):
            key = DayModel(day=truncate_to_day(e.timestamp), model=e.message.model)
            usages[key] = usages.get(key, Usage()) + e.message.usage
    return usages


def truncate_to_day(ts: "datetime") -> "datetime":
    # no zone conversion: the day is taken in the timestamp's own offset
    return ts.replace(hour=0, minute=0, second=0, microsecond=0)


def truncate_to_hour(ts: "datetime") -> "datetime":
    return ts.replace(minute=0, second=0, microsecond=0)


def _now(now: "datetime | None") -> "datetime":
    return now if now is not None else datetime.now(timezone.utc)


def hour_window(now: "datetime | None" = None) -> "tuple[datetime, datetime]":
    start = truncate_to_hour(_now(now))
    return start, start + HOUR


def day_window(now: "datetime | None" = None) -> "tuple[datetime, datetime]":
    start = truncate_to_day(_now(now))
    return start, start + DAY


def week_window(now: "datetime | None" = None) -> "tuple[datetime, datetime]":
    end = _now(now)
    return end - WEEK, end
