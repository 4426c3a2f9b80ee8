from typing import Iterable, Iterator

from ccstatus.models import Event


def deduplicate_events(events: "Iterable[Event]") -> "Iterator[Event]":
    """
    yields events, suppressing repeats of a message id.

    Streamed responses are flushed to the transcript more than once
    under the same message id, so only the first occurrence counts.
    Events with an empty id are never treated as duplicates. The
    seen set lives only for one call: dedup is scoped to a single
    transcript, never across files.
    """
    seen: "set[str]" = set()
    for event in events:
        message_id = event.message.id
        if not message_id:
            yield event
            continue

        if message_id in seen:
            continue

        seen.add(message_id)
        yield event
