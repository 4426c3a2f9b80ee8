import threading
import time
from typing import Callable, Sequence

import structlog

from ccstatus.errors import TranscriptError
from ccstatus.models import Transcript

logger = structlog.get_logger()


class TranscriptCache:
    """
    TranscriptCache: Is a thread-safe, load-once holder for the
    parsed transcripts.

    The first call to get() runs the loader while holding the lock,
    so concurrent first callers block until it finishes. Every later
    call returns the same snapshot without touching the disk. A
    TranscriptError is cached as well and re-raised to every
    caller; any other exception leaves the cache unloaded.
    """

    def __init__(self, loader: "Callable[[], Sequence[Transcript]]") -> "None":
        self._loader = loader
        self._lock: "threading.Lock" = threading.Lock()
        self._loaded: "bool" = False
        self._transcripts: "tuple[Transcript, ...]" = ()
        self._error: "TranscriptError | None" = None
        self._load_seconds: "float" = 0.0

    @property
    def loaded(self) -> "bool":
        return self._loaded

    @property
    def load_seconds(self) -> "float":
        """
        wall time spent in the loader, 0 until the first get().
        """
        return self._load_seconds

    def get(self) -> "tuple[Transcript, ...]":
        """
        returns the transcripts snapshot, loading it on first use.
        Raises the loader's TranscriptError on every call if the
        load failed.
        """
        # fast path: check without lock once the load has completed
        if not self._loaded:
            with self._lock:
                # re-check after acquiring lock (another thread may have loaded)
                if not self._loaded:
                    self._load()

        if self._error is not None:
            raise self._error

        return self._transcripts

    def _load(self) -> "None":
        started = time.monotonic()
        try:
            self._transcripts = tuple(self._loader())
        except TranscriptError as exc:
            logger.debug("transcript_cache_load_failed", error=str(exc))
            self._error = exc
        finally:
            self._load_seconds = time.monotonic() - started
        self._loaded = True
