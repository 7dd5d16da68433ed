# vidshelf/watcher.py
"""
Filesystem change events.

``EventSource`` is the seam the reloader depends on: ``subscribe(directory)``
sets up the watch (raising SubscriptionError if it can't) and returns an
iterator of ChangeEvent that ends when the source is closed. Production uses
WatchfilesSource; tests feed their own events.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from itertools import chain
from pathlib import Path
from typing import Iterable, Iterator, Optional, Set, Tuple

from watchfiles import Change, watch

from vidshelf.errors import SubscriptionError

logger = logging.getLogger("vidshelf.watcher")


class ChangeKind(str, Enum):
    CREATE = "create"
    WRITE = "write"
    REMOVE = "remove"
    RENAME = "rename"


@dataclass(frozen=True)
class ChangeEvent:
    kind: ChangeKind
    path: str


class EventSource:
    def subscribe(self, directory: Path) -> Iterator[ChangeEvent]:
        raise NotImplementedError

    def close(self) -> None:
        pass


# watchfiles reports renames as deleted + added
_KINDS = {
    Change.added: ChangeKind.CREATE,
    Change.modified: ChangeKind.WRITE,
    Change.deleted: ChangeKind.REMOVE,
}


class WatchfilesSource(EventSource):
    """Native filesystem notifications through watchfiles.

    ``subscribe`` pulls the first batch itself, so the OS-level watch is
    registered before it returns. Batches come back at least every
    ``heartbeat_ms``; empty heartbeat batches are dropped.
    """

    def __init__(
        self,
        debounce_ms: int = 50,
        heartbeat_ms: int = 500,
        force_polling: Optional[bool] = None,
    ) -> None:
        self.debounce_ms = debounce_ms
        self.heartbeat_ms = heartbeat_ms
        self.force_polling = force_polling
        self._stop = threading.Event()

    def subscribe(self, directory: Path) -> Iterator[ChangeEvent]:
        directory = Path(directory)
        if not directory.is_dir():
            raise SubscriptionError(f"not a directory: {directory}")

        batches = watch(
            directory,
            watch_filter=None,
            debounce=self.debounce_ms,
            stop_event=self._stop,
            rust_timeout=self.heartbeat_ms,
            yield_on_timeout=True,
            raise_interrupt=False,
            force_polling=self.force_polling,
            recursive=False,
        )
        try:
            first = next(batches, None)
        except (OSError, RuntimeError) as e:
            raise SubscriptionError(f"cannot watch {directory}: {e}") from e

        logger.debug("watch registered on %s", directory)
        return self._events(first, batches)

    @staticmethod
    def _events(
        first: Optional[Set[Tuple[Change, str]]],
        batches: Iterable[Set[Tuple[Change, str]]],
    ) -> Iterator[ChangeEvent]:
        if first is None:
            return
        for batch in chain([first], batches):
            for change, path in batch:
                kind = _KINDS.get(change)
                if kind is not None:
                    yield ChangeEvent(kind, path)

    def close(self) -> None:
        self._stop.set()
