# vidshelf/reloader.py
"""
Live catalog reloading.

The reloader watches the directory holding the catalog document (editors
often save by writing a new file and renaming it over the old one), collapses
bursts of events with a restartable timer and publishes every successfully
loaded catalog into the shared holder. A failed reload keeps the previous
catalog live.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Optional, Union

from vidshelf.errors import CatalogError, SubscriptionError
from vidshelf.holder import CatalogHolder
from vidshelf.loader import load_catalog
from vidshelf.models import Catalog
from vidshelf.watcher import ChangeEvent, ChangeKind, EventSource

logger = logging.getLogger("vidshelf.reloader")

DEFAULT_DEBOUNCE = 0.4  # seconds
RELOAD_KINDS = frozenset({ChangeKind.WRITE, ChangeKind.CREATE, ChangeKind.RENAME})

Loader = Callable[[Path, Path], Catalog]


class CatalogReloader:
    def __init__(
        self,
        source_path: Union[str, Path],
        static_dir: Union[str, Path],
        holder: CatalogHolder,
        event_source: EventSource,
        delay: float = DEFAULT_DEBOUNCE,
        loader: Loader = load_catalog,
    ) -> None:
        self.source_path = Path(source_path)
        self.static_dir = Path(static_dir)
        self.delay = delay
        self._holder = holder
        self._source = event_source
        self._loader = loader

        # set once the subscription attempt finished, whether or not it worked
        self.ready = threading.Event()

        self._timer: Optional[threading.Timer] = None
        self._timer_lock = threading.Lock()
        self._reload_lock = threading.Lock()
        self._stopped = False
        self._thread: Optional[threading.Thread] = None

    @property
    def watch_directory(self) -> Path:
        return self.source_path.parent

    def is_relevant(self, event: ChangeEvent) -> bool:
        return event.kind in RELOAD_KINDS and Path(event.path).name == self.source_path.name

    # ---------- lifecycle ----------

    def start(self, ready_timeout: float = 5.0) -> None:
        """Run the watch loop on a daemon thread and wait until it is set up."""
        self._thread = threading.Thread(target=self.run, name="vidshelf-reloader", daemon=True)
        self._thread.start()
        if not self.ready.wait(ready_timeout):
            logger.warning("file watcher not ready after %.1fs, continuing", ready_timeout)

    def stop(self, join_timeout: float = 1.0) -> None:
        with self._timer_lock:
            self._stopped = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        self._source.close()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(join_timeout)

    def run(self) -> None:
        directory = self.watch_directory
        try:
            events = self._source.subscribe(directory)
        except SubscriptionError as e:
            logger.error("cannot watch %s, catalog reloading disabled: %s", directory, e)
            return
        finally:
            self.ready.set()

        logger.info("watching %s for changes to %s", directory, self.source_path.name)
        try:
            for event in events:
                if self.is_relevant(event):
                    self._schedule()
        except Exception:
            logger.exception("file watcher failed, catalog reloading stopped")
            return
        logger.info("file watcher closed")

    # ---------- debounce + reload ----------

    def _schedule(self) -> None:
        with self._timer_lock:
            if self._stopped:
                return
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self.reload)
            self._timer.daemon = True
            self._timer.start()

    def reload(self) -> bool:
        """Load the document again and publish it; False if the load failed."""
        with self._reload_lock:
            try:
                catalog = self._loader(self.source_path, self.static_dir)
            except CatalogError as e:
                logger.error("dynamic reload of %s failed, keeping previous catalog: %s", self.source_path, e)
                return False
            self._holder.store(catalog)
        logger.info("dynamic reload: updated videos list with %d validated video(s)", len(catalog))
        return True
