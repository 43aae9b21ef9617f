"""File watching for Canopy.

Watches the site folder and feeds changed paths to ``SiteBuilder.rebuild``.
Events are collected and debounced; rebuilds run one at a time.

Key classes:
- SiteWatcher: Owns the watchdog observer and the debounce timer.
- _ChangeHandler: File system event handler collecting changed paths.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .build import BuildError, BuildResult, SiteBuilder

logger = logging.getLogger(__name__)


class SiteWatcher:
    """Rebuilds a site incrementally whenever its sources change.

    Attributes:
        builder: SiteBuilder holding the content tree.
        debounce_seconds: Quiet period before a batch of changes is rebuilt.
        on_rebuild: Optional callback receiving each BuildResult.
    """

    def __init__(
        self,
        builder: SiteBuilder,
        debounce_seconds: float = 0.2,
        on_rebuild: Callable[[BuildResult], None] | None = None,
    ):
        self.builder = builder
        self.debounce_seconds = debounce_seconds
        self.on_rebuild = on_rebuild
        self._pending: set[Path] = set()
        self._pending_lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._observer: Observer | None = None

    def start(self) -> None:
        """Start watching the site folder in a background thread."""
        handler = _ChangeHandler(self)
        observer = Observer()
        observer.schedule(handler, str(self.builder.site_dir), recursive=True)
        observer.start()
        self._observer = observer
        logger.info("Watching %s for changes", self.builder.site_dir)

    def run_forever(self) -> None:  # pragma: no cover - integration path
        self.start()
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            self.stop()

    def stop(self) -> None:
        if self._timer:
            self._timer.cancel()
        if self._observer:
            self._observer.stop()
            self._observer.join()

    def notify(self, path: Path) -> None:
        """Record a changed path and (re)arm the debounce timer."""
        with self._pending_lock:
            self._pending.add(path)
            if self._timer:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_seconds, self.flush)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> BuildResult | None:
        """Rebuild with every pending path.

        Returns:
            The BuildResult, or None when nothing was pending or the build failed.
        """
        with self._pending_lock:
            paths, self._pending = self._pending, set()
        if not paths:
            return None
        logger.info("Change detected in %d path(s); rebuilding...", len(paths))
        try:
            result = self.builder.rebuild(paths)
        except BuildError as exc:
            logger.error("Rebuild failed: %s", exc)
            return None
        if self.on_rebuild:
            self.on_rebuild(result)
        return result


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, watcher: SiteWatcher):
        super().__init__()
        self.watcher = watcher

    def on_any_event(self, event):
        if event.event_type in ("opened", "closed", "closed_no_write"):
            return
        paths = [event.src_path]
        dest_path = getattr(event, "dest_path", "")
        if dest_path:
            paths.append(dest_path)
        output_dir = self.watcher.builder.output_dir
        for raw in paths:
            path = Path(raw)
            try:
                path.relative_to(output_dir)
                continue
            except ValueError:
                pass
            self.watcher.notify(path)
