"""
Polling watcher for the call recording directory.
"""

import asyncio
import logging
import os
from typing import Awaitable, Callable, Dict, Iterable, Optional, Set

from config.settings import settings
from mindshield.core.logging import mask_recording_name
from mindshield.core.metrics import MetricsCollector

logger = logging.getLogger(__name__)

RecordingCallback = Callable[[str], Awaitable[object]]


class RecordingWatcher:
    """
    Reports new recordings in a directory.

    Files already present when the watcher starts are ignored. A new file is
    reported once, after its size has stayed the same across two polls, so
    recordings still being written are not picked up early.
    """

    def __init__(
        self,
        callback: RecordingCallback,
        directory: Optional[str] = None,
        poll_interval: Optional[float] = None,
        extensions: Optional[Iterable[str]] = None
    ):
        watcher_settings = settings.watcher
        self.callback = callback
        self.directory = directory or watcher_settings.recording_dir
        self.poll_interval = poll_interval if poll_interval is not None else watcher_settings.poll_interval_seconds
        self.extensions = tuple(
            ext.lower() for ext in (extensions if extensions is not None else watcher_settings.file_extensions)
        )

        self._seen: Set[str] = set()
        self._pending_sizes: Dict[str, int] = {}
        self._callback_tasks: Set[asyncio.Task] = set()
        self._watch_task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._watch_task is not None and not self._watch_task.done()

    def _scan(self) -> Dict[str, int]:
        """Map of matching file paths to their current size."""
        files: Dict[str, int] = {}
        try:
            with os.scandir(self.directory) as entries:
                for entry in entries:
                    if not entry.is_file() or not entry.name.lower().endswith(self.extensions):
                        continue
                    try:
                        files[entry.path] = entry.stat().st_size
                    except FileNotFoundError:
                        continue
        except FileNotFoundError:
            logger.warning(f"Recording directory not found: {self.directory}")
        return files

    def take_baseline(self):
        self._seen = set(self._scan())
        self._pending_sizes.clear()
        logger.info(f"Watching {self.directory} ({len(self._seen)} existing recordings ignored)")

    async def poll_once(self) -> int:
        """
        Scan the directory once and dispatch stable new recordings.

        Returns:
            int: Number of recordings dispatched by this poll
        """
        current = self._scan()
        dispatched = 0

        for path in list(self._pending_sizes):
            if path not in current:
                del self._pending_sizes[path]

        for path, size in current.items():
            if path in self._seen:
                continue
            if self._pending_sizes.get(path) == size:
                del self._pending_sizes[path]
                self._seen.add(path)
                self._dispatch(path)
                dispatched += 1
            else:
                self._pending_sizes[path] = size

        return dispatched

    def _dispatch(self, path: str):
        logger.info(f"New recording detected: {mask_recording_name(path)}")
        task = asyncio.create_task(self.callback(path))
        self._callback_tasks.add(task)
        task.add_done_callback(self._on_callback_done)

    def _on_callback_done(self, task: asyncio.Task):
        self._callback_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Recording callback failed: {error}", exc_info=error)

    async def start(self) -> None:
        """Start the background polling loop."""
        if self.is_running:
            logger.warning("Recording watcher already running")
            return

        self.take_baseline()

        async def watch_loop():
            while True:
                try:
                    await asyncio.sleep(self.poll_interval)
                    await self.poll_once()
                except asyncio.CancelledError:
                    logger.info("Recording watcher task cancelled")
                    break
                except Exception as e:
                    logger.error(f"Error in recording watcher task: {e}")

        self._watch_task = asyncio.create_task(watch_loop())
        MetricsCollector.update_system_health('watcher', True)
        logger.info(f"Started recording watcher with {self.poll_interval} second interval")

    async def stop(self) -> None:
        """Stop polling and wait for in-flight callbacks to finish."""
        if self._watch_task and not self._watch_task.done():
            self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass
        self._watch_task = None

        if self._callback_tasks:
            await asyncio.gather(*self._callback_tasks, return_exceptions=True)

        MetricsCollector.update_system_health('watcher', False)
        logger.info("Stopped recording watcher")
