"""A background job that simulates building a contacts archive."""

from __future__ import annotations

import os
import random
import threading
import time
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Union

STEPS = 100


class Status(IntEnum):
    """Lifecycle of an archive job."""

    WAITING = 1
    RUNNING = 2
    COMPLETE = 3


@dataclass(frozen=True)
class ArchiveView:
    """A snapshot of the archive job's state."""

    status: Status
    percent: str

    def to_dict(self) -> dict[str, Any]:
        return {"status": int(self.status), "progress": self.percent}


class Archiver:
    """Runs the archive job in a worker thread and reports its progress."""

    def __init__(self, file_path: Union[str, os.PathLike], max_delay: float = 0.1) -> None:
        self._file_path = os.fspath(file_path)
        self._max_delay = max_delay
        self._lock = threading.Lock()
        self._status = Status.WAITING
        self._progress = 0

    def run(self) -> threading.Thread:
        """Mark the job running, start it in the background and return its thread."""
        with self._lock:
            self._status = Status.RUNNING
        worker = threading.Thread(target=self._job, name="archiver", daemon=True)
        worker.start()
        return worker

    def _job(self) -> None:
        rng = random.SystemRandom()
        for step in range(STEPS):
            if self._max_delay > 0:
                time.sleep(rng.random() * self._max_delay)
            with self._lock:
                self._progress = step

        with self._lock:
            if self._status == Status.RUNNING:
                self._status = Status.COMPLETE

    def poll(self) -> ArchiveView:
        """Return the current status and progress."""
        with self._lock:
            return ArchiveView(self._status, str(self._progress))

    def file(self) -> str:
        """Return the path of the archive file."""
        return self._file_path

    def reset(self) -> None:
        """Return to the waiting state with no progress."""
        with self._lock:
            self._status = Status.WAITING
            self._progress = 0