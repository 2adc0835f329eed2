"""
Thread-backed periodic job runner.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .spi.scheduler import PeriodicJob

logger = logging.getLogger(__name__)


@dataclass
class _Running:
    job: PeriodicJob
    stop: threading.Event
    thread: threading.Thread


class ThreadScheduler:
    """
    One daemon thread per named job. The callback receives the job name,
    runs on the job's thread, and never overlaps with itself.
    """

    def __init__(self, seconds_per_minute: float = 60.0) -> None:
        self._seconds_per_minute = seconds_per_minute
        self._jobs: Dict[str, _Running] = {}
        self._lock = threading.Lock()

    def create(self, name: str, period_minutes: float, callback: Callable[[str], None]) -> PeriodicJob:
        if period_minutes <= 0:
            raise ValueError("period_minutes must be positive.")
        job = PeriodicJob(name=name, period_minutes=period_minutes)
        stop = threading.Event()
        thread = threading.Thread(
            target=self._loop,
            args=(job, stop, callback),
            name=f"job-{name}",
            daemon=True,
        )
        with self._lock:
            previous = self._jobs.pop(name, None)
            self._jobs[name] = _Running(job=job, stop=stop, thread=thread)
        if previous is not None:
            previous.stop.set()
        thread.start()
        logger.info("Scheduled job %s every %s min", name, period_minutes)
        return job

    def get(self, name: str) -> Optional[PeriodicJob]:
        with self._lock:
            running = self._jobs.get(name)
        return running.job if running is not None else None

    def clear(self, name: str) -> bool:
        with self._lock:
            running = self._jobs.pop(name, None)
        if running is None:
            return False
        running.stop.set()
        return True

    def shutdown(self) -> None:
        with self._lock:
            jobs = list(self._jobs.values())
            self._jobs.clear()
        for running in jobs:
            running.stop.set()

    def _loop(self, job: PeriodicJob, stop: threading.Event, callback: Callable[[str], None]) -> None:
        interval = job.period_minutes * self._seconds_per_minute
        while not stop.wait(interval):
            try:
                callback(job.name)
            except Exception:
                logger.exception("Job %s failed", job.name)
