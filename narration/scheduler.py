from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

from .errors import ChunkSynthesisError, classify_exception
from .progress import NullProgress, ProgressObserver

logger = logging.getLogger(__name__)

__all__ = ["AdmissionGate", "SynthesisResult", "SynthesisScheduler"]

ChunkT = TypeVar("ChunkT")
ArtifactT = TypeVar("ArtifactT")


class AdmissionGate:
    """
    Counting gate that bounds how many synthesis calls run at once.

    Tracks the number of holders currently inside the gate and the highest
    number observed, so callers can check the bound after a run.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1.")
        self.capacity = capacity
        self._semaphore = threading.BoundedSemaphore(capacity)
        self._lock = threading.Lock()
        self.in_flight = 0
        self.peak = 0

    def __enter__(self) -> "AdmissionGate":
        self._semaphore.acquire()
        with self._lock:
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
        return self

    def __exit__(self, *exc_info: object) -> None:
        with self._lock:
            self.in_flight -= 1
        self._semaphore.release()


@dataclass
class SynthesisResult(Generic[ArtifactT]):
    index: int
    artifact: Optional[ArtifactT] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_kind(self) -> Optional[str]:
        return classify_exception(self.error) if self.error is not None else None


class SynthesisScheduler:
    """
    Runs one synthesis call per chunk with at most ``concurrency`` in flight.

    Results are placed by chunk index, so the returned list follows chunk
    order whatever the completion order was. A failing chunk does not cancel
    its siblings: every task runs to completion, then the first failure by
    completion order is raised as :class:`ChunkSynthesisError`.
    """

    def __init__(self, concurrency: int, progress: Optional[ProgressObserver] = None) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1.")
        self.concurrency = concurrency
        self.progress = progress or NullProgress()
        self.gate = AdmissionGate(concurrency)

    def run(
        self,
        chunks: Sequence[ChunkT],
        synthesize: Callable[[ChunkT], ArtifactT],
    ) -> List[ArtifactT]:
        total = len(chunks)
        if total == 0:
            logger.debug("No chunks to synthesize.")
            return []

        artifacts: List[Optional[ArtifactT]] = [None] * total
        failures: List[SynthesisResult[ArtifactT]] = []
        lock = threading.Lock()
        completed = 0

        def worker(index: int, chunk: ChunkT) -> None:
            nonlocal completed
            try:
                with self.gate:
                    artifact = synthesize(chunk)
            except Exception as exc:
                logger.warning("Chunk %d failed: %s", index, exc)
                with lock:
                    failures.append(SynthesisResult(index=index, error=exc))
                return

            artifacts[index] = artifact
            with lock:
                completed += 1
                self.progress.update(completed)
            logger.debug("Chunk %d complete (%d/%d).", index, completed, total)

        started = time.monotonic()
        self.progress.start(total)
        try:
            with ThreadPoolExecutor(
                max_workers=min(self.concurrency, total), thread_name_prefix="synth"
            ) as executor:
                futures = [executor.submit(worker, index, chunk) for index, chunk in enumerate(chunks)]
        finally:
            self.progress.finish()

        # Synthesis errors are collected in ``failures``; anything else is a bug.
        for future in futures:
            future.result()

        logger.info(
            "Synthesized %d/%d chunk(s) in %.2fs (concurrency=%d, peak=%d).",
            completed,
            total,
            time.monotonic() - started,
            self.concurrency,
            self.gate.peak,
        )

        if failures:
            raise ChunkSynthesisError(failures)
        return list(artifacts)  # type: ignore[arg-type]
