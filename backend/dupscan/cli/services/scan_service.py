from __future__ import annotations

import logging
import os
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple, TypeVar

from ...config.settings import ScanSettings, load_settings
from ...scanner.aggregator import aggregate
from ...scanner.errors import OutputUnavailableError
from ...scanner.models import ScanPreferences, ScanResult
from ...scanner.pool import HashWorkerPool
from ...scanner.walker import feed_intake
from .duplicate_detection_service import DuplicateAnalysisResult, DuplicateDetectionService

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ScanRunResult:
    """Artifacts returned after a scan."""

    output_path: Path
    root_path: Path
    scan_result: ScanResult
    analysis: DuplicateAnalysisResult
    timings: List[Tuple[str, float]]


class ScanService:
    """Runs the walk -> hash -> aggregate -> report pipeline."""

    def __init__(
        self,
        *,
        settings: Optional[ScanSettings] = None,
        detection_service: Optional[DuplicateDetectionService] = None,
    ) -> None:
        self._settings = settings
        self._detection = detection_service or DuplicateDetectionService()

    @property
    def detection_service(self) -> DuplicateDetectionService:
        return self._detection

    @property
    def settings(self) -> ScanSettings:
        if self._settings is None:
            self._settings = load_settings()
        return self._settings

    def run_scan(
        self,
        output_path: str | os.PathLike,
        root_path: str | os.PathLike,
        *,
        workers: Optional[int] = None,
        preferences: Optional[ScanPreferences] = None,
        order: Optional[str] = None,
        progress_callback: Callable[[str], None] | None = None,
    ) -> ScanRunResult:
        """
        Scan ``root_path`` and append every duplicate group to ``output_path``.

        The output is opened for append before anything is walked, so an
        unwritable destination fails fast with ``OutputUnavailableError``.
        Walk and per-file errors are logged and leave a partial report.
        """
        output = Path(output_path)
        root = Path(root_path)
        settings = self.settings
        worker_count = workers if workers is not None else settings.workers
        group_order = order or settings.order
        timings: list[Tuple[str, float]] = []

        def _run_step(message: str, label: str, func: Callable[[], T]) -> T:
            if progress_callback:
                try:
                    progress_callback(message)
                except Exception as exc:
                    logger.debug(f"Progress callback failed: {exc}")
            start = time.perf_counter()
            result = func()
            timings.append((label, time.perf_counter() - start))
            return result

        logger.info("Checking for duplicate files.")
        logger.info(f"Searching the path: {root}")
        logger.info(f"Writing to file: {output}")

        try:
            # surrogateescape writes undecodable filenames back as their original bytes.
            handle = open(output, "a", encoding="utf-8", errors="surrogateescape")
        except OSError as exc:
            raise OutputUnavailableError(
                f"Cannot open output file {output}: {exc}", "OUTPUT_UNAVAILABLE"
            ) from exc

        with handle:
            scan_result = _run_step(
                "Hashing files…",
                "Walk & hash",
                lambda: self._collect(root, worker_count, settings.chunk_size, preferences),
            )
            analysis = _run_step(
                "Grouping duplicates…",
                "Grouping",
                lambda: self._detection.analyze_duplicates(scan_result, order=group_order),
            )
            _run_step(
                "Writing report…",
                "Report",
                lambda: self._detection.write_report(analysis, handle),
            )

        return ScanRunResult(
            output_path=output,
            root_path=root,
            scan_result=scan_result,
            analysis=analysis,
            timings=timings,
        )

    def _collect(
        self,
        root: Path,
        workers: int,
        chunk_size: int,
        preferences: Optional[ScanPreferences],
    ) -> ScanResult:
        pool = HashWorkerPool(workers, chunk_size=chunk_size)
        walker = threading.Thread(
            target=feed_intake,
            args=(root, pool, preferences),
            name="dupscan-walker",
            daemon=True,
        )
        walker.start()
        # The result stream only closes once the walker has closed the intake
        # and every worker has drained it.
        scan_result = aggregate(pool.results())
        walker.join()
        return scan_result


def scan(
    output_path: str | os.PathLike,
    root_path: str | os.PathLike,
    *,
    workers: Optional[int] = None,
    preferences: Optional[ScanPreferences] = None,
    order: Optional[str] = None,
    settings: Optional[ScanSettings] = None,
) -> DuplicateAnalysisResult:
    """Append the duplicate groups under ``root_path`` to ``output_path``."""
    run = ScanService(settings=settings).run_scan(
        output_path,
        root_path,
        workers=workers,
        preferences=preferences,
        order=order,
    )
    return run.analysis
