import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path

from hotel_portal.exceptions.custom import MalformedReviewFile
from hotel_portal.schemas.responses import FileError, IngestReport
from hotel_portal.services.hotel_index import HotelIndex
from hotel_portal.services.review_parser import parse_review_file

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 20
DEFAULT_GRACE_PERIOD = 60.0


@dataclass
class _FileOutcome:
    path: str
    hotel_id: str | None = None
    reviews: int = 0
    record_errors: int = 0
    merged: bool = False
    error: str | None = None


def iter_review_files(root: Path):
    """Yield every regular file under root, depth first, in name order."""
    try:
        entries = sorted(os.scandir(root), key=lambda e: e.name)
    except OSError as exc:
        logger.warning("Can not open directory %s: %s", root, exc)
        return
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            yield from iter_review_files(Path(entry.path))
        elif entry.is_file():
            yield Path(entry.path)


class ReviewIngestor:
    """Loads a tree of review files into a HotelIndex on a fixed worker pool.

    Each file is parsed into a private ReviewSet without holding the index
    lock, then merged into the index once.
    """

    def __init__(
        self,
        index: HotelIndex,
        workers: int = DEFAULT_WORKERS,
        grace_period: float = DEFAULT_GRACE_PERIOD,
    ):
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self._index = index
        self._workers = workers
        self._grace_period = grace_period

    def _process_file(self, path: Path) -> _FileOutcome:
        outcome = _FileOutcome(path=str(path))
        try:
            result = parse_review_file(path)
        except MalformedReviewFile as exc:
            logger.warning("Skipping review file %s: %s", path, exc.message)
            outcome.error = exc.message
            return outcome

        outcome.reviews = len(result.reviews)
        outcome.record_errors = len(result.errors)
        outcome.hotel_id = result.hotel_id
        if outcome.hotel_id is not None:
            outcome.merged = self._index.merge(outcome.hotel_id, result.reviews)
        return outcome

    def ingest(self, root: str | Path) -> IngestReport:
        root = Path(root)
        report = IngestReport(root=str(root))
        if not root.is_dir():
            logger.warning("Reviews directory %s does not exist", root)
            return report

        executor = ThreadPoolExecutor(
            max_workers=self._workers, thread_name_prefix="review-worker"
        )
        futures: dict[Future, Path] = {}
        try:
            for path in iter_review_files(root):
                futures[executor.submit(self._process_file, path)] = path
        finally:
            executor.shutdown(wait=False)

        report.files_seen = len(futures)
        done, not_done = wait(futures, timeout=self._grace_period)
        if not_done:
            report.timed_out = True
            cancelled = sum(1 for f in not_done if f.cancel())
            logger.warning(
                "Review ingestion did not finish within %.0fs: %d files pending, %d cancelled",
                self._grace_period, len(not_done), cancelled,
            )

        for future in done:
            path = futures[future]
            exc = future.exception()
            if exc is not None:
                logger.error("Worker for %s failed", path, exc_info=exc)
                report.file_errors.append(FileError(path=str(path), message=str(exc)))
                continue
            outcome = future.result()
            if outcome.error is not None:
                report.file_errors.append(FileError(path=outcome.path, message=outcome.error))
                continue
            report.files_parsed += 1
            report.reviews_loaded += outcome.reviews if outcome.merged else 0
            report.record_errors += outcome.record_errors
            if outcome.merged:
                report.hotels_merged += 1
            elif outcome.hotel_id is not None:
                report.hotels_skipped += 1

        logger.info(
            "Ingested %d/%d review files from %s (%d reviews, %d file errors, %d record errors)",
            report.files_parsed, report.files_seen, root,
            report.reviews_loaded, len(report.file_errors), report.record_errors,
        )
        return report
