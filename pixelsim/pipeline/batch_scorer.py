# pipeline/batch_scorer.py
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Sequence, Tuple, Union

from dotenv import load_dotenv

from ..models.batch_report import BatchReport
from ..models.concurrent_bag import AtomicCounter, ConcurrentBag
from ..models.errors import BatchSizeMismatch
from ..models.image import Image
from ..models.pair_result import PairResult
from ..services.image_service import ImageService
from ..services.report_service import ReportService
from ..services.similarity_service import SimilarityService

# env-vars
load_dotenv()

logger = logging.getLogger(__name__)

ProgressObserver = Callable[[int, int, PairResult], None]
PathLike = Union[str, Path]


def default_workers() -> int:
    env_workers = os.getenv("PIXELSIM_MAX_WORKERS")
    if env_workers:
        return max(1, int(env_workers))
    return os.cpu_count() or 1


def score_batch(
    paths_a: Sequence[PathLike],
    paths_b: Sequence[PathLike],
    *,
    similarity_service: SimilarityService | None = None,
    image_service: ImageService | None = None,
    report_service: ReportService | None = None,
    load: Callable[[PathLike], Image] | None = None,
    max_workers: int | None = None,
    on_progress: ProgressObserver | None = None,
    cancel_event: threading.Event | None = None,
    fixed_size: Tuple[int, int] | None = None,
) -> BatchReport:
    """
    Score paths_a[i] against paths_b[i] for every i, in parallel.

    Each index is one unit of work on a thread pool:
        • load both images
        • score them with the SimilarityService
        • append the result to the success bag, or the error to the failure bag
    A failing unit never affects the others; only a length mismatch between
    the two sequences fails the whole call, before anything is dispatched.

    Args:
        paths_a, paths_b: index-paired image references
        load: decoder, defaults to ImageService.load
        max_workers: pool size, defaults to PIXELSIM_MAX_WORKERS or the CPU count
        on_progress: called as on_progress(completed, total, result) after each unit
        cancel_event: once set, units that have not started yet are recorded as cancelled
        fixed_size: (width, height) to resize both images to instead of conforming B to A

    Returns:
        BatchReport built after every unit has completed
    """
    if len(paths_a) != len(paths_b):
        raise BatchSizeMismatch(len(paths_a), len(paths_b))

    image_service = image_service or ImageService()
    similarity_service = similarity_service or SimilarityService(image_service=image_service)
    report_service = report_service or ReportService()
    load = load or image_service.load
    workers = max_workers or default_workers()

    total = len(paths_a)
    successes: ConcurrentBag[PairResult] = ConcurrentBag()
    failures: ConcurrentBag[PairResult] = ConcurrentBag()
    completed = AtomicCounter()

    def _score_pair(image_a: Image, image_b: Image):
        if fixed_size is not None:
            return similarity_service.score_resized(image_a, image_b, *fixed_size)
        return similarity_service.score(image_a, image_b)

    def _run_unit(index: int, path_a: PathLike, path_b: PathLike) -> None:
        if cancel_event is not None and cancel_event.is_set():
            result = PairResult.failure(index, path_a, path_b, "cancelled before start")
        else:
            try:
                image_a = load(path_a)
                image_b = load(path_b)
                result = PairResult.success(index, path_a, path_b, _score_pair(image_a, image_b))
            except Exception as err:
                logger.warning(f"Pair {index} failed: {type(err).__name__}: {err}")
                result = PairResult.failure(index, path_a, path_b, err)

        (successes if result.ok else failures).append(result)
        done = completed.increment()
        if on_progress is not None:
            try:
                on_progress(done, total, result)
            except Exception:
                logger.exception(f"Progress observer failed on pair {index}")

    if total:
        logger.info(f"Scoring {total} image pairs with {workers} workers")
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(_run_unit, i, path_a, path_b)
                for i, (path_a, path_b) in enumerate(zip(paths_a, paths_b))
            ]
        # leaving the block joins every worker; surface anything _run_unit let escape
        for future in futures:
            future.result()

    return report_service.build_report(total, successes.snapshot() + failures.snapshot())
