import logging
from typing import Iterable

from ..models.batch_report import BatchReport
from ..models.pair_result import PairResult
from ..repositories.pair_result_repository import PairResultRepository

logger = logging.getLogger(__name__)


class ReportService:
    """
    Turns the collected PairResults of a finished batch into a BatchReport.
    Only runs after every worker has joined.
    """

    def __init__(self, repository: PairResultRepository | None = None):
        self.repository = repository or PairResultRepository()

    def build_report(self, total: int, results: Iterable[PairResult]) -> BatchReport:
        """
        Args:
            total: number of pairs requested
            results: one PairResult per requested pair, in completion order

        Returns:
            BatchReport: statistics over successes, errors in request order
        """
        ordered = self.repository.sort_by_index(results)
        if len(ordered) != total:
            logger.error(f"Batch produced {len(ordered)} results for {total} requested pairs")

        stats = self.repository.get_score_statistics(ordered)
        return BatchReport(
            total=total,
            successful=stats.get("count", 0),
            average=stats.get("mean"),
            min=stats.get("min"),
            max=stats.get("max"),
            errors=tuple(r.error for r in self.repository.filter_failed(ordered)),
            notes=tuple(f"[{r.index}] {r.note}" for r in ordered if r.note),
            results=tuple(ordered),
        )

    def log_report(self, report: BatchReport, top_n: int = 5) -> None:
        """
        Log the summary plus the most and least similar pairs.
        """
        for line in report.summary().splitlines():
            logger.info(line)

        ranked = self.repository.sort_by_similarity(report.results)
        for i, result in enumerate(ranked[:top_n], 1):
            logger.info(f"{i:2d}. {result.similarity:6.2f}% | {result.path_a} vs {result.path_b}")
        if len(ranked) > top_n:
            worst = ranked[-1]
            logger.info(f"Least similar: {worst.similarity:6.2f}% | {worst.path_a} vs {worst.path_b}")

        for error in report.errors:
            logger.warning(error)
