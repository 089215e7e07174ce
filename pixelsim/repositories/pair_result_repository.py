from math import fsum
from typing import Iterable, List
from ..models.pair_result import PairResult


class PairResultRepository:
    """
    Repository for data operations on PairResult collections.
    Handles filtering, sorting and statistics. Never mutates its input.
    """

    def filter_successful(self, results: Iterable[PairResult]) -> List[PairResult]:
        return [result for result in results if result.ok]

    def filter_failed(self, results: Iterable[PairResult]) -> List[PairResult]:
        return [result for result in results if not result.ok]

    def sort_by_index(self, results: Iterable[PairResult]) -> List[PairResult]:
        """
        Results arrive in completion order; this restores request order.
        """
        return sorted(results, key=lambda r: r.index)

    def sort_by_similarity(
        self,
        results: Iterable[PairResult],
        descending: bool = True
    ) -> List[PairResult]:
        """
        Sort successful results by similarity. Failed results are dropped.

        Args:
            results: PairResult objects in any order
            descending: If True, most similar first (default)

        Returns:
            List[PairResult]: Sorted successful results
        """
        return sorted(self.filter_successful(results),
                      key=lambda r: r.similarity, reverse=descending)

    def get_score_statistics(self, results: Iterable[PairResult]) -> dict:
        """
        Calculate statistics over the successful results.

        Args:
            results: PairResult objects, successes and failures mixed

        Returns:
            dict: count, min, max and mean similarity, or {} if nothing succeeded
        """
        scores = [r.similarity for r in results if r.ok]
        if not scores:
            return {}

        # math.fsum keeps the mean independent of completion order
        return {
            "count": len(scores),
            "min": min(scores),
            "max": max(scores),
            "mean": fsum(scores) / len(scores),
        }
