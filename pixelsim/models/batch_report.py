from __future__ import annotations
from dataclasses import dataclass, field
from typing import Tuple

from .pair_result import PairResult


@dataclass(frozen=True)
class BatchReport:
    """
    Read-only summary of a batch, built once after every pair has finished.
    Statistics cover successful pairs only; `average`, `min` and `max` are
    None when nothing succeeded.
    """
    total: int
    successful: int
    average: float | None
    min: float | None
    max: float | None
    errors: Tuple[str, ...] = ()
    notes: Tuple[str, ...] = ()
    results: Tuple[PairResult, ...] = field(default=(), repr=False)

    @property
    def failed(self) -> int:
        return self.total - self.successful

    def summary(self) -> str:
        """Human-readable report, one fact per line."""
        if self.total == 0:
            return "Zero pairs requested."

        lines = [f"Compared {self.total} image pairs: "
                 f"{self.successful}/{self.total} succeeded, {self.failed} failed."]
        if self.successful == 0:
            lines.append("No successful comparisons.")
        else:
            lines.append(f"Average similarity: {self.average:.2f}%")
            lines.append(f"Minimum similarity: {self.min:.2f}%")
            lines.append(f"Maximum similarity: {self.max:.2f}%")
        return "\n".join(lines)

    def as_dict(self) -> dict:
        return {
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "average": self.average,
            "min": self.min,
            "max": self.max,
            "errors": list(self.errors),
            "notes": list(self.notes),
        }
