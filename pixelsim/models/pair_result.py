from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class PairScore:
    """
    Outcome of scoring one decoded pair.
    `note` is set when image B had to be resized to image A's dimensions.
    """
    similarity: float # Percentage in [0, 100].
    note: str | None = None


@dataclass(frozen=True)
class PairResult:
    """
    One entry per requested pair in a batch: either a similarity or an error.
    """
    index: int
    path_a: Path | str
    path_b: Path | str
    similarity: float | None = None
    note: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, index: int, path_a, path_b, score: PairScore) -> PairResult:
        return cls(index=index, path_a=path_a, path_b=path_b,
                   similarity=score.similarity, note=score.note)

    @classmethod
    def failure(cls, index: int, path_a, path_b, err: BaseException | str) -> PairResult:
        if isinstance(err, BaseException):
            message = f"{type(err).__name__}: {err}"
        else:
            message = err
        return cls(index=index, path_a=path_a, path_b=path_b,
                   error=f"[{index}] {path_a} vs {path_b}: {message}")
