from __future__ import annotations

"""Chapter layout and stage classification.

Global stage numbers are 1-based and contiguous across chapters. Within a
chapter, the last stage is the boss stage; review stages recur every
`review_interval + 1` stages, with `review_interval = max(4, size // 5)`.
"""

from bisect import bisect_left
from dataclasses import dataclass, field
from itertools import accumulate
from typing import List, Sequence, Tuple, Union

from ..errors import OutOfRangeError


MIN_REVIEW_INTERVAL = 4


@dataclass(frozen=True)
class Normal:
    number: int
    kind: str = field(default="normal", init=False)


@dataclass(frozen=True)
class Review:
    kind: str = field(default="review", init=False)


@dataclass(frozen=True)
class Boss:
    kind: str = field(default="boss", init=False)


StageType = Union[Normal, Review, Boss]


class ChapterLayout:
    """Stage counts per chapter plus the classification rules over them."""

    def __init__(self, chapter_stage_counts: Sequence[int]) -> None:
        counts = [int(n) for n in chapter_stage_counts]
        if not counts or any(n < 1 for n in counts):
            raise ValueError("chapter_stage_counts must be non-empty and positive")
        self._counts: Tuple[int, ...] = tuple(counts)
        # _ends[i] is the global number of chapter i+1's last stage
        self._ends: List[int] = list(accumulate(counts))

    @classmethod
    def uniform(cls, chapters: int = 5, stages_per_chapter: int = 21) -> "ChapterLayout":
        return cls([stages_per_chapter] * chapters)

    @property
    def chapter_stage_counts(self) -> Tuple[int, ...]:
        return self._counts

    @property
    def total_chapters(self) -> int:
        return len(self._counts)

    @property
    def total_stages(self) -> int:
        return self._ends[-1]

    def _check_chapter(self, chapter: int) -> None:
        if not 1 <= chapter <= self.total_chapters:
            raise OutOfRangeError(f"chapter {chapter} outside 1..{self.total_chapters}")

    def stages_in_chapter(self, chapter: int) -> int:
        self._check_chapter(chapter)
        return self._counts[chapter - 1]

    def chapter_range(self, chapter: int) -> range:
        """Global stage numbers belonging to `chapter`."""
        self._check_chapter(chapter)
        end = self._ends[chapter - 1]
        return range(end - self._counts[chapter - 1] + 1, end + 1)

    def chapter_and_stage_in_chapter(self, stage: int) -> Tuple[int, int]:
        if not 1 <= stage <= self.total_stages:
            raise OutOfRangeError(f"stage {stage} outside 1..{self.total_stages}")
        idx = bisect_left(self._ends, stage)
        start = self._ends[idx] - self._counts[idx]
        return idx + 1, stage - start

    def global_stage(self, chapter: int, stage_in_chapter: int) -> int:
        """Inverse of chapter_and_stage_in_chapter."""
        size = self.stages_in_chapter(chapter)
        if not 1 <= stage_in_chapter <= size:
            raise OutOfRangeError(f"stage {stage_in_chapter} outside 1..{size} in chapter {chapter}")
        return self._ends[chapter - 1] - size + stage_in_chapter

    def review_interval(self, chapter: int) -> int:
        return max(MIN_REVIEW_INTERVAL, self.stages_in_chapter(chapter) // 5)

    def stage_type(self, stage: int) -> StageType:
        chapter, in_chapter = self.chapter_and_stage_in_chapter(stage)
        # Boss wins over a review boundary.
        if in_chapter == self.stages_in_chapter(chapter):
            return Boss()
        if in_chapter % (self.review_interval(chapter) + 1) == 0:
            return Review()
        return Normal(in_chapter)

    def is_boss(self, stage: int) -> bool:
        return isinstance(self.stage_type(stage), Boss)

    def is_review(self, stage: int) -> bool:
        return isinstance(self.stage_type(stage), Review)

    def label(self, stage: int) -> str:
        chapter, in_chapter = self.chapter_and_stage_in_chapter(stage)
        st = self.stage_type(stage)
        if isinstance(st, Boss):
            return f"Chapter {chapter} - Final stage"
        if isinstance(st, Review):
            return f"Chapter {chapter} - Stage {in_chapter} (review)"
        return f"Chapter {chapter} - Stage {in_chapter}"
