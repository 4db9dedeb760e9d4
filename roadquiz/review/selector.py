from __future__ import annotations

"""Question subsets for review and mock-exam runs.

All sampling is without replacement. Per-chapter picks are concatenated and
the combined list is shuffled once more.
"""

import random
from typing import Iterable, List, Mapping, Optional, Sequence, Set

from ..questions.schema import Question


def _check_ratios(ratios: Mapping[int, float]) -> None:
    for chapter, ratio in ratios.items():
        if not 0.0 <= float(ratio) <= 1.0:
            raise ValueError(f"ratio for chapter {chapter} must be in [0, 1], got {ratio}")


def _chapters(questions: Sequence[Question], chapters: Optional[Iterable[int]]) -> List[int]:
    if chapters is not None:
        return sorted(set(chapters))
    return sorted({q.chapter_level for q in questions})


def _sample_by_ratio(
    pool: Sequence[Question],
    ratios: Mapping[int, float],
    chapters: List[int],
    rng: random.Random,
) -> List[Question]:
    picked: List[Question] = []
    for chapter in chapters:
        in_chapter = [q for q in pool if q.chapter_level == chapter]
        take = int(len(in_chapter) * float(ratios.get(chapter, 0.0)))
        picked.extend(rng.sample(in_chapter, take))
    rng.shuffle(picked)
    return picked


def select_wrong_question_review(
    wrong_ids: Set[int] | Iterable[int],
    all_questions: Sequence[Question],
    ratios: Mapping[int, float],
    *,
    chapters: Optional[Iterable[int]] = None,
    rng: Optional[random.Random] = None,
) -> List[Question]:
    """floor(count * ratio) previously missed questions per chapter."""
    _check_ratios(ratios)
    wrong = set(wrong_ids)
    pool = [q for q in all_questions if q.id in wrong]
    return _sample_by_ratio(pool, ratios, _chapters(pool, chapters), rng or random.Random())


def select_full_review(
    all_questions: Sequence[Question],
    ratios: Mapping[int, float],
    unlocked_chapter: int,
    *,
    rng: Optional[random.Random] = None,
) -> List[Question]:
    """floor(count * ratio) questions per unlocked chapter (1..unlocked_chapter)."""
    _check_ratios(ratios)
    chapters = [c for c in _chapters(all_questions, None) if c <= unlocked_chapter]
    return _sample_by_ratio(all_questions, ratios, chapters, rng or random.Random())


def select_mock_exam(
    all_questions: Sequence[Question],
    counts: Mapping[int, int],
    *,
    rng: Optional[random.Random] = None,
) -> List[Question]:
    """min(target, available) questions per chapter; no padding, no error."""
    rng = rng or random.Random()
    picked: List[Question] = []
    for chapter in sorted(counts):
        target = int(counts[chapter])
        if target < 0:
            raise ValueError(f"mock exam count for chapter {chapter} must be >= 0")
        in_chapter = [q for q in all_questions if q.chapter_level == chapter]
        picked.extend(rng.sample(in_chapter, min(target, len(in_chapter))))
    rng.shuffle(picked)
    return picked


def counts_from_list(values: Sequence[int]) -> dict[int, int]:
    """Chapter-indexed mapping from a list ordered by chapter (chapter 1 first)."""
    return {i + 1: int(v) for i, v in enumerate(values)}


def uniform_ratios(chapters: int, ratio: float) -> dict[int, float]:
    return {c: float(ratio) for c in range(1, chapters + 1)}
