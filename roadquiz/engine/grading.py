from __future__ import annotations

"""Final grade of a finished run.

Rules, applied in order:
1. A run that ended in game over, or did not finish, is F.
2. Ratio of correctly answered questions: S at s_ratio, then A, B, C at
   their inclusive lower bounds; below c_ratio is F.
3. A B or C run whose max combo reaches combo_bonus_ratio * total moves up
   one grade (never into S).
4. Finishing with low_lives or fewer lives caps the grade at C.
"""

from ..config.config import GradingConfig
from ..progress.schema import Evaluation


_ORDER = [Evaluation.S, Evaluation.A, Evaluation.B, Evaluation.C, Evaluation.F]


def grade_run(
    *,
    correct: int,
    total: int,
    max_combo: int,
    lives_remaining: int,
    finished: bool,
    cfg: GradingConfig | None = None,
) -> Evaluation:
    cfg = cfg or GradingConfig()
    if not finished or lives_remaining <= 0 or total <= 0:
        return Evaluation.F

    ratio = correct / total
    if ratio >= cfg.s_ratio:
        grade = Evaluation.S
    elif ratio >= cfg.a_ratio:
        grade = Evaluation.A
    elif ratio >= cfg.b_ratio:
        grade = Evaluation.B
    elif ratio >= cfg.c_ratio:
        grade = Evaluation.C
    else:
        return Evaluation.F

    if grade in (Evaluation.B, Evaluation.C) and max_combo >= cfg.combo_bonus_ratio * total:
        grade = _ORDER[_ORDER.index(grade) - 1]

    if lives_remaining <= cfg.low_lives and _ORDER.index(grade) < _ORDER.index(Evaluation.C):
        grade = Evaluation.C
    return grade
