from __future__ import annotations

"""Progress models: grades, per-stage results, and the persisted snapshot."""

from enum import Enum
from typing import Dict, Optional, Set

from pydantic import BaseModel, Field, model_validator


class Evaluation(str, Enum):
    S = "S"
    A = "A"
    B = "B"
    C = "C"
    F = "F"


RANK_VALUES: Dict[str, int] = {"S": 0, "A": 1, "B": 2, "C": 3, "F": 4}
UNKNOWN_RANK = 99


def rank_value(evaluation: Optional[Evaluation | str]) -> int:
    """Ordinal of a grade, lower is better; absent or unknown grades rank 99."""
    if evaluation is None:
        return UNKNOWN_RANK
    key = evaluation.value if isinstance(evaluation, Evaluation) else str(evaluation)
    return RANK_VALUES.get(key, UNKNOWN_RANK)


class StageResult(BaseModel):
    evaluation: Evaluation
    max_combo: int = Field(ge=0)
    correctly_answered: int = Field(ge=0)
    total_questions: int = Field(ge=0)

    @model_validator(mode="after")
    def _correct_le_total(self) -> "StageResult":
        if self.correctly_answered > self.total_questions:
            raise ValueError("correctly_answered must be <= total_questions")
        return self

    @property
    def passed(self) -> bool:
        return self.evaluation is not Evaluation.F


class ProgressState(BaseModel):
    highest_unlocked_chapter: int = Field(1, ge=1)
    highest_unlocked_stage: int = Field(1, ge=1)
    results: Dict[int, StageResult] = Field(default_factory=dict)
    wrong_question_ids: Set[int] = Field(default_factory=set)
