from __future__ import annotations

"""Question model: one immutable multiple-choice driving-theory question."""

import random
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    chapter_level: int = Field(ge=1)
    text: str
    image_ref: Optional[str] = None
    options: Tuple[str, ...] = Field(min_length=1, max_length=4)
    correct_answer: str
    keyword: Optional[str] = None
    question_type: int = 0
    stages: Tuple[int, ...] = ()

    @field_validator("image_ref", "keyword")
    @classmethod
    def _blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def _answer_in_options(self) -> "Question":
        if self.correct_answer not in self.options:
            raise ValueError(f"correct answer {self.correct_answer!r} is not one of the options")
        return self

    def shuffled_options(self, rng: Optional[random.Random] = None) -> List[str]:
        """Options in a fresh random order for one presentation."""
        opts = list(self.options)
        (rng or random).shuffle(opts)
        return opts

    def is_correct(self, answer: str) -> bool:
        return answer == self.correct_answer
