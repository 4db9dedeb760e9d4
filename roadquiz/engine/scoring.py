from __future__ import annotations

"""Per-run scoring state machine.

A run walks through its questions one at a time. Each question takes exactly
one answer; after feedback the caller invokes `advance_to_next()` itself, so
no timing lives in here. Losing the last life ends the run in game over;
advancing past the last question completes it.
"""

import random
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence

from ..app.explain import trace as xtrace
from ..config.config import GradingConfig, RunConfig
from ..errors import EmptyRunError, InvalidTransitionError
from ..progress.schema import Evaluation, StageResult
from ..questions.schema import Question
from .grading import grade_run


class WrongAnswerSink(Protocol):
    def add_wrong_question(self, question_id: int) -> None: ...


@dataclass
class RunState:
    questions: List[Question] = field(default_factory=list)
    current_index: int = 0
    lives: int = 5
    score: int = 0
    combo_count: int = 0
    max_combo_achieved: int = 0
    correctly_answered_count: int = 0
    correct_question_ids: List[int] = field(default_factory=list)
    hints_used_this_run: int = 0
    hints_remaining: int = 0
    hint_active_on: Optional[int] = None
    answered_current: bool = False
    is_game_over: bool = False
    is_complete: bool = False


class ScoringEngine:
    def __init__(
        self,
        questions: Sequence[Question],
        *,
        run_cfg: Optional[RunConfig] = None,
        grading_cfg: Optional[GradingConfig] = None,
        wrong_sink: Optional[WrongAnswerSink] = None,
        rng: Optional[random.Random] = None,
        stage: Optional[int] = None,
        mode: Optional[str] = None,
    ) -> None:
        if not questions:
            raise EmptyRunError("no questions available for this run")
        self.run_cfg = run_cfg or RunConfig()
        self.grading_cfg = grading_cfg or GradingConfig()
        self.wrong_sink = wrong_sink
        self.rng = rng or random.Random()
        self.stage = stage
        self.mode = mode or ("stage" if stage is not None else "custom")
        self._source: List[Question] = list(questions)
        self.state = RunState()
        self._reset(shuffle=self.run_cfg.shuffle_questions)

    def _reset(self, *, shuffle: bool) -> None:
        qs = list(self._source)
        if shuffle:
            self.rng.shuffle(qs)
        self.state = RunState(
            questions=qs,
            lives=self.run_cfg.max_lives,
            hints_remaining=self.run_cfg.hints_per_stage,
        )

    # --- Queries ---

    @property
    def total_questions(self) -> int:
        return len(self.state.questions)

    @property
    def current_question(self) -> Question:
        s = self.state
        if not s.questions:
            raise EmptyRunError("run has no questions")
        return s.questions[s.current_index]

    @property
    def is_over(self) -> bool:
        return self.state.is_game_over or self.state.is_complete

    @property
    def status(self) -> str:
        s = self.state
        if s.is_game_over:
            return "game_over"
        if s.is_complete:
            return "complete"
        return "answered" if s.answered_current else "active"

    @property
    def progress(self) -> float:
        if not self.total_questions:
            return 0.0
        return self.state.correctly_answered_count / self.total_questions

    # --- Transitions ---

    def submit_answer(self, answer: str) -> bool:
        s = self.state
        if self.is_over:
            raise InvalidTransitionError(f"run is {self.status}")
        if s.answered_current:
            raise InvalidTransitionError("current question already answered")
        question = self.current_question
        is_correct = question.is_correct(answer)
        s.answered_current = True
        if is_correct:
            s.combo_count += 1
            s.correctly_answered_count += 1
            s.correct_question_ids.append(question.id)
            s.max_combo_achieved = max(s.max_combo_achieved, s.combo_count)
            s.score += self.run_cfg.points_per_correct + self.run_cfg.combo_bonus_points * (s.combo_count - 1)
        else:
            s.combo_count = 0
            if self.wrong_sink is not None:
                self.wrong_sink.add_wrong_question(question.id)
            s.lives = max(0, s.lives - 1)
            if s.lives == 0:
                s.is_game_over = True
        xtrace(
            "answer_graded",
            {"index": s.current_index, "question": question.id, "correct": is_correct, "lives": s.lives, "combo": s.combo_count},
        )
        return is_correct

    def advance_to_next(self) -> None:
        s = self.state
        if self.is_over:
            raise InvalidTransitionError(f"run is {self.status}")
        if not s.answered_current:
            raise InvalidTransitionError("answer the current question first")
        if s.current_index < len(s.questions) - 1:
            s.current_index += 1
            s.answered_current = False
        else:
            s.is_complete = True
            xtrace("run_complete", {"stage": self.stage, "correct": s.correctly_answered_count, "total": self.total_questions})

    def use_hint(self) -> bool:
        """Reveal the current question's keyword; at most one charge per question."""
        s = self.state
        if self.is_over or s.answered_current:
            return False
        if s.hint_active_on == s.current_index:
            return True
        if s.hints_remaining <= 0 or self.current_question.keyword is None:
            return False
        s.hints_remaining -= 1
        s.hints_used_this_run += 1
        s.hint_active_on = s.current_index
        return True

    def restart(self) -> None:
        self._reset(shuffle=True)

    # --- Results ---

    def final_evaluation(self) -> Evaluation:
        s = self.state
        return grade_run(
            correct=s.correctly_answered_count,
            total=self.total_questions,
            max_combo=s.max_combo_achieved,
            lives_remaining=s.lives,
            finished=s.is_complete,
            cfg=self.grading_cfg,
        )

    def result(self) -> StageResult:
        s = self.state
        return StageResult(
            evaluation=self.final_evaluation(),
            max_combo=s.max_combo_achieved,
            correctly_answered=s.correctly_answered_count,
            total_questions=self.total_questions,
        )
