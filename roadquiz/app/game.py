from __future__ import annotations

"""QuizGame: owns the question bank, layout, progress store and runs.

This is the object the presentation layer talks to. Each QuizGame owns
exactly one progress store.
"""

import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from ..config.config import GameConfig
from ..engine.scoring import ScoringEngine
from ..errors import InvalidTransitionError
from ..progress.kv import KeyValueStore
from ..progress.schema import StageResult
from ..progress.store import ProgressStore
from ..questions.bank import QuestionBank, load_questions
from ..questions.schema import Question
from ..review import selector
from ..stages.layout import Boss, ChapterLayout, Review, StageType
from ..util.randomness import env_seed, make_rng
from .explain import trace as xtrace

logger = logging.getLogger(__name__)

RUN_MODES = ("stage", "wrong", "full", "mock", "custom")


def default_questions_path() -> Path:
    return Path(__file__).resolve().parents[1] / "resources" / "questions.csv"


@dataclass(frozen=True)
class RunSummary:
    mode: str
    stage: Optional[int]
    result: StageResult
    new_best: bool = False
    unlocked: bool = False
    chapter_completed: Optional[int] = None


class QuizGame:
    def __init__(
        self,
        cfg: GameConfig,
        kv: KeyValueStore,
        *,
        bank: Optional[QuestionBank] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.cfg = cfg
        self.layout = ChapterLayout(cfg.layout.chapter_stage_counts)
        self.store = ProgressStore(kv, self.layout, dev_tools=cfg.dev_tools)
        self.bank = bank if bank is not None else QuestionBank()
        self.rng = rng or make_rng(env_seed())

    # --- Questions ---

    def load_questions(self, path: Optional[Path | str] = None) -> QuestionBank:
        source = path or self.cfg.storage.questions_path or default_questions_path()
        self.bank = load_questions(source)
        if self.bank.is_empty:
            logger.warning("Question bank is empty; runs cannot start")
        return self.bank

    def questions_for_stage(self, stage: int) -> List[Question]:
        """Questions tagged with `stage`; untagged review/boss stages draw from their chapter."""
        tagged = self.bank.for_stage(stage)
        if tagged:
            return tagged
        kind = self.layout.stage_type(stage)
        chapter, in_chapter = self.layout.chapter_and_stage_in_chapter(stage)
        if isinstance(kind, Review):
            earlier = [self.layout.global_stage(chapter, n) for n in range(1, in_chapter)]
            pool = self.bank.for_stages(earlier)
        elif isinstance(kind, Boss):
            pool = self.bank.for_stages(list(self.layout.chapter_range(chapter))) or self.bank.for_chapter(chapter)
        else:
            return []
        n = min(self.cfg.run.fallback_question_count, len(pool))
        return self.rng.sample(pool, n)

    # --- Layout ---

    def stage_type(self, stage: int) -> StageType:
        return self.layout.stage_type(stage)

    def chapter_and_stage_in_chapter(self, stage: int) -> Tuple[int, int]:
        return self.layout.chapter_and_stage_in_chapter(stage)

    # --- Progress ---

    def is_chapter_unlocked(self, chapter: int) -> bool:
        return self.store.is_chapter_unlocked(chapter)

    def is_stage_unlocked(self, stage: int) -> bool:
        return self.store.is_stage_unlocked(stage)

    def get_result(self, stage: int) -> Optional[StageResult]:
        return self.store.get_result(stage)

    def record_result(self, stage: int, result: StageResult) -> bool:
        return self.store.record_result(stage, result)

    def add_wrong_question(self, question_id: int) -> None:
        self.store.add_wrong_question(question_id)

    def clear_wrong_questions(self) -> None:
        self.store.clear_wrong_questions()

    def reset_progress(self) -> None:
        self.store.reset_progress()

    def unlock_all_stages(self) -> None:
        self.store.unlock_all_stages()

    # --- Runs ---

    def start_run(
        self,
        stage: Optional[int] = None,
        questions: Optional[Sequence[Question]] = None,
        *,
        mode: Optional[str] = None,
    ) -> ScoringEngine:
        """Start a run for a stage, or over a custom question list (review/mock).

        Raises EmptyRunError when no question is available and
        InvalidTransitionError for a locked stage.
        """
        if (stage is None) == (questions is None):
            raise ValueError("pass exactly one of stage or questions")
        if stage is not None:
            self.layout.chapter_and_stage_in_chapter(stage)
            if not self.store.is_stage_unlocked(stage):
                raise InvalidTransitionError(f"stage {stage} is locked")
            pool = self.questions_for_stage(stage)
            mode = "stage"
        else:
            pool = list(questions or [])
            mode = mode or "custom"
            if mode not in RUN_MODES or mode == "stage":
                raise ValueError(f"unknown run mode: {mode}")
        engine = ScoringEngine(
            pool,
            run_cfg=self.cfg.run,
            grading_cfg=self.cfg.grading,
            wrong_sink=self.store,
            rng=self.rng,
            stage=stage,
            mode=mode,
        )
        xtrace("run_started", {"mode": mode, "stage": stage, "questions": engine.total_questions})
        return engine

    def finish_run(self, engine: ScoringEngine) -> RunSummary:
        """Merge a finished run into progress.

        Stage runs keep the best result and may open the next stage. Custom
        runs are never recorded against a stage; a wrong-question review
        drops the questions it got right from the wrong bank.
        """
        if not engine.is_over:
            raise InvalidTransitionError("run has not finished")
        mode, stage = engine.mode, engine.stage
        result = engine.result()
        if mode == "wrong":
            for qid in engine.state.correct_question_ids:
                self.store.remove_wrong_question(qid)
        if stage is None:
            return RunSummary(mode=mode, stage=None, result=result)

        new_best = self.store.record_result(stage, result)
        unlocked = self.store.advance_unlock_if_eligible(stage, result)
        completed = None
        if unlocked and self.layout.is_boss(stage):
            completed = self.layout.chapter_and_stage_in_chapter(stage)[0]
        xtrace("run_recorded", {"stage": stage, "grade": result.evaluation.value, "new_best": new_best, "unlocked": unlocked})
        return RunSummary(mode=mode, stage=stage, result=result, new_best=new_best, unlocked=unlocked, chapter_completed=completed)

    # --- Review subsets ---

    def _ratios(self, ratios: Optional[Dict[int, float]], default: float) -> Dict[int, float]:
        out = selector.uniform_ratios(self.layout.total_chapters, default)
        out.update(ratios or {})
        return out

    def select_wrong_question_review(self, ratios: Optional[Dict[int, float]] = None) -> List[Question]:
        return selector.select_wrong_question_review(
            self.store.wrong_question_ids,
            self.bank.all(),
            self._ratios(ratios, self.cfg.review.wrong_ratio_default),
            rng=self.rng,
        )

    def select_full_review(self, ratios: Optional[Dict[int, float]] = None) -> List[Question]:
        return selector.select_full_review(
            self.bank.all(),
            self._ratios(ratios, self.cfg.review.full_ratio_default),
            self.store.highest_unlocked_chapter,
            rng=self.rng,
        )

    def select_mock_exam(self, counts: Optional[Dict[int, int]] = None) -> List[Question]:
        if counts is None:
            counts = selector.counts_from_list(self.cfg.review.mock_exam_counts)
        return selector.select_mock_exam(self.bank.all(), counts, rng=self.rng)
