from __future__ import annotations

"""Progress store: unlock frontier, best result per stage, wrong-answer bank.

State is restored from a key-value collaborator at construction and written
through after every mutation. A failed load or save switches the store to
session-only mode: play continues in memory and nothing more is written.
"""

import json
import logging
import threading
from typing import Any, Dict, Optional, Set

from pydantic import ValidationError

from ..errors import DevToolsDisabledError, PersistenceError
from ..stages.layout import ChapterLayout
from .kv import KeyValueStore
from .schema import Evaluation, ProgressState, StageResult, rank_value

logger = logging.getLogger(__name__)

CHAPTER_KEY = "gameData_highestUnlockedChapter"
STAGE_KEY = "gameData_highestUnlockedStage"
RESULTS_KEY = "gameData_stageResults"
WRONG_KEY = "gameData_wrongQuestionIDs"
ALL_KEYS = (CHAPTER_KEY, STAGE_KEY, RESULTS_KEY, WRONG_KEY)

_DEV_RESULT = {"evaluation": "S", "max_combo": 10, "correctly_answered": 10, "total_questions": 10}


class ProgressStore:
    def __init__(self, kv: KeyValueStore, layout: ChapterLayout, *, dev_tools: bool = False) -> None:
        self._kv = kv
        self.layout = layout
        self.dev_tools = dev_tools
        self._lock = threading.Lock()
        self.session_only = False
        self.state = self._load()

    # --- Persistence ---

    def _read_json(self, key: str) -> Any:
        raw = self._kv.load(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"corrupt value for {key}: {exc}") from exc

    def _load(self) -> ProgressState:
        try:
            chapter = self._read_json(CHAPTER_KEY)
            stage = self._read_json(STAGE_KEY)
            results = self._read_json(RESULTS_KEY) or {}
            wrong = self._read_json(WRONG_KEY) or []
            state = ProgressState(
                # 0 or absent means "never saved"
                highest_unlocked_chapter=int(chapter) if chapter else 1,
                highest_unlocked_stage=int(stage) if stage else 1,
                results={int(k): StageResult.model_validate(v) for k, v in dict(results).items()},
                wrong_question_ids={int(i) for i in wrong},
            )
        except (PersistenceError, ValidationError, TypeError, ValueError) as exc:
            logger.warning("Could not restore progress, using session-only defaults: %s", exc)
            self.session_only = True
            return ProgressState()
        state.highest_unlocked_chapter = min(state.highest_unlocked_chapter, self.layout.total_chapters)
        state.highest_unlocked_stage = min(state.highest_unlocked_stage, self.layout.total_stages)
        return state

    def _snapshot(self) -> Dict[str, str]:
        s = self.state
        results = {str(k): v.model_dump(mode="json") for k, v in sorted(s.results.items())}
        return {
            CHAPTER_KEY: json.dumps(s.highest_unlocked_chapter),
            STAGE_KEY: json.dumps(s.highest_unlocked_stage),
            RESULTS_KEY: json.dumps(results, separators=(",", ":")),
            WRONG_KEY: json.dumps(sorted(s.wrong_question_ids)),
        }

    def _save(self) -> None:
        """Write the full state; caller holds the lock."""
        if self.session_only:
            return
        try:
            for key, value in self._snapshot().items():
                self._kv.save(key, value)
        except PersistenceError as exc:
            logger.warning("Saving progress failed, continuing session-only: %s", exc)
            self.session_only = True

    # --- Queries ---

    @property
    def highest_unlocked_chapter(self) -> int:
        return self.state.highest_unlocked_chapter

    @property
    def highest_unlocked_stage(self) -> int:
        return self.state.highest_unlocked_stage

    @property
    def wrong_question_ids(self) -> Set[int]:
        return set(self.state.wrong_question_ids)

    def is_chapter_unlocked(self, chapter: int) -> bool:
        return chapter <= self.state.highest_unlocked_chapter

    def is_stage_unlocked(self, stage: int) -> bool:
        return stage <= self.state.highest_unlocked_stage

    def get_result(self, stage: int) -> Optional[StageResult]:
        return self.state.results.get(stage)

    def just_completed_chapter(self) -> Optional[int]:
        """Chapter whose boss stage sits right behind the stage frontier, if any."""
        prev = self.state.highest_unlocked_stage - 1
        if prev < 1:
            return None
        if self.layout.is_boss(prev):
            return self.layout.chapter_and_stage_in_chapter(prev)[0]
        return None

    # --- Mutations ---

    def record_result(self, stage: int, result: StageResult) -> bool:
        """Keep the better of the stored and new result; True when overwritten."""
        self.layout.chapter_and_stage_in_chapter(stage)
        with self._lock:
            stored = self.state.results.get(stage)
            old_rank = rank_value(stored.evaluation if stored else None)
            replaced = rank_value(result.evaluation) < old_rank
            if replaced:
                self.state.results[stage] = result
            self._save()
        return replaced

    def advance_unlock_if_eligible(self, stage: int, result: StageResult) -> bool:
        """Open the next stage (and chapter, after a boss) when the frontier stage is passed."""
        with self._lock:
            s = self.state
            if stage != s.highest_unlocked_stage or result.evaluation is Evaluation.F:
                return False
            s.highest_unlocked_stage = min(s.highest_unlocked_stage + 1, self.layout.total_stages)
            if self.layout.is_boss(stage):
                s.highest_unlocked_chapter = min(s.highest_unlocked_chapter + 1, self.layout.total_chapters)
            self._save()
        return True

    def add_wrong_question(self, question_id: int) -> None:
        with self._lock:
            self.state.wrong_question_ids.add(int(question_id))
            self._save()

    def remove_wrong_question(self, question_id: int) -> None:
        with self._lock:
            self.state.wrong_question_ids.discard(int(question_id))
            self._save()

    def clear_wrong_questions(self) -> None:
        with self._lock:
            self.state.wrong_question_ids.clear()
            self._save()

    def reset_progress(self) -> None:
        with self._lock:
            if not self.session_only:
                try:
                    for key in ALL_KEYS:
                        self._kv.remove(key)
                except PersistenceError as exc:
                    logger.warning("Clearing saved progress failed, continuing session-only: %s", exc)
                    self.session_only = True
            self.state = ProgressState()
            self._save()
        logger.info("Progress reset")

    def unlock_all_stages(self) -> None:
        """Developer shortcut: S on every non-boss stage, every stage and chapter open."""
        if not self.dev_tools:
            raise DevToolsDisabledError("unlock_all_stages requires dev_tools")
        with self._lock:
            for stage in range(1, self.layout.total_stages + 1):
                if not self.layout.is_boss(stage):
                    self.state.results[stage] = StageResult.model_validate(_DEV_RESULT)
            self.state.highest_unlocked_chapter = self.layout.total_chapters
            self.state.highest_unlocked_stage = self.layout.total_stages
            self._save()
        logger.info("All stages unlocked")
