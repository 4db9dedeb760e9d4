from __future__ import annotations

"""Translator collaborator: maps a message key to display text.

The engine never looks strings up; only the CLI does.
"""

from typing import Dict, Mapping, Optional, Protocol


class Translator(Protocol):
    def __call__(self, key: str, **fmt: object) -> str: ...


ENGLISH: Dict[str, str] = {
    "correct": "Correct!",
    "incorrect": "Incorrect. Answer was: {answer}",
    "hint": "Hint: {keyword}",
    "no_hint": "No hint available.",
    "game_over": "Game over.",
    "stage_clear": "Stage clear! Grade {grade}",
    "new_best": "New best result saved.",
    "chapter_clear": "Congratulations, chapter {chapter} complete!",
    "locked": "Stage {stage} is locked.",
    "empty_bank": "No questions loaded; check the question source.",
    "no_questions": "No questions available for this selection.",
}


class TableTranslator:
    """Dictionary-backed translator; unknown keys fall back to the key itself."""

    def __init__(self, table: Optional[Mapping[str, str]] = None) -> None:
        self.table: Dict[str, str] = dict(ENGLISH)
        self.table.update(table or {})

    def __call__(self, key: str, **fmt: object) -> str:
        text = self.table.get(key, key)
        return text.format(**fmt) if fmt else text
