from __future__ import annotations

"""Question bank: CSV loading and in-memory filtering.

CSV contract (header row skipped):
    id, chapterLevel, questionText, imageName, optionA, optionB, optionC,
    optionD, correctAnswer, (ignored), keyword, type, stages

`stages` is a ';'-separated list, optionally quoted.
"""

import logging
import warnings
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd
from pydantic import ValidationError

from ..errors import DataLoadError, MalformedRowError
from .schema import Question

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "id",
    "chapter_level",
    "text",
    "image_name",
    "option_a",
    "option_b",
    "option_c",
    "option_d",
    "correct_answer",
    "ignored",
    "keyword",
    "type",
    "stages",
]
# Cells that must be non-empty; short rows fail here.
REQUIRED_COLUMNS = ["id", "chapter_level", "text", "option_a", "correct_answer"]
# Trailing fields past `stages` land here and are ignored.
OVERFLOW_COLUMNS = [f"extra_{i}" for i in range(1, 9)]
OPTION_COLUMNS = ["option_a", "option_b", "option_c", "option_d"]


def _cell(row: Dict[str, Any], name: str) -> Optional[str]:
    value = row.get(name)
    if not isinstance(value, str):
        return None
    return value.strip()


def parse_stages(raw: Optional[str]) -> List[int]:
    """Parse a ';'-separated stage list, dropping tokens that are not integers."""
    if not raw:
        return []
    out: List[int] = []
    for token in raw.strip().strip('"').split(";"):
        token = token.strip().strip('"')
        try:
            out.append(int(token))
        except ValueError:
            continue
    return out


def parse_row(row: Dict[str, Any], line: int) -> Question:
    """Turn one raw CSV row into a Question or raise MalformedRowError."""
    missing = [c for c in REQUIRED_COLUMNS if not _cell(row, c)]
    if missing:
        raise MalformedRowError(line, f"missing required field(s): {', '.join(missing)}")
    extra = [c for c in OVERFLOW_COLUMNS if _cell(row, c)]
    if extra:
        logger.warning("row %d: %d extra field(s) ignored", line, len(extra))
    try:
        qid = int(_cell(row, "id") or "")
        chapter = int(_cell(row, "chapter_level") or "")
    except ValueError:
        raise MalformedRowError(line, "id and chapterLevel must be integers") from None

    options = [o for o in (_cell(row, c) for c in OPTION_COLUMNS) if o]
    qtype_raw = _cell(row, "type")
    try:
        qtype = int(qtype_raw) if qtype_raw else 0
    except ValueError:
        qtype = 0

    try:
        return Question(
            id=qid,
            chapter_level=chapter,
            text=_cell(row, "text") or "",
            image_ref=_cell(row, "image_name"),
            options=tuple(options),
            correct_answer=_cell(row, "correct_answer") or "",
            keyword=_cell(row, "keyword"),
            question_type=qtype,
            stages=tuple(parse_stages(_cell(row, "stages"))),
        )
    except ValidationError as exc:
        raise MalformedRowError(line, str(exc.errors()[0].get("msg", exc))) from None


def read_question_rows(path: Path) -> List[Dict[str, Any]]:
    """Read raw rows from the CSV source as dicts keyed by CSV_COLUMNS.

    Rows too wide even for the overflow columns are skipped by pandas and
    logged here.
    """
    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", pd.errors.ParserWarning)
            df = pd.read_csv(
                path,
                header=None,
                names=CSV_COLUMNS + OVERFLOW_COLUMNS,
                skiprows=1,
                dtype=str,
                keep_default_na=False,
                index_col=False,
                on_bad_lines="warn",
                encoding="utf-8",
            )
    except FileNotFoundError:
        raise DataLoadError(f"question source not found: {path}") from None
    except pd.errors.EmptyDataError:
        raise DataLoadError(f"question source is empty: {path}") from None
    except (OSError, UnicodeDecodeError, pd.errors.ParserError) as exc:
        raise DataLoadError(f"question source unreadable: {path}: {exc}") from exc
    for w in caught:
        if issubclass(w.category, pd.errors.ParserWarning):
            logger.warning("Skipping question row: %s", str(w.message).strip())
    return df.to_dict(orient="records")


class QuestionBank:
    """Immutable collection of questions, loaded once at startup."""

    def __init__(self, questions: Iterable[Question] = ()) -> None:
        self._questions: List[Question] = []
        self._by_id: Dict[int, Question] = {}
        for q in questions:
            if q.id in self._by_id:
                logger.warning("Duplicate question id %s, keeping the first", q.id)
                continue
            self._by_id[q.id] = q
            self._questions.append(q)

    @classmethod
    def from_csv(cls, path: Path | str) -> "QuestionBank":
        """Load and validate every row; malformed rows are skipped and logged.

        Raises DataLoadError when the source is missing, unreadable, or holds
        no usable question.
        """
        rows = read_question_rows(Path(path))
        questions: List[Question] = []
        skipped = 0
        # Line 1 is the header.
        for i, row in enumerate(rows, start=2):
            try:
                questions.append(parse_row(row, i))
            except MalformedRowError as exc:
                skipped += 1
                logger.warning("Skipping question %s", exc)
        if not questions:
            raise DataLoadError(f"no usable questions in {path}")
        logger.info("Loaded %d questions from %s (%d skipped)", len(questions), path, skipped)
        return cls(questions)

    def __len__(self) -> int:
        return len(self._questions)

    def __iter__(self):
        return iter(self._questions)

    @property
    def is_empty(self) -> bool:
        return not self._questions

    def all(self) -> List[Question]:
        return list(self._questions)

    def get(self, question_id: int) -> Optional[Question]:
        return self._by_id.get(question_id)

    def by_ids(self, ids: Iterable[int]) -> List[Question]:
        wanted = set(ids)
        return [q for q in self._questions if q.id in wanted]

    def for_chapter(self, chapter: int) -> List[Question]:
        return [q for q in self._questions if q.chapter_level == chapter]

    def for_stage(self, stage: int) -> List[Question]:
        return [q for q in self._questions if stage in q.stages]

    def for_stages(self, stages: Sequence[int]) -> List[Question]:
        wanted = set(stages)
        return [q for q in self._questions if wanted.intersection(q.stages)]

    def chapter_counts(self) -> pd.DataFrame:
        """Per-chapter question counts, with how many carry an image or keyword."""
        if not self._questions:
            return pd.DataFrame(columns=["chapter", "questions", "with_image", "with_keyword"])
        df = pd.DataFrame(
            {
                "chapter": [q.chapter_level for q in self._questions],
                "with_image": [q.image_ref is not None for q in self._questions],
                "with_keyword": [q.keyword is not None for q in self._questions],
            }
        )
        out = df.groupby("chapter").agg(
            questions=("chapter", "size"),
            with_image=("with_image", "sum"),
            with_keyword=("with_keyword", "sum"),
        )
        return out.reset_index()


def load_questions(path: Path | str) -> QuestionBank:
    """Load the bank, degrading to an empty bank with a warning on DataLoadError."""
    try:
        return QuestionBank.from_csv(path)
    except DataLoadError as exc:
        logger.warning("Question bank unavailable, continuing empty: %s", exc)
        return QuestionBank()
