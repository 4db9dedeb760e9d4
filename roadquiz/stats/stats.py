from __future__ import annotations

"""Run and progress summaries: pandas tables and human-readable text."""

from typing import List

import pandas as pd

from ..engine.scoring import ScoringEngine
from ..progress.store import ProgressStore
from ..stages.layout import ChapterLayout


PROGRESS_COLUMNS = ["stage", "chapter", "stage_in_chapter", "type", "unlocked", "grade", "correct", "total", "max_combo"]


def progress_frame(store: ProgressStore, layout: ChapterLayout) -> pd.DataFrame:
    """One row per stage with its type, lock state, and best result."""
    rows: List[dict] = []
    for stage in range(1, layout.total_stages + 1):
        chapter, in_chapter = layout.chapter_and_stage_in_chapter(stage)
        res = store.get_result(stage)
        rows.append(
            {
                "stage": stage,
                "chapter": chapter,
                "stage_in_chapter": in_chapter,
                "type": layout.stage_type(stage).kind,
                "unlocked": store.is_stage_unlocked(stage),
                "grade": res.evaluation.value if res else None,
                "correct": res.correctly_answered if res else pd.NA,
                "total": res.total_questions if res else pd.NA,
                "max_combo": res.max_combo if res else pd.NA,
            }
        )
    df = pd.DataFrame(rows, columns=PROGRESS_COLUMNS)
    for col in ("correct", "total", "max_combo"):
        df[col] = df[col].astype("Int64")
    return df


def chapter_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Per-chapter counts of cleared stages and grade distribution."""
    cleared = df["grade"].notna() & (df["grade"] != "F")
    out = (
        df.assign(cleared=cleared)
        .groupby("chapter")
        .agg(stages=("stage", "size"), cleared=("cleared", "sum"), unlocked=("unlocked", "sum"))
    )
    graded = df.dropna(subset=["grade"])
    if not graded.empty:
        grades = graded.pivot_table(index="chapter", columns="grade", values="stage", aggfunc="count")
        out = out.join(grades, how="left")
    return out.fillna(0).astype(int).reset_index()


def format_run_summary(engine: ScoringEngine) -> str:
    """Return a human-readable summary of a finished run."""
    s = engine.state
    lines = [
        f"Grade: {engine.final_evaluation().value}",
        f"Correct: {s.correctly_answered_count}/{engine.total_questions}",
        f"Max combo: {s.max_combo_achieved}",
        f"Score: {s.score}",
        f"Lives left: {s.lives}",
    ]
    if s.hints_used_this_run:
        lines.append(f"Hints used: {s.hints_used_this_run}")
    return "\n".join(lines)


def format_progress(store: ProgressStore, layout: ChapterLayout) -> str:
    df = chapter_summary(progress_frame(store, layout))
    lines = [
        f"Unlocked: chapter {store.highest_unlocked_chapter}, stage {store.highest_unlocked_stage}",
        f"Wrong-answer bank: {len(store.wrong_question_ids)} question(s)",
    ]
    for row in df.itertuples(index=False):
        lines.append(f"Chapter {row.chapter}: {row.cleared}/{row.stages} cleared")
    return "\n".join(lines)
