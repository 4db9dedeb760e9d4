from __future__ import annotations

from typing import Optional, Sequence

from roadquiz.questions.schema import Question


def make_question(
    qid: int,
    chapter: int = 1,
    stages: Sequence[int] = (1,),
    keyword: Optional[str] = "kw",
    answer: str = "right",
) -> Question:
    return Question(
        id=qid,
        chapter_level=chapter,
        text=f"Question {qid}?",
        options=(answer, "wrong 1", "wrong 2", "wrong 3"),
        correct_answer=answer,
        keyword=keyword,
        stages=tuple(stages),
    )


def make_questions(n: int, chapter: int = 1, start: int = 1, stages: Sequence[int] = (1,)) -> list[Question]:
    return [make_question(start + i, chapter=chapter, stages=stages) for i in range(n)]


CSV_HEADER = "id,chapterLevel,questionText,imageName,optionA,optionB,optionC,optionD,correctAnswer,explanation,keyword,type,stages\n"
