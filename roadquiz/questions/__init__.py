from .schema import Question
from .bank import QuestionBank, load_questions, parse_row, parse_stages

__all__ = [
    "Question",
    "QuestionBank",
    "load_questions",
    "parse_row",
    "parse_stages",
]
