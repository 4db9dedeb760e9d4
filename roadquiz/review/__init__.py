from .selector import (
    counts_from_list,
    select_full_review,
    select_mock_exam,
    select_wrong_question_review,
    uniform_ratios,
)

__all__ = [
    "counts_from_list",
    "select_full_review",
    "select_mock_exam",
    "select_wrong_question_review",
    "uniform_ratios",
]
