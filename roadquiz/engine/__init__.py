from .grading import grade_run
from .scoring import RunState, ScoringEngine

__all__ = ["grade_run", "RunState", "ScoringEngine"]
