"""roadquiz: driving-theory quiz engine.

Stage progression, scoring and review selection for a chapter/stage quiz
game. Presentation layers build a `QuizGame` and drive runs through it.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
