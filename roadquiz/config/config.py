from __future__ import annotations

"""Configuration loading and validation for roadquiz.

This module loads YAML configuration, applies defaults, and validates
values into pydantic models consumed by the engine and the CLI.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


DEFAULT_STAGE_COUNTS = [21, 21, 21, 21, 21]


class LayoutConfig(BaseModel):
    chapter_stage_counts: List[int] = Field(default_factory=lambda: list(DEFAULT_STAGE_COUNTS), min_length=1)

    @field_validator("chapter_stage_counts")
    @classmethod
    def _positive_counts(cls, v: List[int]) -> List[int]:
        if any(int(n) < 1 for n in v):
            raise ValueError("every chapter needs at least one stage")
        return [int(n) for n in v]


class RunConfig(BaseModel):
    max_lives: int = Field(5, ge=1)
    hints_per_stage: int = Field(3, ge=0)
    points_per_correct: int = Field(10, ge=0)
    combo_bonus_points: int = Field(0, ge=0)
    shuffle_questions: bool = True
    fallback_question_count: int = Field(10, ge=1)


class GradingConfig(BaseModel):
    """Grade thresholds on the ratio of correctly answered questions.

    - s_ratio..c_ratio: inclusive lower bounds, strictly descending
    - combo_bonus_ratio: max combo / total needed to lift a B or C one grade
    - low_lives: finishing with this many lives or fewer caps the grade at C
    """

    s_ratio: float = Field(1.0, gt=0, le=1)
    a_ratio: float = Field(0.9, gt=0, le=1)
    b_ratio: float = Field(0.8, gt=0, le=1)
    c_ratio: float = Field(0.6, gt=0, le=1)
    combo_bonus_ratio: float = Field(0.8, gt=0, le=1)
    low_lives: int = Field(1, ge=0)

    @model_validator(mode="after")
    def _descending(self) -> "GradingConfig":
        if not (self.s_ratio > self.a_ratio > self.b_ratio > self.c_ratio):
            raise ValueError("grade ratios must be strictly descending from S to C")
        return self


class ReviewConfig(BaseModel):
    wrong_ratio_default: float = Field(1.0, ge=0, le=1)
    full_ratio_default: float = Field(0.2, ge=0, le=1)
    mock_exam_counts: List[int] = Field(default_factory=lambda: [12, 8, 8, 6, 6])

    @field_validator("mock_exam_counts")
    @classmethod
    def _non_negative(cls, v: List[int]) -> List[int]:
        if any(int(n) < 0 for n in v):
            raise ValueError("mock exam counts must be >= 0")
        return [int(n) for n in v]


class StorageConfig(BaseModel):
    data_dir: str = "./progress"
    questions_path: Optional[str] = None


class GameConfig(BaseModel):
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    run: RunConfig = Field(default_factory=RunConfig)
    grading: GradingConfig = Field(default_factory=GradingConfig)
    review: ReviewConfig = Field(default_factory=ReviewConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    dev_tools: bool = False


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        print(f"ERROR: Config file not found: {path}", file=sys.stderr)
        sys.exit(1)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    if path:
        return _load_yaml(Path(path))
    return _load_yaml(Path(__file__).with_name("defaults.yml"))


def validate_config(cfg: Dict[str, Any]) -> GameConfig:
    """Apply defaults and validate configuration values.

    Sections that are not mappings are replaced by their defaults with a
    warning; anything else that does not validate raises a pydantic
    ValidationError.
    """
    cfg = dict(cfg or {})
    for section in ("layout", "run", "grading", "review", "storage"):
        value = cfg.get(section)
        if value is None:
            cfg.pop(section, None)
        elif not isinstance(value, dict):
            print(f"WARNING: Config section '{section}' is not a mapping, using defaults.")
            cfg.pop(section)

    layout = cfg.get("layout", {})
    review = cfg["review"] = dict(cfg.get("review", {}))
    counts = layout.get("chapter_stage_counts")
    mock = review.get("mock_exam_counts")
    if counts is not None and mock is not None and len(mock) > len(counts):
        print("WARNING: More mock exam counts than chapters, extra entries ignored.")
        review["mock_exam_counts"] = list(mock)[: len(counts)]

    return GameConfig.model_validate(cfg)


def default_config() -> GameConfig:
    return validate_config(load_config())
