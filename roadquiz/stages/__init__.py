from .layout import Boss, ChapterLayout, Normal, Review, StageType

__all__ = ["Boss", "ChapterLayout", "Normal", "Review", "StageType"]
