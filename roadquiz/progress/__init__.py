from .schema import Evaluation, ProgressState, StageResult, rank_value
from .kv import JsonDirStore, KeyValueStore, MemoryStore
from .store import ProgressStore

__all__ = [
    "Evaluation",
    "ProgressState",
    "StageResult",
    "rank_value",
    "JsonDirStore",
    "KeyValueStore",
    "MemoryStore",
    "ProgressStore",
]
