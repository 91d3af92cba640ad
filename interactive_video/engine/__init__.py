"""Playback and authoring engine for interactive videos.

Framework-free: the HTTP layer, the SCORM exporter and the tests all drive
these classes directly.
"""

from .clock import PlaybackClock, SimulatedClock
from .editor import EditorState
from .errors import (
    AlreadyResolved,
    CorruptProgress,
    ElementNotFound,
    EngineError,
    InvalidOption,
    NoSelection,
    PersistenceUnavailable,
)
from .persistence import (
    InMemoryKeyValueStore,
    ProgressStore,
    RestKeyValueStore,
    ScormApiStore,
    ScormReporter,
)
from .responses import Resolution, ResponseHandler, parse_jump_action
from .scheduler import InteractionScheduler, SchedulerPass, evaluate
from .scoring import compute_score, lesson_status
from .session import PlaybackSession

__all__ = [
    "AlreadyResolved",
    "CorruptProgress",
    "EditorState",
    "ElementNotFound",
    "EngineError",
    "InMemoryKeyValueStore",
    "InteractionScheduler",
    "InvalidOption",
    "NoSelection",
    "PersistenceUnavailable",
    "PlaybackClock",
    "PlaybackSession",
    "ProgressStore",
    "Resolution",
    "ResponseHandler",
    "RestKeyValueStore",
    "SchedulerPass",
    "ScormApiStore",
    "ScormReporter",
    "SimulatedClock",
    "compute_score",
    "evaluate",
    "lesson_status",
    "parse_jump_action",
]
