"""Score and lesson status derived from completion state."""
from __future__ import annotations

import math
from typing import Iterable, Sequence

from ..models.interaction import InteractiveElement, LessonStatus


def completed_count(
    elements: Sequence[InteractiveElement], completed_ids: Iterable[str]
) -> int:
    """Number of elements in the list whose id is completed."""
    completed = set(completed_ids)
    return len({e.id for e in elements} & completed)


def compute_score(completed: int, total: int) -> int:
    """Percentage of completed elements, rounded half up (0 when empty)."""
    if total <= 0:
        return 0
    return int(math.floor(100 * completed / total + 0.5))


def lesson_status(
    completed: int, total: int, attempted: bool, ended: bool = False
) -> LessonStatus:
    if total > 0 and completed >= total:
        return LessonStatus.COMPLETED
    if total == 0 and ended:
        return LessonStatus.COMPLETED
    if attempted:
        return LessonStatus.INCOMPLETE
    return LessonStatus.NOT_ATTEMPTED
