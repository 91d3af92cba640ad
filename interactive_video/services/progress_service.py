"""
Server-side response resolution

Replays one viewer response against a stored progress document: the
document is loaded into an in-memory key-value store, the response handler
resolves the element, and the updated suspend data, lesson status and raw
score are read back out of the store.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from ..engine.errors import ElementNotFound
from ..engine.persistence import (
    LESSON_STATUS_KEY,
    SCORE_RAW_KEY,
    SUSPEND_DATA_KEY,
    InMemoryKeyValueStore,
    ProgressStore,
    ScormReporter,
)
from ..engine.responses import ResponseHandler
from ..engine.scheduler import unique_elements
from ..engine.scoring import completed_count, compute_score, lesson_status
from ..models.interaction import (
    InteractionSettings,
    InteractiveElement,
    LessonStatus,
    ProgressDocument,
    RespondRequest,
    RespondResponse,
    ViewerProgress,
)

logger = logging.getLogger(__name__)


@dataclass
class ResolvedProgress:
    result: RespondResponse
    document: ProgressDocument


def document_store(document: ProgressDocument) -> InMemoryKeyValueStore:
    """Key-value view of a stored progress document."""
    initial = {
        LESSON_STATUS_KEY: document.lessonStatus.value,
        SCORE_RAW_KEY: str(document.scoreRaw),
    }
    if document.suspendData:
        initial[SUSPEND_DATA_KEY] = document.suspendData
    return InMemoryKeyValueStore(initial)


def resolve_response(
    elements: Sequence[InteractiveElement],
    settings: InteractionSettings,
    document: ProgressDocument,
    request: RespondRequest,
) -> ResolvedProgress:
    """
    Resolve ``request`` against the viewer's stored progress

    Raises:
        ElementNotFound: the element id is not in the list
        AlreadyResolved: the element was resolved before
        InvalidOption: the option index does not fit the element
    """
    ordered = unique_elements(elements)
    element = next((e for e in ordered if e.id == request.elementId), None)
    if element is None:
        raise ElementNotFound(request.elementId)

    store = document_store(document)
    progress_store = ProgressStore(store)
    progress = progress_store.load() or ViewerProgress()
    if progress_store.corrupt_blob is not None:
        logger.warning("Replacing unreadable progress for element %s", request.elementId)

    handler = ResponseHandler(progress.completedInteractionIds, settings=settings)
    resolution = handler.resolve(
        element, option_index=request.optionIndex, value=request.value
    )

    current_time = progress.currentTime
    if request.currentTime is not None:
        current_time = request.currentTime
    progress_store.save(
        ViewerProgress(currentTime=current_time, completedInteractionIds=handler.completed_ids)
    )

    done = completed_count(ordered, handler.completed_ids)
    score = compute_score(done, len(ordered))
    status = lesson_status(done, len(ordered), attempted=True)
    ScormReporter(store, record_interactions=False).report(status, score)

    updated = ProgressDocument(
        suspendData=store.get(SUSPEND_DATA_KEY) or "",
        lessonStatus=LessonStatus(store.get(LESSON_STATUS_KEY)),
        scoreRaw=int(store.get(SCORE_RAW_KEY)),
    )
    result = RespondResponse(
        response=resolution.response,
        log=resolution.log,
        action=resolution.action,
        feedback=resolution.feedback,
        score=score,
        lessonStatus=status,
    )
    return ResolvedProgress(result=result, document=updated)
