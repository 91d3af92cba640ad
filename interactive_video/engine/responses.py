"""Response handler.

Records a viewer's answer against an element, scores it, appends to the
interaction log and decides whether playback resumes now or waits for the
viewer to dismiss feedback.

Scoring is one resolver per element type (``_RESOLVERS``); a new element type
means one new resolver.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..models.interaction import (
    ElementOption,
    ElementType,
    InteractionLogRecord,
    InteractionResponse,
    InteractionResult,
    InteractionSettings,
    InteractiveElement,
)
from .clock import PlaybackClock
from .errors import AlreadyResolved, InvalidOption

logger = logging.getLogger(__name__)

_JUMP_ACTION = re.compile(r"^\s*jump\s*:\s*(\d+(?:\.\d+)?)\s*$")


def parse_jump_action(action: Optional[str]) -> Optional[float]:
    """Return the target of a ``jump:<seconds>`` action, else ``None``."""
    if not action:
        return None
    match = _JUMP_ACTION.match(action)
    if not match:
        return None
    return float(match.group(1))


@dataclass
class Resolution:
    response: InteractionResponse
    log: InteractionLogRecord
    action: Optional[str] = None
    feedback: Optional[str] = None
    resumed: bool = False
    held: bool = False


# (result, scoreDelta, action)
Outcome = Tuple[InteractionResult, int, Optional[str]]
Resolver = Callable[[InteractiveElement, Optional[ElementOption]], Outcome]


def _resolve_quiz(element: InteractiveElement, option: Optional[ElementOption]) -> Outcome:
    if option is not None and option.isCorrect:
        return InteractionResult.CORRECT, 1, None
    return InteractionResult.INCORRECT, 0, None


def _resolve_decision(element: InteractiveElement, option: Optional[ElementOption]) -> Outcome:
    return InteractionResult.NEUTRAL, 0, option.action if option else None


def _resolve_engagement(element: InteractiveElement, option: Optional[ElementOption]) -> Outcome:
    return InteractionResult.NEUTRAL, 1, None


_RESOLVERS: Dict[ElementType, Resolver] = {
    ElementType.QUIZ: _resolve_quiz,
    ElementType.DECISION: _resolve_decision,
    ElementType.HOTSPOT: _resolve_engagement,
    ElementType.POLL: _resolve_engagement,
}


class ResponseHandler:
    """Owns the completed ids and the interaction log of one viewer session."""

    def __init__(
        self,
        completed_ids: Optional[Iterable[str]] = None,
        settings: Optional[InteractionSettings] = None,
        clock: Optional[PlaybackClock] = None,
        resume_guard: Optional[Callable[[str], bool]] = None,
    ):
        self.settings = settings or InteractionSettings()
        self.clock = clock
        # Returns False while something other than the element keeps playback paused
        self.resume_guard = resume_guard
        self._completed: Dict[str, None] = dict.fromkeys(completed_ids or ())
        self.interaction_log: List[InteractionLogRecord] = []
        self.points = 0
        self._held: Dict[str, None] = {}

    @property
    def completed_ids(self) -> List[str]:
        return list(self._completed)

    def is_completed(self, element_id: str) -> bool:
        return element_id in self._completed

    def is_held(self, element_id: str) -> bool:
        return element_id in self._held

    def restore(self, completed_ids: Iterable[str]) -> None:
        """Seed completions loaded from saved progress."""
        for element_id in completed_ids:
            self._completed.setdefault(element_id, None)

    def reset(self, element_id: str) -> None:
        """Forget a completion so the element can be shown again."""
        self._completed.pop(element_id, None)
        self._held.pop(element_id, None)

    def resolve(
        self,
        element: InteractiveElement,
        option_index: Optional[int] = None,
        value: Optional[str] = None,
        paused_playback: bool = False,
    ) -> Resolution:
        if element.id in self._completed:
            logger.warning("Ignoring response for resolved element %s", element.id)
            raise AlreadyResolved(element.id)

        option = self._pick_option(element, option_index)
        result, delta, action = _RESOLVERS[element.type](element, option)

        if option_index is not None:
            student_response = str(option_index)
        else:
            student_response = value or ""
        correct_response = ""
        if element.type == ElementType.QUIZ:
            correct_index = element.correct_option_index()
            correct_response = "" if correct_index is None else str(correct_index)

        response = InteractionResponse(
            elementId=element.id,
            optionIndex=option_index,
            value=value,
            result=result,
            scoreDelta=delta,
        )
        return self._complete(
            element, response, student_response, correct_response, action, paused_playback
        )

    def skip(self, element: InteractiveElement, paused_playback: bool = False) -> Resolution:
        """Resolve an element without answering it."""
        if element.id in self._completed:
            logger.warning("Ignoring skip for resolved element %s", element.id)
            raise AlreadyResolved(element.id)
        if not self.settings.allowSkipping:
            raise InvalidOption(f"Skipping is disabled; element {element.id} needs an answer")

        response = InteractionResponse(
            elementId=element.id, result=InteractionResult.NEUTRAL, scoreDelta=0
        )
        return self._complete(element, response, "", "", None, paused_playback)

    def continue_playback(self, element_id: str) -> bool:
        """Viewer dismissed the feedback of ``element_id``: resume playback."""
        if element_id not in self._held:
            return False
        del self._held[element_id]
        self._resume(element_id)
        return True

    def _resume(self, element_id: str) -> bool:
        if self.resume_guard is not None and not self.resume_guard(element_id):
            logger.debug("Resume after %s deferred, another element holds the pause", element_id)
            return False
        if self.clock is not None:
            self.clock.play()
        return True

    def _pick_option(
        self, element: InteractiveElement, option_index: Optional[int]
    ) -> Optional[ElementOption]:
        if option_index is None:
            if element.requires_option:
                raise InvalidOption(f"Element {element.id} requires an option index")
            return None
        if isinstance(option_index, bool) or not isinstance(option_index, int):
            raise InvalidOption(f"Option index must be an integer, got {option_index!r}")
        if not 0 <= option_index < len(element.options):
            raise InvalidOption(
                f"Option index {option_index} out of range for element {element.id} "
                f"({len(element.options)} options)"
            )
        return element.options[option_index]

    def _complete(
        self,
        element: InteractiveElement,
        response: InteractionResponse,
        student_response: str,
        correct_response: str,
        action: Optional[str],
        paused_playback: bool,
    ) -> Resolution:
        self._completed[element.id] = None
        self.points += response.scoreDelta

        record = InteractionLogRecord(
            id=element.id,
            type=element.type.value,
            result=response.result.value,
            studentResponse=student_response,
            correctResponse=correct_response,
        )
        self.interaction_log.append(record)

        feedback = None
        if self.settings.showFeedback and element.feedback is not None:
            feedback = element.feedback.message_for(response.result)

        resolution = Resolution(response=response, log=record, action=action, feedback=feedback)
        if paused_playback:
            if feedback and not self.settings.autoAdvance:
                self._held[element.id] = None
                resolution.held = True
            else:
                resolution.resumed = self._resume(element.id)

        logger.info(
            "Resolved %s %s: %s (+%d)",
            element.type.value, element.id, response.result.value, response.scoreDelta,
        )
        return resolution
