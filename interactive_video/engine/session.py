"""Playback session.

One ``PlaybackSession`` per viewer per video. It owns the session-scoped
state (active set, completions, interaction log, save bookkeeping) and wires
the clock's events to the scheduler, the response handler and the progress
store:

    tick -> scheduler pass -> enter (maybe pause) -> respond -> resume/hold
         -> save on resolution, on pause, on end and every ``save_interval``
            seconds of media time

Persistence failures never stop playback; the session keeps going in memory
and flags itself ``unsaved`` until a later save succeeds.
"""
from __future__ import annotations

import logging
import os
from typing import Callable, List, Optional, Sequence, Tuple

from ..models.interaction import (
    InteractionLogRecord,
    InteractionSettings,
    InteractiveElement,
    LessonStatus,
    ViewerProgress,
)
from .clock import PlaybackClock
from .errors import ElementNotFound, PersistenceUnavailable
from .persistence import ProgressStore, ScormReporter
from .responses import Resolution, ResponseHandler, parse_jump_action
from .scheduler import InteractionScheduler, unique_elements
from .scoring import completed_count, compute_score, lesson_status

logger = logging.getLogger(__name__)

DEFAULT_SAVE_INTERVAL = float(os.getenv("PROGRESS_SAVE_INTERVAL", "5"))


class PlaybackSession:
    def __init__(
        self,
        clock: PlaybackClock,
        elements: Sequence[InteractiveElement],
        progress_store: Optional[ProgressStore] = None,
        settings: Optional[InteractionSettings] = None,
        reporter: Optional[ScormReporter] = None,
        save_interval: float = DEFAULT_SAVE_INTERVAL,
    ):
        self.clock = clock
        self.settings = settings or InteractionSettings()
        self.progress_store = progress_store
        self.reporter = reporter
        self.save_interval = save_interval
        self.scheduler = InteractionScheduler(clock, self.settings)
        self.handler = ResponseHandler(
            settings=self.settings,
            clock=clock,
            resume_guard=lambda element_id: not self.scheduler.pause_held_by_other(element_id),
        )
        self._elements: Tuple[InteractiveElement, ...] = tuple(elements)
        self._last_save_time: Optional[float] = None
        self._unsubscribe: List[Callable[[], None]] = []
        self.started = False
        self.ended = False
        self.unsaved = False

    # Element list -----------------------------------------------------------
    @property
    def elements(self) -> Tuple[InteractiveElement, ...]:
        return self._elements

    def set_elements(self, elements: Sequence[InteractiveElement]) -> None:
        """Swap in a new element list (live preview while editing)."""
        self._elements = tuple(elements)

    def _find(self, element_id: str) -> InteractiveElement:
        for element in self._elements:
            if element.id == element_id:
                return element
        raise ElementNotFound(element_id)

    # Derived state ----------------------------------------------------------
    @property
    def active_ids(self) -> Tuple[str, ...]:
        return self.scheduler.active_ids

    @property
    def completed_ids(self) -> List[str]:
        return self.handler.completed_ids

    @property
    def interaction_log(self) -> List[InteractionLogRecord]:
        return self.handler.interaction_log

    @property
    def progress(self) -> ViewerProgress:
        return ViewerProgress(
            currentTime=self.clock.current_time(),
            completedInteractionIds=self.handler.completed_ids,
        )

    def _counts(self) -> Tuple[int, int]:
        elements = unique_elements(self._elements)
        return completed_count(elements, self.handler.completed_ids), len(elements)

    @property
    def score(self) -> int:
        return compute_score(*self._counts())

    @property
    def lesson_status(self) -> LessonStatus:
        done, total = self._counts()
        return lesson_status(done, total, attempted=self.started, ended=self.ended)

    # Lifecycle --------------------------------------------------------------
    def start(self, autoplay: bool = False) -> Optional[ViewerProgress]:
        """Restore saved progress, hook the clock and run the first pass."""
        progress = self._load()
        if progress is not None:
            self.handler.restore(progress.completedInteractionIds)

        self._unsubscribe = [
            self.clock.on_time_update(self._on_time_update),
            self.clock.on_pause(self._on_pause),
            self.clock.on_ended(self._on_ended),
        ]
        self.started = True

        if progress is not None and progress.currentTime > 0:
            self.clock.seek(progress.currentTime)
        else:
            self._on_time_update(self.clock.current_time())
        self._report()

        if autoplay:
            self.clock.play()
        return progress

    def close(self) -> None:
        """Final save and teardown; the session is unusable afterwards."""
        self.save()
        self._report()
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
        self.scheduler.clear()

    # Viewer actions ---------------------------------------------------------
    def respond(
        self,
        element_id: str,
        option_index: Optional[int] = None,
        value: Optional[str] = None,
    ) -> Resolution:
        element = self._find(element_id)
        resolution = self.handler.resolve(
            element,
            option_index=option_index,
            value=value,
            paused_playback=self.scheduler.paused_for(element_id),
        )
        self._after_resolution(element_id, resolution)
        return resolution

    def skip(self, element_id: str) -> Resolution:
        element = self._find(element_id)
        resolution = self.handler.skip(
            element, paused_playback=self.scheduler.paused_for(element_id)
        )
        self._after_resolution(element_id, resolution)
        return resolution

    def continue_playback(self, element_id: str) -> bool:
        """Dismiss held feedback for ``element_id`` and resume."""
        if not self.handler.continue_playback(element_id):
            return False
        self.scheduler.dismiss(element_id)
        return True

    def reset_element(self, element_id: str) -> None:
        """Administrative reset: the element may activate again."""
        self.handler.reset(element_id)
        self.scheduler.reset(element_id)

    def seek(self, seconds: float) -> float:
        target = max(0.0, float(seconds))
        if self.settings.preventSkipping:
            target = self._clamp_forward_seek(self.clock.current_time(), target)
        self.clock.seek(target)
        return target

    def perform_action(self, action: Optional[str]) -> bool:
        """Carry out a decision action; only ``jump:<seconds>`` is known."""
        target = parse_jump_action(action)
        if target is None:
            if action:
                logger.warning("Unknown element action %r ignored", action)
            return False
        self.seek(target)
        return True

    # Persistence ------------------------------------------------------------
    def save(self) -> bool:
        if self.progress_store is None:
            return False
        progress = self.progress
        try:
            self.progress_store.save(progress)
        except PersistenceUnavailable as exc:
            logger.warning("Progress not saved, continuing unsaved: %s", exc)
            self.unsaved = True
            return False
        self.unsaved = False
        self._last_save_time = progress.currentTime
        return True

    def _load(self) -> Optional[ViewerProgress]:
        if self.progress_store is None:
            return None
        try:
            return self.progress_store.load()
        except PersistenceUnavailable as exc:
            logger.warning("Progress unavailable, starting fresh: %s", exc)
            self.unsaved = True
            return None

    def _report(self) -> None:
        if self.reporter is None:
            return
        try:
            self.reporter.report(self.lesson_status, self.score, self.handler.interaction_log)
        except PersistenceUnavailable as exc:
            logger.warning("Status not reported: %s", exc)
            self.unsaved = True

    # Clock events -----------------------------------------------------------
    def _on_time_update(self, current_time: float) -> None:
        elements = self._elements
        self.scheduler.update(current_time, elements, self.handler.completed_ids)

        if self._last_save_time is None or current_time < self._last_save_time:
            self._last_save_time = current_time
        elif current_time - self._last_save_time >= self.save_interval:
            self.save()

    def _on_pause(self) -> None:
        self.save()

    def _on_ended(self) -> None:
        self.ended = True
        self.save()
        self._report()

    # Internals --------------------------------------------------------------
    def _after_resolution(self, element_id: str, resolution: Resolution) -> None:
        if not resolution.held:
            self.scheduler.dismiss(element_id)
        self.save()
        self._report()

    def _clamp_forward_seek(self, current: float, target: float) -> float:
        if target <= current:
            return target
        blocking = [
            e for e in unique_elements(self._elements)
            if not self.handler.is_completed(e.id) and current < e.end <= target
        ]
        if not blocking:
            return target
        first = min(blocking, key=lambda e: e.timestamp)
        clamped = max(current, first.timestamp)
        logger.info("Seek to %.2fs clamped to %.2fs by %s", target, clamped, first.id)
        return clamped
