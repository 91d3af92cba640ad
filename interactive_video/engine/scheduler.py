"""Interaction scheduler.

Decides, for the current playback time, which interactive elements are
active. ``evaluate`` is the pure core; ``InteractionScheduler`` keeps the
active set between passes, fires enter/exit listeners and pauses the clock
once per entry when the element asks for it.

Rules:
- an active element exits as soon as the time leaves its window (or the
  element disappears from the list);
- an element enters when the time is inside its window, it is not already
  active and it is not completed;
- overlapping windows activate together, in element-list order;
- ids are unique per pass, the first occurrence of a duplicated id wins.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..models.interaction import InteractionSettings, InteractiveElement
from .clock import PlaybackClock

logger = logging.getLogger(__name__)

EnterListener = Callable[[InteractiveElement], None]
ExitListener = Callable[[str], None]


@dataclass(frozen=True)
class SchedulerPass:
    active: Tuple[str, ...]
    entered: Tuple[InteractiveElement, ...]
    exited: Tuple[str, ...]


def unique_elements(elements: Iterable[InteractiveElement]) -> List[InteractiveElement]:
    """Drop later elements that reuse an id already seen (first wins)."""
    seen: Set[str] = set()
    unique = []
    for element in elements:
        if element.id in seen:
            logger.warning("Duplicate element id %r ignored", element.id)
            continue
        seen.add(element.id)
        unique.append(element)
    return unique


def evaluate(
    current_time: float,
    elements: Sequence[InteractiveElement],
    completed_ids: Iterable[str],
    active_ids: Sequence[str],
) -> SchedulerPass:
    """Compute the next active set for ``current_time``."""
    ordered = unique_elements(elements)
    by_id: Dict[str, InteractiveElement] = {e.id: e for e in ordered}
    completed = set(completed_ids)

    active: List[str] = []
    exited: List[str] = []
    for element_id in active_ids:
        element = by_id.get(element_id)
        if element is None or not element.is_active_at(current_time):
            exited.append(element_id)
        elif element_id not in active:
            active.append(element_id)

    entered: List[InteractiveElement] = []
    for element in ordered:
        if element.id in active or element.id in completed:
            continue
        if element.is_active_at(current_time):
            entered.append(element)
            active.append(element.id)

    return SchedulerPass(tuple(active), tuple(entered), tuple(exited))


class InteractionScheduler:
    """Stateful wrapper around ``evaluate`` bound to a playback clock."""

    def __init__(
        self,
        clock: Optional[PlaybackClock] = None,
        settings: Optional[InteractionSettings] = None,
    ):
        self.clock = clock
        self.settings = settings or InteractionSettings()
        self._active: List[str] = []
        self._paused_by: Set[str] = set()
        self._enter_listeners: List[EnterListener] = []
        self._exit_listeners: List[ExitListener] = []

    @property
    def active_ids(self) -> Tuple[str, ...]:
        return tuple(self._active)

    def on_enter(self, callback: EnterListener) -> None:
        self._enter_listeners.append(callback)

    def on_exit(self, callback: ExitListener) -> None:
        self._exit_listeners.append(callback)

    def should_pause(self, element: InteractiveElement) -> bool:
        if element.pauseVideo is not None:
            return element.pauseVideo
        return self.settings.pauseOnInteraction

    def paused_for(self, element_id: str) -> bool:
        """Whether entering ``element_id`` paused playback."""
        return element_id in self._paused_by

    def pause_held_by_other(self, element_id: str) -> bool:
        """Whether another active element still keeps playback paused."""
        return any(other != element_id for other in self._paused_by)

    def update(
        self,
        current_time: float,
        elements: Sequence[InteractiveElement],
        completed_ids: Iterable[str],
    ) -> SchedulerPass:
        result = evaluate(current_time, elements, completed_ids, self._active)
        self._active = list(result.active)

        for element_id in result.exited:
            self._paused_by.discard(element_id)
            for listener in list(self._exit_listeners):
                listener(element_id)

        for element in result.entered:
            logger.debug("Element %s entered at %.2fs", element.id, current_time)
            for listener in list(self._enter_listeners):
                listener(element)
            if self.should_pause(element):
                self._paused_by.add(element.id)
                if self.clock is not None:
                    self.clock.pause()

        return result

    def dismiss(self, element_id: str) -> bool:
        """Remove a resolved element from the active set."""
        if element_id not in self._active:
            return False
        self._active.remove(element_id)
        self._paused_by.discard(element_id)
        for listener in list(self._exit_listeners):
            listener(element_id)
        return True

    def reset(self, element_id: str) -> None:
        """Forget ``element_id`` so the next pass may enter it again."""
        self.dismiss(element_id)

    def clear(self) -> None:
        for element_id in list(self._active):
            self.dismiss(element_id)
