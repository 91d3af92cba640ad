"""Playback clock adapter.

Wraps whatever is actually playing the media behind one interface:
``current_time()``, ``play()``, ``pause()``, ``seek()`` and listener
subscriptions for time updates, play, pause and end of media.

Subclasses implement the ``_host_*`` hooks. ``SimulatedClock`` is a
deterministic host used for server-side previews and tests; it ticks at
``DEFAULT_TICK_INTERVAL`` (4 Hz).
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL = 0.25

TimeListener = Callable[[float], None]
EventListener = Callable[[], None]


class PlaybackClock:
    """Uniform playback interface over a host player.

    ``play()`` and ``pause()`` are idempotent: the host is only touched when
    the state actually changes. A time update that arrives while listeners
    are still handling the previous one is coalesced: listeners run once more
    afterwards with the latest time only.
    """

    def __init__(self) -> None:
        self._paused = True
        self._time_listeners: List[TimeListener] = []
        self._play_listeners: List[EventListener] = []
        self._pause_listeners: List[EventListener] = []
        self._ended_listeners: List[EventListener] = []
        self._dispatching = False
        self._pending_time: Optional[float] = None

    # Host hooks -------------------------------------------------------------
    def _host_time(self) -> float:
        raise NotImplementedError

    def _host_play(self) -> None:
        raise NotImplementedError

    def _host_pause(self) -> None:
        raise NotImplementedError

    def _host_seek(self, seconds: float) -> None:
        raise NotImplementedError

    # Public interface -------------------------------------------------------
    def current_time(self) -> float:
        return self._host_time()

    @property
    def paused(self) -> bool:
        return self._paused

    def play(self) -> None:
        if not self._paused:
            return
        self._host_play()
        self._paused = False
        self._emit(self._play_listeners)

    def pause(self) -> None:
        if self._paused:
            return
        self._host_pause()
        self._paused = True
        self._emit(self._pause_listeners)

    def seek(self, seconds: float) -> None:
        self._host_seek(max(0.0, float(seconds)))
        self.notify_time_update()

    def on_time_update(self, callback: TimeListener) -> Callable[[], None]:
        return self._subscribe(self._time_listeners, callback)

    def on_play(self, callback: EventListener) -> Callable[[], None]:
        return self._subscribe(self._play_listeners, callback)

    def on_pause(self, callback: EventListener) -> Callable[[], None]:
        return self._subscribe(self._pause_listeners, callback)

    def on_ended(self, callback: EventListener) -> Callable[[], None]:
        return self._subscribe(self._ended_listeners, callback)

    def notify_time_update(self) -> None:
        """Deliver the host's current time to time-update listeners."""
        self._pending_time = self.current_time()
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._pending_time is not None:
                seconds = self._pending_time
                self._pending_time = None
                for listener in list(self._time_listeners):
                    listener(seconds)
        finally:
            self._dispatching = False

    def notify_ended(self) -> None:
        self._paused = True
        self._emit(self._ended_listeners)

    # Internals --------------------------------------------------------------
    @staticmethod
    def _subscribe(listeners: list, callback) -> Callable[[], None]:
        listeners.append(callback)

        def unsubscribe() -> None:
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    @staticmethod
    def _emit(listeners: List[EventListener]) -> None:
        for listener in list(listeners):
            listener()


class SimulatedClock(PlaybackClock):
    """In-process media host driven by ``advance()``.

    Time only moves while playing. Ticks are emitted every ``tick_interval``
    seconds of media time, and end of media is signalled once ``duration``
    is reached.
    """

    def __init__(
        self,
        duration: Optional[float] = None,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
    ) -> None:
        super().__init__()
        if tick_interval <= 0:
            raise ValueError("tick_interval must be positive")
        self.duration = duration
        self.tick_interval = tick_interval
        self._time = 0.0
        self.host_calls: List[str] = []

    def _host_time(self) -> float:
        return self._time

    def _host_play(self) -> None:
        self.host_calls.append("play")

    def _host_pause(self) -> None:
        self.host_calls.append("pause")

    def _host_seek(self, seconds: float) -> None:
        if self.duration is not None:
            seconds = min(seconds, self.duration)
        self.host_calls.append(f"seek:{seconds:g}")
        self._time = seconds

    def advance(self, seconds: float) -> None:
        """Play forward ``seconds`` of media time, ticking along the way."""
        remaining = seconds
        while remaining > 1e-9 and not self.paused:
            step = min(self.tick_interval, remaining)
            self._time = round(self._time + step, 6)
            remaining -= step
            if self.duration is not None and self._time >= self.duration:
                self._time = self.duration
                self.notify_time_update()
                logger.debug("Simulated media reached end at %.2fs", self._time)
                self.notify_ended()
                return
            self.notify_time_update()
