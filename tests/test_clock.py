"""
Playback clock tests
"""

import pytest

from interactive_video.engine.clock import DEFAULT_TICK_INTERVAL, SimulatedClock


class TestSimulatedClock:

    def test_starts_paused_at_zero(self):
        clock = SimulatedClock()
        assert clock.paused
        assert clock.current_time() == 0

    def test_time_only_moves_while_playing(self):
        clock = SimulatedClock()
        clock.advance(5)
        assert clock.current_time() == 0

        clock.play()
        clock.advance(5)
        assert clock.current_time() == pytest.approx(5)

    def test_ticks_at_default_rate(self):
        clock = SimulatedClock()
        ticks = []
        clock.on_time_update(ticks.append)
        clock.play()

        clock.advance(1)

        assert DEFAULT_TICK_INTERVAL == 0.25
        assert ticks == [0.25, 0.5, 0.75, 1.0]

    def test_play_and_pause_are_idempotent(self):
        clock = SimulatedClock()
        plays, pauses = [], []
        clock.on_play(lambda: plays.append(1))
        clock.on_pause(lambda: pauses.append(1))

        clock.play()
        clock.play()
        clock.pause()
        clock.pause()

        assert clock.host_calls == ["play", "pause"]
        assert len(plays) == 1
        assert len(pauses) == 1

    def test_seek_clamps_and_notifies(self):
        clock = SimulatedClock(duration=60)
        ticks = []
        clock.on_time_update(ticks.append)

        clock.seek(-5)
        clock.seek(100)

        assert ticks == [0, 60]
        assert clock.host_calls == ["seek:0", "seek:60"]

    def test_end_of_media(self):
        clock = SimulatedClock(duration=1)
        ended = []
        clock.on_ended(lambda: ended.append(clock.current_time()))
        clock.play()

        clock.advance(10)

        assert ended == [1]
        assert clock.paused

    def test_pause_from_listener_stops_advance(self):
        clock = SimulatedClock()
        clock.on_time_update(lambda t: clock.pause() if t >= 0.5 else None)
        clock.play()

        clock.advance(5)

        assert clock.current_time() == pytest.approx(0.5)

    def test_reentrant_tick_is_coalesced(self):
        clock = SimulatedClock(duration=60)
        seen = []

        def listener(t):
            seen.append(t)
            if t == 0:
                # a seek while the first tick is still being handled
                clock.seek(10)
                clock.seek(20)

        clock.on_time_update(listener)
        clock.notify_time_update()

        assert seen == [0, 20]

    def test_unsubscribe(self):
        clock = SimulatedClock()
        ticks = []
        unsubscribe = clock.on_time_update(ticks.append)
        unsubscribe()
        unsubscribe()

        clock.seek(3)

        assert ticks == []

    def test_rejects_non_positive_tick_interval(self):
        with pytest.raises(ValueError):
            SimulatedClock(tick_interval=0)
