"""
Interaction scheduler tests
"""

import pytest

from interactive_video.engine.clock import SimulatedClock
from interactive_video.engine.scheduler import InteractionScheduler, evaluate, unique_elements
from interactive_video.models.interaction import InteractionSettings, InteractiveElement


def hotspot(element_id: str, start: float, duration: float, **extra) -> InteractiveElement:
    return InteractiveElement(id=element_id, type="hotspot", timestamp=start, duration=duration, **extra)


class TestEvaluate:
    """Pure scheduler pass"""

    def test_quiz_enters_inside_window(self, quiz_element):
        result = evaluate(35, [quiz_element], [], [])
        assert result.active == ("q1",)
        assert [e.id for e in result.entered] == ["q1"]
        assert result.exited == ()

    def test_window_is_half_open(self, quiz_element):
        assert evaluate(30, [quiz_element], [], []).active == ("q1",)
        assert evaluate(40, [quiz_element], [], []).active == ()
        assert evaluate(29.99, [quiz_element], [], []).active == ()

    def test_overlapping_windows_activate_together_in_list_order(self):
        a = hotspot("a", 10, 15)
        b = hotspot("b", 20, 10)
        result = evaluate(22, [a, b], [], [])
        assert result.active == ("a", "b")
        assert [e.id for e in result.entered] == ["a", "b"]

    def test_already_active_element_does_not_re_enter(self, quiz_element):
        result = evaluate(36, [quiz_element], [], ["q1"])
        assert result.active == ("q1",)
        assert result.entered == ()

    def test_completed_element_never_enters(self, quiz_element):
        result = evaluate(35, [quiz_element], ["q1"], [])
        assert result.active == ()
        assert result.entered == ()

    def test_seek_past_window_exits_element(self):
        element = hotspot("h", 10, 10)
        result = evaluate(100, [element], [], ["h"])
        assert result.active == ()
        assert result.exited == ("h",)

    def test_seek_past_window_without_prior_activation_never_enters(self):
        element = hotspot("h", 10, 10)
        result = evaluate(100, [element], [], [])
        assert result.entered == ()
        assert result.exited == ()

    def test_removed_element_exits(self, quiz_element):
        result = evaluate(35, [], [], ["q1"])
        assert result.exited == ("q1",)
        assert result.active == ()

    def test_empty_list(self):
        result = evaluate(10, [], [], [])
        assert result.active == ()
        assert result.entered == ()

    def test_duplicate_ids_first_occurrence_wins(self):
        first = hotspot("dup", 0, 5, title="first")
        second = hotspot("dup", 0, 5, title="second")
        result = evaluate(1, [first, second], [], [])
        assert result.active == ("dup",)
        assert [e.title for e in result.entered] == ["first"]
        assert unique_elements([first, second]) == [first]


class TestInteractionScheduler:
    """Stateful scheduler bound to a clock"""

    def test_entry_pauses_clock_once(self, quiz_element):
        clock = SimulatedClock(duration=60)
        clock.play()
        scheduler = InteractionScheduler(clock)

        scheduler.update(35, [quiz_element], [])
        scheduler.update(35.25, [quiz_element], [])

        assert clock.paused
        assert clock.host_calls.count("pause") == 1
        assert scheduler.paused_for("q1")

    def test_element_pause_flag_overrides_settings(self):
        clock = SimulatedClock()
        clock.play()
        scheduler = InteractionScheduler(clock, InteractionSettings(pauseOnInteraction=True))

        scheduler.update(1, [hotspot("quiet", 0, 5, pauseVideo=False)], [])

        assert not clock.paused
        assert not scheduler.paused_for("quiet")

    def test_settings_disable_pausing(self):
        clock = SimulatedClock()
        clock.play()
        scheduler = InteractionScheduler(clock, InteractionSettings(pauseOnInteraction=False))

        scheduler.update(1, [hotspot("h", 0, 5)], [])

        assert not clock.paused

    def test_enter_and_exit_listeners(self):
        entered, exited = [], []
        scheduler = InteractionScheduler()
        scheduler.on_enter(lambda element: entered.append(element.id))
        scheduler.on_exit(exited.append)
        elements = [hotspot("a", 0, 5), hotspot("b", 3, 5)]

        scheduler.update(4, elements, [])
        scheduler.update(6, elements, [])

        assert entered == ["a", "b"]
        assert exited == ["a"]
        assert scheduler.active_ids == ("b",)

    def test_dismiss_removes_from_active_set(self, quiz_element):
        exited = []
        scheduler = InteractionScheduler()
        scheduler.on_exit(exited.append)
        scheduler.update(35, [quiz_element], [])

        assert scheduler.dismiss("q1") is True
        assert scheduler.dismiss("q1") is False
        assert scheduler.active_ids == ()
        assert exited == ["q1"]

    def test_completed_element_stays_out_after_dismiss(self, quiz_element):
        scheduler = InteractionScheduler()
        scheduler.update(35, [quiz_element], [])
        scheduler.dismiss("q1")

        result = scheduler.update(35.25, [quiz_element], ["q1"])

        assert result.entered == ()

    def test_reset_lets_element_enter_again(self, quiz_element):
        scheduler = InteractionScheduler()
        scheduler.update(35, [quiz_element], [])
        scheduler.reset("q1")

        result = scheduler.update(35.25, [quiz_element], [])

        assert [e.id for e in result.entered] == ["q1"]

    @pytest.mark.parametrize("t,expected", [(9.99, ()), (10, ("h",)), (19.99, ("h",)), (20, ())])
    def test_window_boundaries(self, t, expected):
        scheduler = InteractionScheduler()
        assert scheduler.update(t, [hotspot("h", 10, 10)], []).active == expected
