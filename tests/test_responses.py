"""
Response handler tests
"""

import pytest

from interactive_video.engine.clock import SimulatedClock
from interactive_video.engine.errors import AlreadyResolved, InvalidOption
from interactive_video.engine.responses import ResponseHandler, parse_jump_action
from interactive_video.models.interaction import (
    InteractionResult,
    InteractionSettings,
    InteractiveElement,
)


@pytest.fixture
def decision():
    return InteractiveElement(
        id="d1",
        type="decision",
        timestamp=0,
        duration=5,
        options=[{"text": "Go", "action": "jump:120"}, {"text": "Stay"}],
    )


@pytest.fixture
def poll():
    return InteractiveElement(
        id="p1", type="poll", timestamp=0, duration=5, options=[{"text": "A"}, {"text": "B"}]
    )


class TestResolve:
    """Scoring per element type"""

    def test_correct_quiz_answer(self, quiz_element):
        handler = ResponseHandler()
        resolution = handler.resolve(quiz_element, option_index=0)

        assert resolution.response.result == InteractionResult.CORRECT
        assert resolution.response.scoreDelta == 1
        assert handler.completed_ids == ["q1"]
        assert resolution.log.model_dump() == {
            "id": "q1",
            "type": "quiz",
            "result": "correct",
            "studentResponse": "0",
            "correctResponse": "0",
        }

    def test_incorrect_quiz_answer(self, quiz_element):
        handler = ResponseHandler()
        resolution = handler.resolve(quiz_element, option_index=1)

        assert resolution.response.result == InteractionResult.INCORRECT
        assert resolution.response.scoreDelta == 0
        assert resolution.log.correctResponse == "0"
        assert handler.is_completed("q1")

    def test_decision_returns_action(self, decision):
        resolution = ResponseHandler().resolve(decision, option_index=0)

        assert resolution.response.result == InteractionResult.NEUTRAL
        assert resolution.response.scoreDelta == 0
        assert resolution.action == "jump:120"

    def test_poll_is_neutral_with_credit(self, poll):
        resolution = ResponseHandler().resolve(poll, option_index=1)

        assert resolution.response.result == InteractionResult.NEUTRAL
        assert resolution.response.scoreDelta == 1
        assert resolution.log.correctResponse == ""

    def test_hotspot_without_options_takes_a_value(self):
        hotspot = InteractiveElement(id="h", type="hotspot", timestamp=0, duration=5)
        resolution = ResponseHandler().resolve(hotspot, value="clicked")

        assert resolution.response.scoreDelta == 1
        assert resolution.log.studentResponse == "clicked"

    def test_points_accumulate(self, quiz_element, poll):
        handler = ResponseHandler()
        handler.resolve(quiz_element, option_index=0)
        handler.resolve(poll, option_index=0)

        assert handler.points == 2
        assert [r.id for r in handler.interaction_log] == ["q1", "p1"]


class TestResolveErrors:

    def test_second_response_is_rejected(self, quiz_element):
        handler = ResponseHandler()
        handler.resolve(quiz_element, option_index=0)

        with pytest.raises(AlreadyResolved) as exc_info:
            handler.resolve(quiz_element, option_index=1)

        assert exc_info.value.element_id == "q1"
        assert len(handler.interaction_log) == 1
        assert handler.points == 1

    def test_restored_completion_is_rejected(self, quiz_element):
        handler = ResponseHandler(completed_ids=["q1"])
        with pytest.raises(AlreadyResolved):
            handler.resolve(quiz_element, option_index=0)

    @pytest.mark.parametrize("index", [2, -1, "0", True, None])
    def test_unusable_option_index(self, quiz_element, index):
        handler = ResponseHandler()
        with pytest.raises(InvalidOption):
            handler.resolve(quiz_element, option_index=index)
        assert not handler.is_completed("q1")


class TestPlaybackResume:
    """Resume or hold after a resolution"""

    def test_resumes_when_element_paused_playback(self, poll):
        clock = SimulatedClock()
        handler = ResponseHandler(clock=clock)

        resolution = handler.resolve(poll, option_index=0, paused_playback=True)

        assert resolution.resumed
        assert not clock.paused

    def test_holds_for_feedback(self, quiz_element):
        clock = SimulatedClock()
        handler = ResponseHandler(clock=clock)

        resolution = handler.resolve(quiz_element, option_index=0, paused_playback=True)

        assert resolution.held
        assert resolution.feedback == "Well done"
        assert clock.paused
        assert handler.continue_playback("q1") is True
        assert not clock.paused
        assert handler.continue_playback("q1") is False

    def test_auto_advance_never_holds(self, quiz_element):
        clock = SimulatedClock()
        handler = ResponseHandler(settings=InteractionSettings(autoAdvance=True), clock=clock)

        resolution = handler.resolve(quiz_element, option_index=1, paused_playback=True)

        assert resolution.feedback == "Try again"
        assert resolution.resumed
        assert not clock.paused

    def test_feedback_hidden_by_settings(self, quiz_element):
        handler = ResponseHandler(settings=InteractionSettings(showFeedback=False))
        resolution = handler.resolve(quiz_element, option_index=0, paused_playback=True)

        assert resolution.feedback is None
        assert resolution.resumed

    def test_no_resume_when_element_did_not_pause(self, poll):
        clock = SimulatedClock()
        handler = ResponseHandler(clock=clock)

        resolution = handler.resolve(poll, option_index=0)

        assert not resolution.resumed
        assert clock.paused


class TestSkipAndReset:

    def test_skip_completes_without_credit(self, quiz_element):
        handler = ResponseHandler()
        resolution = handler.skip(quiz_element)

        assert resolution.response.result == InteractionResult.NEUTRAL
        assert resolution.response.scoreDelta == 0
        assert resolution.log.studentResponse == ""
        assert handler.is_completed("q1")

    def test_skip_disabled(self, quiz_element):
        handler = ResponseHandler(settings=InteractionSettings(allowSkipping=False))
        with pytest.raises(InvalidOption):
            handler.skip(quiz_element)

    def test_reset_allows_a_new_response(self, quiz_element):
        handler = ResponseHandler()
        handler.resolve(quiz_element, option_index=1)
        handler.reset("q1")

        resolution = handler.resolve(quiz_element, option_index=0)

        assert resolution.response.result == InteractionResult.CORRECT


class TestJumpAction:

    @pytest.mark.parametrize("action,expected", [
        ("jump:120", 120.0),
        (" jump : 7.5 ", 7.5),
        ("jump:abc", None),
        ("goto:10", None),
        ("", None),
        (None, None),
    ])
    def test_parse_jump_action(self, action, expected):
        assert parse_jump_action(action) == expected
