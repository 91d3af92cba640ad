"""
Element list validation tests
"""

from interactive_video.models.interaction import InteractiveElement
from interactive_video.utils.validation import (
    get_validation_status,
    validate_element_list,
    validate_import_document,
)


def element(element_id, start, **extra):
    data = {"id": element_id, "type": "hotspot", "timestamp": start, "duration": 10}
    data.update(extra)
    return InteractiveElement(**data)


class TestImportDocument:

    def test_valid_document(self):
        assert validate_import_document({"elements": [{"type": "poll", "timestamp": 0, "duration": 1}]}) == []

    def test_reports_paths(self):
        errors = validate_import_document([{"type": "poll", "timestamp": -1, "duration": 1}])
        assert errors


class TestBusinessRules:

    def test_clean_list(self, sample_elements):
        assert validate_element_list(sample_elements, video_duration=120) == []

    def test_duplicate_ids_are_errors(self):
        issues = validate_element_list([element("a", 0), element("a", 20)])
        assert [(i.field, i.level) for i in issues] == [("elements[1].id", "error")]

    def test_quiz_without_correct_option(self):
        quiz = InteractiveElement(
            id="q", type="quiz", timestamp=0, duration=5, options=[{"text": "A"}, {"text": "B"}]
        )
        issues = validate_element_list([quiz])
        assert issues[0].message == "Quiz has no correct option"

    def test_unknown_decision_action(self):
        decision = InteractiveElement(
            id="d", type="decision", timestamp=0, duration=5,
            options=[{"text": "Go", "action": "goto:5"}],
        )
        issues = validate_element_list([decision])
        assert issues[0].field == "elements[0].options[0].action"

    def test_element_after_end_of_video(self):
        issues = validate_element_list([element("late", 130)], video_duration=120)
        assert issues[0].field == "elements[0].timestamp"

    def test_overlapping_pausing_elements(self):
        issues = validate_element_list([
            element("a", 0, pauseVideo=True),
            element("b", 5, pauseVideo=True),
        ])
        assert [i.level for i in issues] == ["info"]


class TestValidationStatus:

    async def test_self_check(self):
        status = await get_validation_status()
        assert status == {"schema_loaded": True, "validation_working": True}
