"""
Editor state tests
"""

import pytest

from interactive_video.engine.editor import DEFAULT_DURATION, EditorState, default_options
from interactive_video.engine.errors import ElementNotFound, NoSelection
from interactive_video.models.interaction import ElementType, InteractionSettings, InteractionStyle
from interactive_video.services.style_templates import get_template


class TestAdd:

    def test_add_at_playhead_selects_new_element(self):
        editor = EditorState()
        element = editor.add(ElementType.QUIZ, at_time=12.5)

        assert element.timestamp == 12.5
        assert element.duration == DEFAULT_DURATION
        assert editor.selected_id == element.id
        assert editor.elements == (element,)

    @pytest.mark.parametrize("element_type", list(ElementType))
    def test_every_type_gets_usable_defaults(self, element_type):
        element = EditorState().add(element_type)
        assert element.type == element_type
        assert element.options

    def test_quiz_defaults_have_one_correct_option(self):
        options = default_options(ElementType.QUIZ)
        assert [o.isCorrect for o in options] == [True, False]

    def test_settings_default_style_applies(self):
        style = InteractionStyle(backgroundColor="#000000")
        editor = EditorState(settings=InteractionSettings(defaultStyle=style))

        element = editor.add("poll")

        assert element.style.backgroundColor == "#000000"

    def test_mutations_swap_the_tuple(self):
        editor = EditorState()
        before = editor.elements
        editor.add("hotspot")
        assert before == ()
        assert len(editor.elements) == 1


class TestUpdateDelete:

    def test_update_replaces_by_id(self, sample_elements):
        editor = EditorState(sample_elements)
        changed = editor.get("q1").model_copy(update={"title": "Renamed"})

        editor.update(changed)

        assert editor.get("q1").title == "Renamed"
        assert [e.id for e in editor.elements] == ["poll-1", "q1", "branch", "spot"]

    def test_update_missing_element(self, quiz_element):
        with pytest.raises(ElementNotFound):
            EditorState().update(quiz_element)

    def test_delete_clears_selection(self, sample_elements):
        editor = EditorState(sample_elements)
        editor.select("q1")

        editor.delete("q1")

        assert editor.selected is None
        assert "q1" not in [e.id for e in editor.elements]

    def test_delete_missing_element(self):
        with pytest.raises(ElementNotFound):
            EditorState().delete("nope")

    def test_select_unknown_element(self):
        with pytest.raises(ElementNotFound):
            EditorState().select("nope")


class TestTemplates:

    def test_apply_template_to_selection(self, sample_elements):
        editor = EditorState(sample_elements)
        editor.select("q1")
        template = get_template("lower-third")

        element = editor.apply_template(template)

        assert element.style == template.style
        assert element.optionStyle == template.optionStyle
        assert element.position.y == 85

    def test_template_without_position_keeps_position(self, sample_elements):
        editor = EditorState(sample_elements)
        element = editor.apply_template(get_template("dark-overlay"), "spot")
        assert element.position is None

    def test_apply_template_needs_selection(self, sample_elements):
        with pytest.raises(NoSelection):
            EditorState(sample_elements).apply_template(get_template("classic"))


class TestImportExport:

    def test_import_assigns_fresh_ids(self, sample_elements):
        editor = EditorState(sample_elements)
        created = editor.import_elements([sample_elements[1]])

        assert len(editor.elements) == 5
        assert created[0].id.startswith("imported-")
        assert created[0].id != "q1"
        assert created[0].title == sample_elements[1].title

    def test_export_snapshot(self, sample_elements):
        editor = EditorState(sample_elements, video_id="v1", title="Intro")
        snapshot = editor.export_snapshot()

        assert snapshot.videoId == "v1"
        assert [e.id for e in snapshot.elements] == ["poll-1", "q1", "branch", "spot"]
        assert snapshot.settings == InteractionSettings()
