"""
Score and lesson status tests
"""

import pytest

from interactive_video.engine.scoring import completed_count, compute_score, lesson_status
from interactive_video.models.interaction import LessonStatus


class TestScore:

    @pytest.mark.parametrize("completed,total,expected", [
        (0, 0, 0),
        (0, 4, 0),
        (1, 3, 33),
        (2, 3, 67),
        (1, 8, 13),
        (3, 8, 38),
        (4, 4, 100),
    ])
    def test_compute_score_rounds_half_up(self, completed, total, expected):
        assert compute_score(completed, total) == expected

    def test_only_listed_elements_count(self, sample_elements):
        assert completed_count(sample_elements, ["q1", "deleted-element"]) == 1


class TestLessonStatus:

    def test_not_attempted_before_start(self):
        assert lesson_status(0, 3, attempted=False) == LessonStatus.NOT_ATTEMPTED

    def test_incomplete_once_started(self):
        assert lesson_status(1, 3, attempted=True) == LessonStatus.INCOMPLETE

    def test_completed_when_all_done(self):
        assert lesson_status(3, 3, attempted=True) == LessonStatus.COMPLETED

    def test_empty_list_completes_at_end_of_media(self):
        assert lesson_status(0, 0, attempted=True) == LessonStatus.INCOMPLETE
        assert lesson_status(0, 0, attempted=True, ended=True) == LessonStatus.COMPLETED
