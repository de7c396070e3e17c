"""
Test: per-unit leaderboards and student unit summaries.
"""
import pytest

from classroom.database.models import GameType
from classroom.operations.unit_scoring import UnitScoring
from classroom.utils.exceptions import UnknownGameTypeError


class TestActivityLeaderboard:
    def test_point_activity_ranks_descending(self, builder):
        ana = builder.student("Ana", "Cruz")
        ben = builder.student("Ben", "Diaz")
        activity = builder.activity(GameType.POINT.value, levels=(1, 2))
        easy, moderate = builder.level(activity, 1), builder.level(activity, 2)
        ana_completions = [builder.activity_completion(ana, easy, score=30)]
        ben_completions = [
            builder.activity_completion(ben, easy, score=20),
            builder.activity_completion(ben, moderate, score=25),
        ]

        entries = UnitScoring.rank_unit(activity, [(ana, ana_completions), (ben, ben_completions)])

        assert [(entry.student_id, entry.score, entry.rank) for entry in entries] == [
            (ben.id, 45, 1),
            (ana.id, 30, 2),
        ]

    def test_time_activity_needs_every_tier(self, builder):
        ana = builder.student("Ana", "Cruz")
        ben = builder.student("Ben", "Diaz")
        activity = builder.activity(GameType.TIME.value)
        ana_completions = [
            builder.activity_completion(ana, builder.level(activity, level), time=5)
            for level in (1, 2)
        ]
        ben_completions = [
            builder.activity_completion(ben, builder.level(activity, level), time=50)
            for level in (1, 2, 3)
        ]

        entries = UnitScoring.rank_unit(activity, [(ana, ana_completions), (ben, ben_completions)])

        assert entries[0].student_id == ben.id
        assert entries[0].rank == 1
        assert entries[1].student_id == ana.id
        assert entries[1].rank is None

    def test_faster_time_ranks_higher(self, builder):
        ana = builder.student("Ana", "Cruz")
        ben = builder.student("Ben", "Diaz")
        activity = builder.activity(GameType.TIME.value)
        roster = []
        for student, time in ((ana, 40), (ben, 20)):
            completions = [
                builder.activity_completion(student, builder.level(activity, level), time=time)
                for level in (1, 2, 3)
            ]
            roster.append((student, completions))

        entries = UnitScoring.rank_unit(activity, roster)

        assert [entry.student_id for entry in entries] == [ben.id, ana.id]
        assert [entry.rank for entry in entries] == [1, 2]

    def test_students_without_completions_follow_by_name(self, builder):
        cy = builder.student("Cy", "Evans")
        ben = builder.student("Ben", "Cruz")
        ana = builder.student("Ana", "Cruz")
        activity = builder.activity(GameType.POINT.value, levels=(1,))
        completion = builder.activity_completion(cy, builder.level(activity, 1), score=1)

        entries = UnitScoring.rank_unit(activity, [(cy, [completion]), (ben, []), (ana, [])])

        assert [entry.full_name for entry in entries] == ["Cy Evans", "Ana Cruz", "Ben Cruz"]

    def test_superseded_category_is_ignored(self, builder, later):
        ana = builder.student("Ana", "Cruz")
        activity = builder.activity(GameType.POINT.value, levels=())
        old = builder.category(activity, 1, updated_at=later(1))
        builder.category(activity, 1, updated_at=later(2))
        completion = builder.activity_completion(ana, old, score=100)

        score, selections = UnitScoring.score_activity(activity, activity.categories, [completion])

        assert score is None
        assert selections == {}

    def test_unknown_game_type_raises(self, builder):
        activity = builder.activity("speedrun")

        with pytest.raises(UnknownGameTypeError):
            UnitScoring.rank_unit(activity, [])


class TestActivitySummary:
    def test_stage_summary_covers_target_category_only(self, builder, later):
        ana = builder.student("Ana", "Cruz")
        activity = builder.activity(GameType.STAGE.value, levels=())
        builder.category(activity, 1, updated_at=later(1))
        target = builder.category(activity, 2, updated_at=later(9))
        completion = builder.activity_completion(ana, target, score=12)

        summary = UnitScoring.summarize_activity(activity, activity.categories, [completion], rank=1)

        assert summary.game_type == "stage"
        assert summary.score == 12
        assert [result.category for result in summary.categories] == [target]
        assert summary.rank == 1

    def test_stage_without_categories_has_null_score(self, builder):
        activity = builder.activity(GameType.STAGE.value, levels=())

        summary = UnitScoring.summarize_activity(activity, activity.categories, [])

        assert summary.score is None
        assert summary.categories == ()

    def test_point_summary_lists_categories_by_level(self, builder, later):
        ana = builder.student("Ana", "Cruz")
        activity = builder.activity(GameType.POINT.value, levels=())
        hard = builder.category(activity, 3, updated_at=later(5))
        easy = builder.category(activity, 1, updated_at=later(1))
        completion = builder.activity_completion(ana, hard, score=7)

        summary = UnitScoring.summarize_activity(activity, activity.categories, [completion])

        assert [result.category.level for result in summary.categories] == [1, 3]
        assert summary.categories[0].category is easy
        assert summary.categories[0].completion is None
        assert summary.categories[1].completion is completion
        assert summary.score == 7


class TestExamLeaderboard:
    def test_latest_submission_is_scored(self, builder, later):
        ana = builder.student("Ana", "Cruz")
        ben = builder.student("Ben", "Diaz")
        exam = builder.exam()
        ana_completions = [
            builder.exam_completion(ana, exam, 100, submitted_at=later(1)),
            builder.exam_completion(ana, exam, 50, submitted_at=later(2)),
        ]
        ben_completions = [builder.exam_completion(ben, exam, 75, submitted_at=later(1))]

        entries = UnitScoring.rank_unit(exam, [(ana, ana_completions), (ben, ben_completions)])

        assert [(entry.student_id, entry.score, entry.rank) for entry in entries] == [
            (ben.id, 75, 1),
            (ana.id, 50, 2),
        ]

    def test_ties_are_positional(self, builder):
        ana = builder.student("Ana", "Cruz")
        ben = builder.student("Ben", "Diaz")
        exam = builder.exam()
        roster = [
            (ana, [builder.exam_completion(ana, exam, 80)]),
            (ben, [builder.exam_completion(ben, exam, 80)]),
        ]

        entries = UnitScoring.rank_unit(exam, roster)

        assert [entry.rank for entry in entries] == [1, 2]

    def test_exam_summary(self, builder, later):
        ana = builder.student("Ana", "Cruz")
        exam = builder.exam(slug="midterm")
        latest = builder.exam_completion(ana, exam, 65, submitted_at=later(5))
        earlier = builder.exam_completion(ana, exam, 90, submitted_at=later(1))

        summary = UnitScoring.summarize_exam(exam, [earlier, latest], rank=3)

        assert summary.slug == "midterm"
        assert summary.game_type is None
        assert summary.score == 65
        assert summary.completions == (latest,)
        assert summary.rank == 3

    def test_exam_summary_without_completion(self, builder):
        exam = builder.exam()

        summary = UnitScoring.summarize_exam(exam, [])

        assert summary.score is None
        assert summary.completions == ()


class TestSummaryFromRoster:
    def test_activity_rank_from_loaded_roster(self, builder):
        ana = builder.student("Ana", "Cruz")
        ben = builder.student("Ben", "Diaz")
        activity = builder.activity(GameType.POINT.value, levels=(1,))
        other = builder.activity(GameType.POINT.value, levels=(1,))
        builder.activity_completion(ana, builder.level(activity, 1), score=30)
        builder.activity_completion(ben, builder.level(activity, 1), score=60)
        builder.activity_completion(ana, builder.level(other, 1), score=99)

        summary = UnitScoring.summarize_from_roster(activity, ana, [ana, ben])

        assert summary.score == 30
        assert summary.rank == 2

    def test_exam_rank_from_loaded_roster(self, builder):
        ana = builder.student("Ana", "Cruz")
        ben = builder.student("Ben", "Diaz")
        exam = builder.exam()
        builder.exam_completion(ana, exam, 70)

        summary = UnitScoring.summarize_from_roster(exam, ben, [ana, ben])

        assert summary.score is None
        assert summary.rank is None
