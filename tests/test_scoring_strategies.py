"""
Test: game-type scoring strategies and the strategy factory.
"""
import pytest

from classroom.database.models import GameType
from classroom.utils.exceptions import EmptyStageCategoriesError, UnknownGameTypeError
from classroom.utils.scoring_strategies import (
    ExamScoringStrategy, PointScoringStrategy, ScoringStrategyFactory,
    StageScoringStrategy, TimeScoringStrategy
)


class TestScoringStrategyFactory:
    @pytest.mark.parametrize("game_type, expected", [
        (GameType.POINT, PointScoringStrategy),
        ("time", TimeScoringStrategy),
        ("stage", StageScoringStrategy),
    ])
    def test_creates_strategy(self, game_type, expected):
        assert isinstance(ScoringStrategyFactory.create_strategy(game_type), expected)

    def test_unknown_game_type_rejected(self):
        with pytest.raises(UnknownGameTypeError) as exc_info:
            ScoringStrategyFactory.create_strategy("speedrun")
        assert exc_info.value.game_type == "speedrun"

    def test_available_game_types(self):
        assert ScoringStrategyFactory.get_available_game_types() == ["point", "time", "stage"]


class TestPointScoring:
    def test_best_score_per_category(self, builder):
        student = builder.student("Ana", "Cruz")
        activity = builder.activity(GameType.POINT.value, levels=(1,))
        category = builder.level(activity, 1)
        low = builder.activity_completion(student, category, score=50, time=30)
        high_slow = builder.activity_completion(student, category, score=80, time=90)
        high_fast = builder.activity_completion(student, category, score=80, time=40)

        strategy = PointScoringStrategy()
        score, selections = strategy.score_unit(activity.categories, [low, high_slow, high_fast])

        assert score == 80
        assert selections[category.id] is high_fast

    def test_missing_category_adds_nothing(self, builder):
        student = builder.student("Ana", "Cruz")
        activity = builder.activity(GameType.POINT.value)
        completions = [
            builder.activity_completion(student, builder.level(activity, 1), score=80),
            builder.activity_completion(student, builder.level(activity, 3), score=60),
        ]

        score, selections = PointScoringStrategy().score_unit(activity.categories, completions)

        assert score == 140
        assert len(selections) == 2

    def test_unscored_completion_counts_as_zero(self, builder):
        student = builder.student("Ana", "Cruz")
        activity = builder.activity(GameType.POINT.value)
        completions = [
            builder.activity_completion(student, builder.level(activity, 1), score=80),
            builder.activity_completion(student, builder.level(activity, 2), score=None),
            builder.activity_completion(student, builder.level(activity, 3), score=60),
        ]

        score, _ = PointScoringStrategy().score_unit(activity.categories, completions)

        assert score == 140

    def test_no_completions_scores_none(self, builder):
        activity = builder.activity(GameType.POINT.value)

        score, selections = PointScoringStrategy().score_unit(activity.categories, [])

        assert score is None
        assert selections == {}

    def test_category_results_include_missing(self, builder):
        student = builder.student("Ana", "Cruz")
        activity = builder.activity(GameType.POINT.value, levels=(1, 2))
        easy = builder.level(activity, 1)
        completion = builder.activity_completion(student, easy, score=10)
        strategy = PointScoringStrategy()

        _, selections = strategy.score_unit(activity.categories, [completion])
        results = strategy.category_results(activity.categories, selections)

        assert [r.completion for r in results] == [completion, None]


class TestTimeScoring:
    def test_fastest_time_averaged(self, builder):
        student = builder.student("Ana", "Cruz")
        activity = builder.activity(GameType.TIME.value, levels=(1, 2))
        easy, moderate = builder.level(activity, 1), builder.level(activity, 2)
        completions = [
            builder.activity_completion(student, easy, time=30),
            builder.activity_completion(student, easy, time=20),
            builder.activity_completion(student, moderate, time=40),
        ]

        score, _ = TimeScoringStrategy().score_unit(activity.categories, completions)

        assert score == 30

    def test_overall_contribution_is_reciprocal_average(self, builder):
        student = builder.student("Ana", "Cruz")
        activity = builder.activity(GameType.TIME.value)
        completions = [
            builder.activity_completion(student, builder.level(activity, level), time=time)
            for level, time in ((1, 10), (2, 20), (3, 30))
        ]

        assert TimeScoringStrategy().overall_contribution(completions) == pytest.approx(0.05)

    def test_incomplete_tiers_contribute_zero(self, builder):
        student = builder.student("Ana", "Cruz")
        activity = builder.activity(GameType.TIME.value)
        completions = [
            builder.activity_completion(student, builder.level(activity, 1), time=10),
            builder.activity_completion(student, builder.level(activity, 2), time=20),
        ]

        assert TimeScoringStrategy().overall_contribution(completions) == 0

    def test_zero_average_time_contributes_zero(self, builder):
        student = builder.student("Ana", "Cruz")
        activity = builder.activity(GameType.TIME.value)
        completions = [
            builder.activity_completion(student, builder.level(activity, level), time=0)
            for level in (1, 2, 3)
        ]

        assert TimeScoringStrategy().overall_contribution(completions) == 0

    def test_done_requires_three_tiers(self, builder):
        student = builder.student("Ana", "Cruz")
        activity = builder.activity(GameType.TIME.value, levels=(1, 2, 3, 4))
        strategy = TimeScoringStrategy()
        completions = [
            builder.activity_completion(student, builder.level(activity, level), time=10)
            for level in (1, 2)
        ]

        assert not strategy.is_unit_done(activity.categories, completions)

        completions.append(builder.activity_completion(student, builder.level(activity, 3), time=10))
        assert strategy.is_unit_done(activity.categories, completions)

    def test_policy_needs_all_tiers(self):
        policy = TimeScoringStrategy().sequential_policy()
        assert policy.descending is False
        assert policy.min_completions == 3


class TestStageScoring:
    def test_scores_only_target_category(self, builder, later):
        student = builder.student("Ana", "Cruz")
        activity = builder.activity(GameType.STAGE.value, levels=())
        older = builder.category(activity, 1, updated_at=later(1))
        newest = builder.category(activity, 2, updated_at=later(10))
        completions = [
            builder.activity_completion(student, older, score=99),
            builder.activity_completion(student, newest, score=40),
            builder.activity_completion(student, newest, score=70),
        ]
        strategy = StageScoringStrategy()
        categories = [newest, older]

        score, selections = strategy.score_unit(categories, completions)

        assert strategy.target_category(categories) is newest
        assert score == 70
        assert list(selections) == [newest.id]

    def test_target_category_requires_a_category(self):
        with pytest.raises(EmptyStageCategoriesError):
            StageScoringStrategy().target_category([])

    def test_no_categories_scores_none(self):
        score, selections = StageScoringStrategy().score_unit([], [])

        assert score is None
        assert selections == {}

    def test_done_requires_every_level(self, builder):
        student = builder.student("Ana", "Cruz")
        activity = builder.activity(GameType.STAGE.value, levels=(1, 2))
        strategy = StageScoringStrategy()
        one = [builder.activity_completion(student, builder.level(activity, 1), score=5)]

        assert not strategy.is_unit_done(activity.categories, one)
        both = one + [builder.activity_completion(student, builder.level(activity, 2), score=5)]
        assert strategy.is_unit_done(activity.categories, both)


class TestExamScoring:
    def test_latest_submission_is_canonical(self, builder, later):
        student = builder.student("Ana", "Cruz")
        exam = builder.exam()
        early = builder.exam_completion(student, exam, 95, submitted_at=later(1))
        late = builder.exam_completion(student, exam, 60, submitted_at=later(2))

        score, completion = ExamScoringStrategy().score_unit([early, late])

        assert score == 60
        assert completion is late

    def test_overall_score_sums_latest_per_exam(self, builder, later):
        student = builder.student("Ana", "Cruz")
        first, second = builder.exam(), builder.exam()
        completions = [
            builder.exam_completion(student, first, 70, submitted_at=later(1)),
            builder.exam_completion(student, first, 90, submitted_at=later(2)),
            builder.exam_completion(student, second, 40, submitted_at=later(3)),
        ]

        assert ExamScoringStrategy.overall_score(completions) == 130

    def test_overall_score_without_completions(self):
        assert ExamScoringStrategy.overall_score([]) is None
