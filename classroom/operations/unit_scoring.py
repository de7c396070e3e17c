"""
Unit Scoring - per-unit leaderboards and per-student unit summaries.

Pure functions over already-fetched entity graphs: a unit, its categories and
each roster student's raw completions for that unit. Nothing here performs
I/O or mutates the graphs it reads.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from classroom.data_models.performance import RankedEntry, RankingResult, UnitSummary
from classroom.database.models import Activity, Exam
from classroom.utils.deduplication import eligible_categories
from classroom.utils.ranking import ScoredStudent
from classroom.utils.scoring_strategies import ExamScoringStrategy, ScoringStrategyFactory

RosterCompletions = Sequence[Tuple[object, Sequence]]


class UnitScoring:
    """Scores and ranks one exam or activity across a teacher's roster."""

    @staticmethod
    def score_activity(activity: Activity, categories: Sequence,
                       completions: Iterable) -> Tuple[Optional[float], Dict[int, object]]:
        """
        Score one student's completions for an activity.

        Args:
            activity: The activity (its game type selects the strategy)
            categories: Raw categories of the activity; superseded ones are dropped here
            completions: The student's raw completions for the activity

        Returns:
            Tuple of (score or None, category id -> chosen completion)
        """
        strategy = ScoringStrategyFactory.create_strategy(activity.game_type)
        eligible = eligible_categories(categories)
        category_ids = {category.id for category in eligible}
        relevant = [com for com in completions if com.category.id in category_ids]
        return strategy.score_unit(eligible, relevant)

    @staticmethod
    def rank_activity(activity: Activity, categories: Sequence,
                      roster_completions: RosterCompletions) -> RankingResult:
        """Sequential leaderboard for one activity."""
        strategy = ScoringStrategyFactory.create_strategy(activity.game_type)
        scored = []
        for student, completions in roster_completions:
            score, selections = UnitScoring.score_activity(activity, categories, completions)
            scored.append(ScoredStudent(
                student_id=student.id,
                full_name=student.full_name,
                score=score,
                completions=tuple(selections.values())
            ))
        return strategy.sequential_policy().rank(scored)

    @staticmethod
    def rank_exam(exam: Exam, roster_completions: RosterCompletions) -> RankingResult:
        """Sequential leaderboard for one exam, scored on each student's latest submission."""
        strategy = ExamScoringStrategy()
        scored = []
        for student, completions in roster_completions:
            relevant = [com for com in completions if com.exam.id == exam.id]
            score, completion = strategy.score_unit(relevant)
            scored.append(ScoredStudent(
                student_id=student.id,
                full_name=student.full_name,
                score=score,
                completions=(completion,) if completion is not None else ()
            ))
        return strategy.sequential_policy().rank(scored)

    @staticmethod
    def rank_unit(unit, roster_completions: RosterCompletions,
                  categories: Optional[Sequence] = None) -> List[RankedEntry]:
        """
        Sequential leaderboard for an exam or an activity.

        Args:
            unit: Exam or Activity
            roster_completions: (student, completions) pairs for the whole roster
            categories: Activity categories; defaults to ``unit.categories``

        Returns:
            Ranked entries followed by unranked ones
        """
        if isinstance(unit, Exam):
            return list(UnitScoring.rank_exam(unit, roster_completions).entries)
        if categories is None:
            categories = unit.categories
        return list(UnitScoring.rank_activity(unit, categories, roster_completions).entries)

    @staticmethod
    def summarize_activity(activity: Activity, categories: Sequence, completions: Iterable,
                           rank: Optional[int] = None) -> UnitSummary:
        """An activity as one student sees it: chosen completion per category and score."""
        strategy = ScoringStrategyFactory.create_strategy(activity.game_type)
        eligible = eligible_categories(categories)
        score, selections = UnitScoring.score_activity(activity, categories, completions)

        # Present categories in level order
        category_results = sorted(
            strategy.category_results(eligible, selections),
            key=lambda result: result.category.level
        )
        return UnitSummary(
            unit_id=activity.id,
            slug=activity.slug,
            title=activity.title,
            game_type=strategy.game_type.value,
            score=score,
            categories=tuple(category_results),
            completions=tuple(selections.values()),
            rank=rank
        )

    @staticmethod
    def student_completions(unit, student) -> list:
        """A student's loaded completions that belong to an exam or an activity."""
        if isinstance(unit, Exam):
            return [com for com in student.exam_completions if com.exam.id == unit.id]
        return [com for com in student.activity_completions if com.category.activity.id == unit.id]

    @staticmethod
    def summarize_from_roster(unit, student, roster: Sequence) -> UnitSummary:
        """
        Unit summary with leaderboard rank, computed from an already loaded roster.

        Args:
            unit: Exam, or Activity with its categories loaded
            student: The student to summarize
            roster: Roster students with their completion graphs loaded

        Returns:
            UnitSummary for the student
        """
        roster_completions = [
            (member, UnitScoring.student_completions(unit, member)) for member in roster
        ]
        rankings = UnitScoring.rank_unit(unit, roster_completions)
        rank = next((entry.rank for entry in rankings if entry.student_id == student.id), None)

        completions = UnitScoring.student_completions(unit, student)
        if isinstance(unit, Exam):
            return UnitScoring.summarize_exam(unit, completions, rank)
        return UnitScoring.summarize_activity(unit, unit.categories, completions, rank)

    @staticmethod
    def summarize_exam(exam: Exam, completions: Iterable, rank: Optional[int] = None) -> UnitSummary:
        """An exam as one student sees it: latest submission and score."""
        relevant = [com for com in completions if com.exam.id == exam.id]
        score, completion = ExamScoringStrategy().score_unit(relevant)
        return UnitSummary(
            unit_id=exam.id,
            slug=exam.slug,
            title=exam.title,
            game_type=None,
            score=score,
            completions=(completion,) if completion is not None else (),
            rank=rank
        )
