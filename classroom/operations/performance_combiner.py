"""
Performance Combiner - cross-track student performance.

Fuses exam-track and activity-track results into one PerformanceSummary per
student. Rankings are teacher-scoped and use competition ranking (1-2-2-4).

The current time is injected so a summary is a pure function of the fetched
snapshot and can be replayed in tests.
"""

from collections import OrderedDict
from datetime import datetime
from typing import Iterable, Optional, Sequence

from classroom.constants import ScoringConstants
from classroom.data_models.performance import (
    ActivityPerformance, ExamPerformance, Percent, PerformanceSummary,
    PerformanceTrack, RankingResult, UNDEFINED
)
from classroom.utils.deduplication import (
    distinct_levels, eligible_categories, latest_category_completions,
    latest_exam_completions, newest_first
)
from classroom.utils.ranking import CompetitionRankingPolicy, ScoredStudent
from classroom.utils.scoring_strategies import ExamScoringStrategy, ScoringStrategyFactory


class PerformanceCombiner:
    """Computes overall scores, roster rankings and per-student summaries."""

    def __init__(self, now: datetime):
        """
        Args:
            now: Reference time for exam availability
        """
        self.now = now
        self.ranking_policy = CompetitionRankingPolicy(descending=True)

    @staticmethod
    def completion_percent(numerator: int, denominator: int) -> Percent:
        """Percentage rounded to two decimals, UNDEFINED over an empty denominator."""
        if not denominator:
            return UNDEFINED
        return round(numerator / denominator * 100, ScoringConstants.PERCENT_DECIMALS)

    @staticmethod
    def overall_exam_score(student) -> Optional[float]:
        """Sum of the student's latest score per exam."""
        return ExamScoringStrategy.overall_score(student.exam_completions)

    @staticmethod
    def overall_activity_score(student) -> Optional[float]:
        """
        Combined activity score across every activity the student attempted.

        Uses the latest completion per eligible category, so a completion of a
        superseded category never counts. Point and stage activities add their
        scores; a time activity adds the reciprocal of its average time once all
        tiers are done. None when the student has no completion at all.
        """
        latest = latest_category_completions(student.activity_completions)
        if not latest:
            return None

        by_activity = OrderedDict()
        for completion in latest:
            activity = completion.category.activity
            by_activity.setdefault(activity.id, (activity, []))[1].append(completion)

        total = 0
        for activity, completions in by_activity.values():
            strategy = ScoringStrategyFactory.create_strategy(activity.game_type)
            eligible_ids = {category.id for category in eligible_categories(activity.categories)}
            total += strategy.overall_contribution(
                [com for com in completions if com.category.id in eligible_ids]
            )
        return total

    @staticmethod
    def resolve_track(track) -> PerformanceTrack:
        """
        Coerce a track given as a member or its value.

        Raises:
            ValueError: If the track is not supported
        """
        try:
            return PerformanceTrack(track)
        except ValueError:
            raise ValueError(f"Invalid performance track: {track!r}") from None

    def track_score(self, student, track: PerformanceTrack) -> Optional[float]:
        if track is PerformanceTrack.EXAM:
            return self.overall_exam_score(student)
        if track is PerformanceTrack.ACTIVITY:
            return self.overall_activity_score(student)
        raise ValueError(f"Invalid performance track: {track!r}")

    def rank_roster(self, roster: Iterable, track: PerformanceTrack) -> RankingResult:
        """
        Competition ranking of a teacher's roster on one track.

        Args:
            roster: Students with the track's completions loaded
            track: PerformanceTrack member or its value ("exam" or "activity")

        Returns:
            RankingResult; unscored students are unranked and ordered by name

        Raises:
            ValueError: If the track is not supported
        """
        track = self.resolve_track(track)
        scored = [
            ScoredStudent(
                student_id=student.id,
                full_name=student.full_name,
                score=self.track_score(student, track)
            )
            for student in roster
        ]
        return self.ranking_policy.rank(scored)

    @staticmethod
    def _with_peers(student, peers: Iterable) -> list:
        return [student] + [peer for peer in peers if peer.id != student.id]

    def exam_performance(self, student, peers: Iterable, assigned_exams: Sequence) -> ExamPerformance:
        """Exam-track metrics for a student, ranked against their peers."""
        available_exams = [exam for exam in assigned_exams if exam.is_available_at(self.now)]

        completions = latest_exam_completions(student.exam_completions)
        completed_exam_ids = {com.exam.id for com in completions}
        passed_count = sum(1 for com in completions if com.score >= com.exam.passing_points)
        failed_count = len(completions) - passed_count
        expired_count = sum(1 for exam in available_exams if exam.id not in completed_exam_ids)

        ranking = self.rank_roster(self._with_peers(student, peers), PerformanceTrack.EXAM)
        entry = ranking.find(student.id)

        return ExamPerformance(
            current_exam_count=len(available_exams),
            exams_completed_count=len(completions),
            exams_passed_count=passed_count,
            exams_failed_count=failed_count,
            exams_expired_count=expired_count,
            overall_exam_completion_percent=self.completion_percent(
                len(available_exams), len(assigned_exams)
            ),
            overall_exam_rank=entry.rank,
            overall_exam_score=entry.score
        )

    def activity_performance(self, student, peers: Iterable,
                             assigned_activities: Sequence) -> ActivityPerformance:
        """Activity-track metrics for a student, ranked against their peers."""
        completions = newest_first(student.activity_completions)

        category_count = 0
        completed_category_count = 0
        activities_completed_count = 0
        for activity in assigned_activities:
            strategy = ScoringStrategyFactory.create_strategy(activity.game_type)
            eligible = eligible_categories(activity.categories)
            category_ids = {category.id for category in eligible}
            activity_completions = [com for com in completions if com.category.id in category_ids]

            category_count += len(eligible)
            completed_category_count += len(distinct_levels(activity_completions))
            if strategy.is_unit_done(eligible, activity_completions):
                activities_completed_count += 1

        ranking = self.rank_roster(self._with_peers(student, peers), PerformanceTrack.ACTIVITY)
        entry = ranking.find(student.id)

        return ActivityPerformance(
            total_activity_count=len(assigned_activities),
            activities_completed_count=activities_completed_count,
            overall_activity_completion_percent=self.completion_percent(
                completed_category_count, category_count
            ),
            overall_activity_rank=entry.rank,
            overall_activity_score=entry.score
        )

    def summarize(self, student, peers: Sequence, assigned_exams: Sequence,
                  assigned_activities: Sequence) -> PerformanceSummary:
        """Merge identity with both track bundles; completion lists are left out."""
        return PerformanceSummary(
            student_id=student.id,
            public_id=student.public_id,
            first_name=student.first_name,
            middle_name=student.middle_name,
            last_name=student.last_name,
            full_name=student.full_name,
            email=student.email,
            exam=self.exam_performance(student, peers, assigned_exams),
            activity=self.activity_performance(student, peers, assigned_activities)
        )
