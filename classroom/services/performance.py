"""
Performance service for teacher- and student-facing performance views.

Provides roster rankings, paginated roster performance listings and the
combined exam + activity performance summary for one student. Everything is
computed on read from the current snapshot; nothing is cached or persisted.
"""

import asyncio
import logging
from datetime import datetime
from typing import List, Optional, Tuple, Union

from classroom.constants import PaginationConstants, SortConstants
from classroom.data_models.performance import (
    PerformancePage, PerformanceSummary, PerformanceTrack, RankedEntry,
    RankingResult, UnitSummary
)
from classroom.database.models import Student
from classroom.operations.performance_combiner import PerformanceCombiner
from classroom.operations.unit_scoring import UnitScoring
from classroom.services.activity import ActivityService
from classroom.services.base import BaseService
from classroom.services.exam import ExamService
from classroom.utils.exceptions import StudentNotFoundError
from classroom.utils.names import full_name_sort_key

logger = logging.getLogger(__name__)


class PerformanceService(BaseService):
    """Service for cross-track student performance and roster rankings."""

    def __init__(self, database, roster_operations=None, exam_service=None, activity_service=None):
        super().__init__(database, roster_operations)
        self.exam_service = exam_service or ExamService(database, self.roster)
        self.activity_service = activity_service or ActivityService(database, self.roster)

    @staticmethod
    def parse_sort(sort: Optional[str]) -> Tuple[Optional[str], str]:
        """
        Parse a "field,order" sort string.

        Returns:
            Tuple of (sort field or None, order)

        Raises:
            ValueError: If the field or order is not supported
        """
        if not sort or not sort.strip():
            return None, SortConstants.ASCENDING

        sort_by, _, sort_order = sort.partition(',')
        sort_by = sort_by.strip().lower()
        sort_order = (sort_order.strip().lower() or SortConstants.ASCENDING)

        if sort_by not in (SortConstants.SORT_BY_NAME, SortConstants.SORT_BY_RANK):
            raise ValueError(f"Invalid sort field: {sort_by}")
        if sort_order not in (SortConstants.ASCENDING, SortConstants.DESCENDING):
            raise ValueError(f"Invalid sort order: {sort_order}")
        return sort_by, sort_order

    @staticmethod
    def order_entries(ranking: RankingResult, sort_by: Optional[str], sort_order: str) -> List[RankedEntry]:
        """Apply a listing sort on top of a roster ranking."""
        if sort_by == SortConstants.SORT_BY_NAME:
            return sorted(
                ranking.entries,
                key=lambda entry: full_name_sort_key(entry.full_name),
                reverse=sort_order == SortConstants.DESCENDING
            )
        if sort_by == SortConstants.SORT_BY_RANK and sort_order == SortConstants.DESCENDING:
            return list(ranking.unranked) + list(reversed(ranking.ranked))
        return list(ranking.entries)

    async def rank_roster(self, teacher_id: int, track: Union[PerformanceTrack, str],
                          q: Optional[str] = None) -> RankingResult:
        """Competition ranking of a teacher's approved students on one track."""
        track = PerformanceCombiner.resolve_track(track)
        roster = await self.roster.fetch_roster(teacher_id, q=q)
        return PerformanceCombiner(self.current_time()).rank_roster(roster, track)

    async def get_roster_performances(
        self,
        teacher_id: int,
        sort: Optional[str] = None,
        take: int = PaginationConstants.DEFAULT_TAKE,
        skip: int = 0,
        q: Optional[str] = None,
        track: Union[PerformanceTrack, str] = PerformanceTrack.EXAM
    ) -> PerformancePage:
        """
        One page of a teacher's roster with overall scores and ranks.

        Args:
            teacher_id: Teacher whose roster to list
            sort: "name,asc", "name,desc", "rank,asc" or "rank,desc"; rank order by default
            take: Page size
            skip: Number of entries to skip
            q: Optional name search; ranks are computed over the matching students
            track: Which track's overall score to rank by, as a member or its value

        Returns:
            PerformancePage with the requested slice and the total match count

        Raises:
            ValueError: If take, skip, sort or track is invalid
        """
        if not isinstance(take, int) or take < 1 or take > PaginationConstants.MAX_TAKE:
            raise ValueError(f"take must be between 1 and {PaginationConstants.MAX_TAKE}")
        if not isinstance(skip, int) or skip < 0:
            raise ValueError("skip must be a non-negative integer")
        sort_by, sort_order = self.parse_sort(sort)
        track = PerformanceCombiner.resolve_track(track)

        ranking = await self.rank_roster(teacher_id, track, q=q)
        entries = self.order_entries(ranking, sort_by, sort_order)

        return PerformancePage(
            entries=tuple(entries[skip:skip + take]),
            total_count=len(entries),
            skip=skip,
            take=take,
            track=track,
            sort=sort,
            query=q
        )

    async def _resolve_teacher_id(self, student: Student, teacher_id: Optional[int]) -> int:
        if teacher_id is None:
            teacher = await self.roster.fetch_teacher_for_student(student)
            return teacher.id
        if student.teacher_id != teacher_id:
            # Students outside the teacher's roster are reported as missing
            raise StudentNotFoundError(student.id)
        return teacher_id

    async def _summarize(self, student: Student, teacher_id: int,
                         now: Optional[datetime]) -> PerformanceSummary:
        peers, (exams, activities) = await asyncio.gather(
            self.roster.fetch_roster(teacher_id, exclude_student_id=student.id),
            self.roster.fetch_assigned_units(student)
        )
        summary = PerformanceCombiner(self.current_time(now)).summarize(student, peers, exams, activities)
        logger.info(
            f"Summarized student {student.id}: exam rank {summary.exam.overall_exam_rank}, "
            f"activity rank {summary.activity.overall_activity_rank}"
        )
        return summary

    async def summarize_student(self, student_id: int, teacher_id: Optional[int] = None,
                                now: Optional[datetime] = None) -> PerformanceSummary:
        """
        Combined exam and activity performance of one student.

        Args:
            student_id: Student to summarize
            teacher_id: Roster scope; resolved from the student when omitted
            now: Reference time for exam availability; defaults to the current time

        Raises:
            StudentNotFoundError: If the student is missing or not on the teacher's roster
            TeacherNotFoundError: If no teacher can be resolved for the student
        """
        student = await self.roster.fetch_student(student_id)
        teacher_id = await self._resolve_teacher_id(student, teacher_id)
        return await self._summarize(student, teacher_id, now)

    async def summarize_student_by_public_id(self, public_id: str, teacher_id: int,
                                             now: Optional[datetime] = None) -> PerformanceSummary:
        """Combined performance of a student on a teacher's roster, by public id."""
        student = await self.roster.fetch_student_by_public_id(public_id, teacher_id)
        return await self._summarize(student, teacher_id, now)

    async def get_student_exams(self, student_id: int,
                                teacher_id: Optional[int] = None) -> List[UnitSummary]:
        """Every assigned exam with the student's score and leaderboard rank."""
        student = await self.roster.fetch_student(student_id)
        teacher_id = await self._resolve_teacher_id(student, teacher_id)
        exams, roster = await asyncio.gather(
            self.roster.fetch_assigned_exams(teacher_id),
            self.roster.fetch_roster(teacher_id)
        )
        return [UnitScoring.summarize_from_roster(exam, student, roster) for exam in exams]

    async def get_student_activities(self, student_id: int,
                                     teacher_id: Optional[int] = None) -> List[UnitSummary]:
        """Every assigned activity with the student's score and leaderboard rank."""
        student = await self.roster.fetch_student(student_id)
        teacher_id = await self._resolve_teacher_id(student, teacher_id)
        activities, roster = await asyncio.gather(
            self.roster.fetch_assigned_activities(teacher_id),
            self.roster.fetch_roster(teacher_id)
        )
        return [UnitScoring.summarize_from_roster(activity, student, roster) for activity in activities]

    async def get_student_exam_by_slug(self, student_id: int, slug: str,
                                       teacher_id: Optional[int] = None) -> UnitSummary:
        """One exam, by slug, as the student sees it."""
        student = await self.roster.fetch_student(student_id)
        teacher_id = await self._resolve_teacher_id(student, teacher_id)
        exam = await self.roster.fetch_exam_by_slug(slug, teacher_id)
        return await self.exam_service.summarize_unit_for_student(exam, student.id, teacher_id)

    async def get_student_activity_by_slug(self, student_id: int, slug: str,
                                           teacher_id: Optional[int] = None) -> UnitSummary:
        """One activity, by slug, as the student sees it."""
        student = await self.roster.fetch_student(student_id)
        teacher_id = await self._resolve_teacher_id(student, teacher_id)
        activity = await self.roster.fetch_activity_by_slug(slug, teacher_id)
        return await self.activity_service.summarize_unit_for_student(activity, student.id, teacher_id)
