"""
Roster Operations Module

Read-only data access for the performance engine. Every method returns fully
loaded entity graphs so the pure scoring code never triggers a lazy load:

- Rosters: approved students of one teacher, with completion graphs
- Assigned units: published exams (with schedules) and activities (with
  categories and their type-specific settings)
- Completions: one student's raw attempts for one exam or activity

Nothing here writes. Lookup misses raise the NotFound family of exceptions;
database errors propagate unchanged.
"""

from contextlib import asynccontextmanager
from typing import List, Optional, Sequence, Union

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from classroom.database.models import (
    Activity, ActivityCategory, ActivityCategoryCompletion, ApprovalStatus,
    Exam, ExamCompletion, RecordStatus, Student, Teacher
)
from classroom.utils.exceptions import StudentNotFoundError, TeacherNotFoundError, UnitNotFoundError
from classroom.utils.logger import setup_logger

logger = setup_logger(__name__)


def _completion_loaders():
    return (
        selectinload(Student.exam_completions).selectinload(ExamCompletion.exam),
        selectinload(Student.activity_completions)
        .selectinload(ActivityCategoryCompletion.category)
        .selectinload(ActivityCategory.activity)
        .selectinload(Activity.categories),
    )


def _category_loaders():
    return (
        selectinload(ActivityCategory.type_point),
        selectinload(ActivityCategory.type_time),
        selectinload(ActivityCategory.type_stage),
    )


class RosterOperations:
    """
    Data-fetch boundary for the performance services.

    All methods accept an optional session; without one they open and close
    their own, so independent fetches can run concurrently.
    """

    def __init__(self, database):
        """Initialize with database instance"""
        self.db = database
        self.logger = logger

    @asynccontextmanager
    async def _get_session_context(self, session: Optional[AsyncSession] = None):
        """
        Provides a session context. Uses the provided session if available,
        otherwise creates and manages a new session.
        """
        if session:
            yield session
        else:
            async with self.db.get_session() as new_session:
                yield new_session

    async def fetch_roster(
        self,
        teacher_id: int,
        q: Optional[str] = None,
        exclude_student_id: Optional[int] = None,
        load_completions: bool = True,
        session: Optional[AsyncSession] = None
    ) -> List[Student]:
        """
        Approved students of a teacher, ordered by id.

        Args:
            teacher_id: Teacher whose roster to load
            q: Optional case-insensitive search over first, middle and last name
            exclude_student_id: Student to leave out (the target of a summary)
            load_completions: Eagerly load both completion graphs

        Returns:
            List of Student records
        """
        query = select(Student).where(
            Student.teacher_id == teacher_id,
            Student.approval_status == ApprovalStatus.APPROVED.value
        )

        if q and q.strip():
            pattern = f"%{q.strip()}%"
            query = query.where(or_(
                Student.first_name.ilike(pattern),
                Student.last_name.ilike(pattern),
                Student.middle_name.ilike(pattern)
            ))

        if exclude_student_id is not None:
            query = query.where(Student.id != exclude_student_id)

        if load_completions:
            query = query.options(*_completion_loaders())

        async with self._get_session_context(session) as s:
            result = await s.execute(query.order_by(Student.id))
            students = list(result.scalars().all())

        self.logger.debug(f"Loaded roster of {len(students)} students for teacher {teacher_id}")
        return students

    async def fetch_student(self, student_id: int, session: Optional[AsyncSession] = None) -> Student:
        """
        Approved student with both completion graphs.

        Raises:
            StudentNotFoundError: If the student does not exist or is not approved
        """
        query = (
            select(Student)
            .where(
                Student.id == student_id,
                Student.approval_status == ApprovalStatus.APPROVED.value
            )
            .options(*_completion_loaders())
        )
        async with self._get_session_context(session) as s:
            result = await s.execute(query)
            student = result.scalar_one_or_none()

        if student is None:
            raise StudentNotFoundError(student_id)
        return student

    async def fetch_student_by_public_id(
        self,
        public_id: str,
        teacher_id: int,
        session: Optional[AsyncSession] = None
    ) -> Student:
        """
        Approved student on a teacher's roster, looked up by public id.

        Public ids are stored upper-case, so the lookup is case-insensitive.

        Raises:
            StudentNotFoundError: If no such student is on the roster
        """
        query = (
            select(Student)
            .where(
                Student.public_id == public_id.upper(),
                Student.teacher_id == teacher_id,
                Student.approval_status == ApprovalStatus.APPROVED.value
            )
            .options(*_completion_loaders())
        )
        async with self._get_session_context(session) as s:
            result = await s.execute(query)
            student = result.scalar_one_or_none()

        if student is None:
            raise StudentNotFoundError(public_id)
        return student

    async def fetch_teacher_for_student(self, student: Student,
                                        session: Optional[AsyncSession] = None) -> Teacher:
        """
        The teacher whose roster a student belongs to.

        Raises:
            TeacherNotFoundError: If the student has no teacher
        """
        if student.teacher_id is None:
            raise TeacherNotFoundError(student.id)

        async with self._get_session_context(session) as s:
            teacher = await s.get(Teacher, student.teacher_id)

        if teacher is None:
            raise TeacherNotFoundError(student.id)
        return teacher

    async def fetch_assigned_exams(self, teacher_id: int,
                                   session: Optional[AsyncSession] = None) -> List[Exam]:
        """Published exams of a teacher with their schedules."""
        query = (
            select(Exam)
            .where(
                Exam.teacher_id == teacher_id,
                Exam.status == RecordStatus.PUBLISHED.value
            )
            .options(selectinload(Exam.schedules))
            .order_by(Exam.order_number, Exam.id)
        )
        async with self._get_session_context(session) as s:
            result = await s.execute(query)
            return list(result.scalars().all())

    async def fetch_assigned_activities(self, teacher_id: int,
                                        session: Optional[AsyncSession] = None) -> List[Activity]:
        """Published activities of a teacher with categories and their settings."""
        query = (
            select(Activity)
            .where(
                Activity.teacher_id == teacher_id,
                Activity.status == RecordStatus.PUBLISHED.value
            )
            .options(selectinload(Activity.categories).options(*_category_loaders()))
            .order_by(Activity.order_number, Activity.id)
        )
        async with self._get_session_context(session) as s:
            result = await s.execute(query)
            return list(result.scalars().all())

    async def fetch_assigned_units(self, student: Student,
                                   session: Optional[AsyncSession] = None):
        """
        Exams and activities assigned to a student through their teacher.

        Returns:
            Tuple of (exams, activities)

        Raises:
            TeacherNotFoundError: If the student has no teacher
        """
        if student.teacher_id is None:
            raise TeacherNotFoundError(student.id)
        exams = await self.fetch_assigned_exams(student.teacher_id, session=session)
        activities = await self.fetch_assigned_activities(student.teacher_id, session=session)
        return exams, activities

    async def fetch_eligible_categories(self, activity_id: int,
                                        session: Optional[AsyncSession] = None) -> List[ActivityCategory]:
        """
        Categories of an activity with their type-specific settings.

        Superseded categories are still included; the scoring layer drops them.
        """
        query = (
            select(ActivityCategory)
            .where(ActivityCategory.activity_id == activity_id)
            .options(*_category_loaders())
            .order_by(ActivityCategory.level, ActivityCategory.id)
        )
        async with self._get_session_context(session) as s:
            result = await s.execute(query)
            return list(result.scalars().all())

    async def fetch_completions(
        self,
        unit: Union[Exam, Activity],
        student_id: int,
        session: Optional[AsyncSession] = None
    ) -> Sequence:
        """
        One student's raw completions for an exam or an activity.

        Args:
            unit: Exam or Activity the completions belong to
            student_id: Student whose attempts to load

        Returns:
            Completions ordered by id, with their exam or category loaded
        """
        if isinstance(unit, Exam):
            query = (
                select(ExamCompletion)
                .where(
                    ExamCompletion.exam_id == unit.id,
                    ExamCompletion.student_id == student_id
                )
                .options(selectinload(ExamCompletion.exam))
                .order_by(ExamCompletion.id)
            )
        else:
            query = (
                select(ActivityCategoryCompletion)
                .join(ActivityCategoryCompletion.category)
                .where(
                    ActivityCategory.activity_id == unit.id,
                    ActivityCategoryCompletion.student_id == student_id
                )
                .options(
                    selectinload(ActivityCategoryCompletion.category)
                    .selectinload(ActivityCategory.activity)
                )
                .order_by(ActivityCategoryCompletion.id)
            )

        async with self._get_session_context(session) as s:
            result = await s.execute(query)
            return list(result.scalars().all())

    async def fetch_exam_by_slug(self, slug: str, teacher_id: int,
                                 session: Optional[AsyncSession] = None) -> Exam:
        """
        Published exam of a teacher by slug.

        Raises:
            UnitNotFoundError: If no such exam exists
        """
        query = (
            select(Exam)
            .where(
                Exam.slug == slug,
                Exam.teacher_id == teacher_id,
                Exam.status == RecordStatus.PUBLISHED.value
            )
            .options(selectinload(Exam.schedules))
        )
        async with self._get_session_context(session) as s:
            result = await s.execute(query)
            exam = result.scalar_one_or_none()

        if exam is None:
            raise UnitNotFoundError("exam", slug)
        return exam

    async def fetch_activity_by_slug(self, slug: str, teacher_id: int,
                                     session: Optional[AsyncSession] = None) -> Activity:
        """
        Published activity of a teacher by slug.

        Raises:
            UnitNotFoundError: If no such activity exists
        """
        query = (
            select(Activity)
            .where(
                Activity.slug == slug,
                Activity.teacher_id == teacher_id,
                Activity.status == RecordStatus.PUBLISHED.value
            )
            .options(selectinload(Activity.categories).options(*_category_loaders()))
        )
        async with self._get_session_context(session) as s:
            result = await s.execute(query)
            activity = result.scalar_one_or_none()

        if activity is None:
            raise UnitNotFoundError("activity", slug)
        return activity
