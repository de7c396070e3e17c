"""
Shared test fixtures for the classroom performance engine.

Engine tests build transient ORM graphs in memory (no session needed);
service tests run against a temporary SQLite file.
"""
import os
from datetime import datetime, timedelta

os.environ.setdefault("LOG_TO_FILE", "false")

import pytest

from classroom.database.models import (
    Activity, ActivityCategory, ActivityCategoryCompletion, ApprovalStatus,
    Exam, ExamCompletion, ExamSchedule, RecordStatus, Student
)

BASE_TIME = datetime(2024, 3, 1, 9, 0, 0)


class GraphBuilder:
    """Builds linked, unsaved entity graphs with predictable ids."""

    def __init__(self):
        self._next_id = 0

    def _id(self):
        self._next_id += 1
        return self._next_id

    def student(self, first_name, last_name, middle_name=None, teacher_id=1):
        student_id = self._id()
        return Student(
            id=student_id,
            teacher_id=teacher_id,
            public_id=f"STU{student_id:04d}",
            first_name=first_name,
            middle_name=middle_name,
            last_name=last_name,
            email=f"{first_name.lower()}@example.com",
            approval_status=ApprovalStatus.APPROVED.value
        )

    def activity(self, game_type, levels=(1, 2, 3), slug=None):
        activity_id = self._id()
        activity = Activity(
            id=activity_id,
            teacher_id=1,
            slug=slug or f"activity-{activity_id}",
            title=f"Activity {activity_id}",
            order_number=activity_id,
            status=RecordStatus.PUBLISHED.value,
            game_type=game_type
        )
        for level in levels:
            self.category(activity, level)
        return activity

    def category(self, activity, level, updated_at=None):
        return ActivityCategory(
            id=self._id(),
            activity=activity,
            level=level,
            updated_at=updated_at or BASE_TIME
        )

    def activity_completion(self, student, category, score=None, time=0, submitted_at=None):
        return ActivityCategoryCompletion(
            id=self._id(),
            student=student,
            category=category,
            score=score,
            time_completed_seconds=time,
            submitted_at=submitted_at or BASE_TIME
        )

    def exam(self, passing_points=50, start_dates=(BASE_TIME,), slug=None):
        exam_id = self._id()
        exam = Exam(
            id=exam_id,
            teacher_id=1,
            slug=slug or f"exam-{exam_id}",
            title=f"Exam {exam_id}",
            order_number=exam_id,
            status=RecordStatus.PUBLISHED.value,
            passing_points=passing_points
        )
        for start_date in start_dates:
            ExamSchedule(id=self._id(), exam=exam, start_date=start_date)
        return exam

    @staticmethod
    def level(activity, level):
        """The first category of an activity at a level."""
        return next(cat for cat in activity.categories if cat.level == level)

    def exam_completion(self, student, exam, score, submitted_at=None):
        return ExamCompletion(
            id=self._id(),
            student=student,
            exam=exam,
            score=score,
            time_completed_seconds=60,
            submitted_at=submitted_at or BASE_TIME
        )


@pytest.fixture
def builder():
    return GraphBuilder()


@pytest.fixture
def base_time():
    return BASE_TIME


@pytest.fixture
def later():
    """Offset helper: later(minutes) -> BASE_TIME + minutes."""
    def _later(minutes):
        return BASE_TIME + timedelta(minutes=minutes)
    return _later
