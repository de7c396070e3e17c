from sqlalchemy import (
    Column, Integer, String, DateTime, Float, Text,
    ForeignKey, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func
from datetime import datetime
from enum import Enum

from classroom.utils.names import generate_full_name

Base = declarative_base()

class GameType(Enum):
    POINT = "point"
    TIME = "time"
    STAGE = "stage"

class RecordStatus(Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"

class ApprovalStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

class Teacher(Base):
    __tablename__ = 'teachers'

    id = Column(Integer, primary_key=True)
    first_name = Column(String(100), nullable=False)
    middle_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True)

    # Metadata
    created_at = Column(DateTime, default=func.now())

    # Relationships
    students = relationship("Student", back_populates="teacher")
    exams = relationship("Exam", back_populates="teacher")
    activities = relationship("Activity", back_populates="teacher")

    def __repr__(self):
        return f"<Teacher(id={self.id}, email='{self.email}')>"

class Student(Base):
    __tablename__ = 'students'

    id = Column(Integer, primary_key=True)
    teacher_id = Column(Integer, ForeignKey('teachers.id'), nullable=True, index=True)
    public_id = Column(String(20), nullable=False, unique=True, index=True)  # Stored upper-case
    first_name = Column(String(100), nullable=False)
    middle_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)
    approval_status = Column(String(20), nullable=False, default=ApprovalStatus.PENDING.value)

    # Metadata
    created_at = Column(DateTime, default=func.now())

    # Relationships
    teacher = relationship("Teacher", back_populates="students")
    exam_completions = relationship("ExamCompletion", back_populates="student")
    activity_completions = relationship("ActivityCategoryCompletion", back_populates="student")

    @property
    def full_name(self) -> str:
        return generate_full_name(self.first_name, self.last_name, self.middle_name)

    def __repr__(self):
        return f"<Student(id={self.id}, public_id='{self.public_id}')>"

class Exam(Base):
    __tablename__ = 'exams'

    id = Column(Integer, primary_key=True)
    teacher_id = Column(Integer, ForeignKey('teachers.id'), nullable=False, index=True)
    slug = Column(String(200), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    order_number = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=RecordStatus.DRAFT.value)
    passing_points = Column(Float, nullable=False, default=0)

    # Metadata
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    teacher = relationship("Teacher", back_populates="exams")
    schedules = relationship("ExamSchedule", back_populates="exam", cascade="all, delete-orphan")
    completions = relationship("ExamCompletion", back_populates="exam")

    __table_args__ = (UniqueConstraint('teacher_id', 'slug'),)

    def is_available_at(self, now: datetime) -> bool:
        """An exam is available once any of its schedules has started."""
        return any(
            schedule.start_date is not None and schedule.start_date <= now
            for schedule in self.schedules
        )

    def __repr__(self):
        return f"<Exam(slug='{self.slug}', status='{self.status}')>"

class ExamSchedule(Base):
    __tablename__ = 'exam_schedules'

    id = Column(Integer, primary_key=True)
    exam_id = Column(Integer, ForeignKey('exams.id'), nullable=False, index=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=True)

    exam = relationship("Exam", back_populates="schedules")

    def __repr__(self):
        return f"<ExamSchedule(exam_id={self.exam_id}, start_date={self.start_date})>"

class ExamCompletion(Base):
    __tablename__ = 'exam_completions'

    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey('students.id'), nullable=False, index=True)
    exam_id = Column(Integer, ForeignKey('exams.id'), nullable=False, index=True)
    score = Column(Float, nullable=False, default=0)
    time_completed_seconds = Column(Integer, nullable=True)
    submitted_at = Column(DateTime, nullable=False, default=func.now())

    student = relationship("Student", back_populates="exam_completions")
    exam = relationship("Exam", back_populates="completions")

    def __repr__(self):
        return f"<ExamCompletion(student_id={self.student_id}, exam_id={self.exam_id}, score={self.score})>"

class Activity(Base):
    __tablename__ = 'activities'

    id = Column(Integer, primary_key=True)
    teacher_id = Column(Integer, ForeignKey('teachers.id'), nullable=False, index=True)
    slug = Column(String(200), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    order_number = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=RecordStatus.DRAFT.value)
    game_type = Column(String(20), nullable=False)  # "point", "time" or "stage"

    # Metadata
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    teacher = relationship("Teacher", back_populates="activities")
    categories = relationship("ActivityCategory", back_populates="activity", cascade="all, delete-orphan")

    __table_args__ = (UniqueConstraint('teacher_id', 'slug'),)

    def __repr__(self):
        return f"<Activity(slug='{self.slug}', game_type='{self.game_type}')>"

class ActivityCategory(Base):
    __tablename__ = 'activity_categories'

    id = Column(Integer, primary_key=True)
    activity_id = Column(Integer, ForeignKey('activities.id'), nullable=False, index=True)
    level = Column(Integer, nullable=False)
    random_question_count = Column(Integer, nullable=True)

    # Metadata
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    activity = relationship("Activity", back_populates="categories")
    type_point = relationship("ActivityCategoryTypePoint", back_populates="category",
                              uselist=False, cascade="all, delete-orphan")
    type_time = relationship("ActivityCategoryTypeTime", back_populates="category",
                             uselist=False, cascade="all, delete-orphan")
    type_stage = relationship("ActivityCategoryTypeStage", back_populates="category",
                              uselist=False, cascade="all, delete-orphan")
    completions = relationship("ActivityCategoryCompletion", back_populates="category")

    __table_args__ = (CheckConstraint('level >= 1', name='check_category_level'),)

    def __repr__(self):
        return f"<ActivityCategory(activity_id={self.activity_id}, level={self.level})>"

class ActivityCategoryTypePoint(Base):
    __tablename__ = 'activity_category_type_points'

    id = Column(Integer, primary_key=True)
    category_id = Column(Integer, ForeignKey('activity_categories.id'), nullable=False, unique=True)
    points_per_question = Column(Integer, nullable=False, default=1)
    duration_seconds = Column(Integer, nullable=False, default=0)

    category = relationship("ActivityCategory", back_populates="type_point")

class ActivityCategoryTypeTime(Base):
    __tablename__ = 'activity_category_type_times'

    id = Column(Integer, primary_key=True)
    category_id = Column(Integer, ForeignKey('activity_categories.id'), nullable=False, unique=True)
    correct_answer_count = Column(Integer, nullable=False, default=1)

    category = relationship("ActivityCategory", back_populates="type_time")

class ActivityCategoryTypeStage(Base):
    __tablename__ = 'activity_category_type_stages'

    id = Column(Integer, primary_key=True)
    category_id = Column(Integer, ForeignKey('activity_categories.id'), nullable=False, unique=True)
    total_stage_count = Column(Integer, nullable=False, default=1)

    category = relationship("ActivityCategory", back_populates="type_stage")

class ActivityCategoryCompletion(Base):
    __tablename__ = 'activity_category_completions'

    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey('students.id'), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey('activity_categories.id'), nullable=False, index=True)
    score = Column(Float, nullable=True)  # Unused by time-trial scoring
    time_completed_seconds = Column(Integer, nullable=False, default=0)
    submitted_at = Column(DateTime, nullable=False, default=func.now())

    student = relationship("Student", back_populates="activity_completions")
    category = relationship("ActivityCategory", back_populates="completions")

    def __repr__(self):
        return (f"<ActivityCategoryCompletion(student_id={self.student_id}, "
                f"category_id={self.category_id}, score={self.score})>")
