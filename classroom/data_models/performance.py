"""
Performance data models for the classroom read path.

Provides immutable data transfer objects for rankings, unit summaries and
per-student performance summaries. None of these are persisted; every
request builds its own.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple, Union


class UndefinedMetric:
    """Value of a percentage or average taken over an empty denominator."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __eq__(self, other):
        return isinstance(other, UndefinedMetric)

    def __hash__(self):
        return hash(UndefinedMetric)

    def __repr__(self):
        return "UNDEFINED"

    def __str__(self):
        return "N/A"


UNDEFINED = UndefinedMetric()

Percent = Union[float, UndefinedMetric]


class PerformanceTrack(Enum):
    EXAM = "exam"
    ACTIVITY = "activity"


@dataclass(frozen=True)
class RankedEntry:
    """Single student's position on a leaderboard."""
    student_id: int
    full_name: str
    score: Optional[float]
    rank: Optional[int]
    completions: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class RankingResult:
    """Ranked students followed by unranked ones."""
    ranked: Tuple[RankedEntry, ...]
    unranked: Tuple[RankedEntry, ...]

    @property
    def entries(self) -> Tuple[RankedEntry, ...]:
        return self.ranked + self.unranked

    def find(self, student_id: int) -> Optional[RankedEntry]:
        for entry in self.entries:
            if entry.student_id == student_id:
                return entry
        return None


@dataclass(frozen=True)
class CategoryResult:
    """An eligible category with the completion chosen to represent it."""
    category: Any
    completion: Optional[Any] = None


@dataclass(frozen=True)
class UnitSummary:
    """One exam or activity as seen by one student."""
    unit_id: int
    slug: str
    title: str
    game_type: Optional[str]  # None for exams
    score: Optional[float]
    categories: Tuple[CategoryResult, ...] = ()
    completions: Tuple[Any, ...] = ()
    rank: Optional[int] = None


@dataclass(frozen=True)
class ExamPerformance:
    """Exam-track metrics for a student."""
    current_exam_count: int
    exams_completed_count: int
    exams_passed_count: int
    exams_failed_count: int
    exams_expired_count: int
    overall_exam_completion_percent: Percent
    overall_exam_rank: Optional[int]
    overall_exam_score: Optional[float]


@dataclass(frozen=True)
class ActivityPerformance:
    """Activity-track metrics for a student."""
    total_activity_count: int
    activities_completed_count: int
    overall_activity_completion_percent: Percent
    overall_activity_rank: Optional[int]
    overall_activity_score: Optional[float]


@dataclass(frozen=True)
class PerformanceSummary:
    """Complete performance data for a student across both tracks."""
    # Identity
    student_id: int
    public_id: str
    first_name: str
    middle_name: Optional[str]
    last_name: str
    full_name: str
    email: Optional[str]

    # Track metrics
    exam: ExamPerformance
    activity: ActivityPerformance


@dataclass(frozen=True)
class PerformancePage:
    """Paginated roster performance listing for one teacher."""
    entries: Tuple[RankedEntry, ...]
    total_count: int
    skip: int
    take: int
    track: PerformanceTrack
    sort: Optional[str] = None
    query: Optional[str] = field(default=None)
