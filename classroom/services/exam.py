"""
Exam service for per-exam leaderboards and student exam summaries.
"""

import asyncio
import logging
from typing import List, Optional

from classroom.data_models.performance import RankedEntry, UnitSummary
from classroom.database.models import Exam
from classroom.operations.unit_scoring import UnitScoring
from classroom.services.base import BaseService

logger = logging.getLogger(__name__)


class ExamService(BaseService):
    """Service for ranking a teacher's roster on a single exam."""

    async def rank_unit(self, exam: Exam, teacher_id: int) -> List[RankedEntry]:
        """
        Sequential leaderboard for one exam over a teacher's roster.

        Each student is scored on their latest submission; students without
        one follow the ranked students in name order.
        """
        roster = await self.roster.fetch_roster(teacher_id, load_completions=False)
        completions = await asyncio.gather(
            *(self.roster.fetch_completions(exam, student.id) for student in roster)
        )
        rankings = UnitScoring.rank_unit(exam, list(zip(roster, completions)))
        logger.debug(f"Ranked {len(rankings)} students on exam {exam.id} for teacher {teacher_id}")
        return rankings

    async def summarize_unit_for_student(self, exam: Exam, student_id: int,
                                         teacher_id: int) -> UnitSummary:
        """Score, canonical completion and leaderboard rank of one student on one exam."""
        completions, rankings = await asyncio.gather(
            self.roster.fetch_completions(exam, student_id),
            self.rank_unit(exam, teacher_id)
        )
        rank: Optional[int] = next(
            (entry.rank for entry in rankings if entry.student_id == student_id), None
        )
        return UnitScoring.summarize_exam(exam, completions, rank)
