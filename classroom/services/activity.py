"""
Activity service for per-activity leaderboards and student activity summaries.

Scoring follows the activity's game type; see
classroom.utils.scoring_strategies for the per-type rules.
"""

import asyncio
import logging
from typing import List, Optional

from classroom.data_models.performance import RankedEntry, UnitSummary
from classroom.database.models import Activity
from classroom.operations.unit_scoring import UnitScoring
from classroom.services.base import BaseService

logger = logging.getLogger(__name__)


class ActivityService(BaseService):
    """Service for ranking a teacher's roster on a single activity."""

    async def rank_unit(self, activity: Activity, teacher_id: int) -> List[RankedEntry]:
        """
        Sequential leaderboard for one activity over a teacher's roster.

        Completions are fetched per student concurrently; placement depends
        only on the sort, never on which fetch finished first.
        """
        roster, categories = await asyncio.gather(
            self.roster.fetch_roster(teacher_id, load_completions=False),
            self.roster.fetch_eligible_categories(activity.id)
        )
        completions = await asyncio.gather(
            *(self.roster.fetch_completions(activity, student.id) for student in roster)
        )
        rankings = UnitScoring.rank_unit(activity, list(zip(roster, completions)), categories=categories)
        logger.debug(
            f"Ranked {len(rankings)} students on {activity.game_type} activity {activity.id} "
            f"for teacher {teacher_id}"
        )
        return rankings

    async def summarize_unit_for_student(self, activity: Activity, student_id: int,
                                         teacher_id: int) -> UnitSummary:
        """Score, chosen completion per category and leaderboard rank of one student."""
        categories, completions, rankings = await asyncio.gather(
            self.roster.fetch_eligible_categories(activity.id),
            self.roster.fetch_completions(activity, student_id),
            self.rank_unit(activity, teacher_id)
        )
        rank: Optional[int] = next(
            (entry.rank for entry in rankings if entry.student_id == student_id), None
        )
        return UnitScoring.summarize_activity(activity, categories, completions, rank)
