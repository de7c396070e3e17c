"""
Ranking policies for unit and roster leaderboards.

Two policies exist because they tie-break differently and are used at
different call sites:

- SequentialRankingPolicy: a single unit's leaderboard. Ranks are sorted
  positions, so equal scores get consecutive ranks in stable input order.
- CompetitionRankingPolicy: teacher-scoped overall rankings. Equal scores share
  a rank and the next distinct score resumes at its position (1-2-2-4).

Both are total: every student passed in comes back exactly once, either ranked
or in the unranked tail ordered by full name.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

from classroom.data_models.performance import RankedEntry, RankingResult
from classroom.utils.names import full_name_sort_key


@dataclass(frozen=True)
class ScoredStudent:
    """A student's computed score, ready to be ranked."""
    student_id: int
    full_name: str
    score: Optional[float]
    completions: Tuple[Any, ...] = ()


def order_unranked(students: Iterable[ScoredStudent]) -> Tuple[RankedEntry, ...]:
    """Unranked students in ascending full-name order, without a rank."""
    ordered = sorted(students, key=lambda s: full_name_sort_key(s.full_name))
    return tuple(
        RankedEntry(
            student_id=s.student_id,
            full_name=s.full_name,
            score=s.score,
            rank=None,
            completions=s.completions
        )
        for s in ordered
    )


class RankingPolicy(ABC):
    """Abstract base class for ranking policies."""

    def __init__(self, descending: bool = True):
        """
        Args:
            descending: True when a higher score is better
        """
        self.descending = descending

    def is_rankable(self, student: ScoredStudent) -> bool:
        return student.score is not None

    def sort_scored(self, students: List[ScoredStudent]) -> List[ScoredStudent]:
        # sorted() stays stable with reverse=True, so equal scores keep input order
        return sorted(students, key=lambda s: s.score, reverse=self.descending)

    @abstractmethod
    def assign_ranks(self, ordered: List[ScoredStudent]) -> List[int]:
        """Rank for each already-sorted student."""
        pass

    def rank(self, students: Iterable[ScoredStudent]) -> RankingResult:
        """
        Rank a roster.

        Args:
            students: Scored students in a deterministic input order

        Returns:
            RankingResult with ranked entries first and the unranked tail
        """
        students = list(students)
        rankable = [s for s in students if self.is_rankable(s)]
        rankable_ids = {id(s) for s in rankable}
        unrankable = [s for s in students if id(s) not in rankable_ids]

        ordered = self.sort_scored(rankable)
        ranks = self.assign_ranks(ordered)

        ranked = tuple(
            RankedEntry(
                student_id=s.student_id,
                full_name=s.full_name,
                score=s.score,
                rank=rank,
                completions=s.completions
            )
            for s, rank in zip(ordered, ranks)
        )
        return RankingResult(ranked=ranked, unranked=order_unranked(unrankable))


class SequentialRankingPolicy(RankingPolicy):
    """
    Positional ranking for a single unit's leaderboard.

    ``min_completions`` moves students with fewer canonical completions to the
    unranked tail even when they have a numeric score.
    """

    def __init__(self, descending: bool = True, min_completions: int = 0):
        super().__init__(descending)
        self.min_completions = min_completions

    def is_rankable(self, student: ScoredStudent) -> bool:
        if not super().is_rankable(student):
            return False
        return len(student.completions) >= self.min_completions

    def assign_ranks(self, ordered: List[ScoredStudent]) -> List[int]:
        return list(range(1, len(ordered) + 1))


class CompetitionRankingPolicy(RankingPolicy):
    """Standard competition ranking: ties share a rank, the next rank skips (1-2-2-4)."""

    def assign_ranks(self, ordered: List[ScoredStudent]) -> List[int]:
        ranks = []
        previous_score = None
        current_rank = None
        for position, student in enumerate(ordered, start=1):
            if current_rank is None or student.score != previous_score:
                current_rank = position
            previous_score = student.score
            ranks.append(current_rank)
        return ranks
