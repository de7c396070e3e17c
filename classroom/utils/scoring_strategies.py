"""
Scoring Strategy Pattern for Game-Type Polymorphic Scoring

This module implements the Strategy pattern for the three activity game types,
so each type keeps its own comparison rule and aggregation rule in one place:

- Point: best score per category (faster wins ties), summed across categories
- Time: fastest time per category, averaged; lower is better
- Stage: best score on the single most recent category

The factory is the only place a game type is mapped to behaviour; an unknown
type is rejected there instead of being scored as zero.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union
import logging

from classroom.constants import ScoringConstants
from classroom.data_models.performance import CategoryResult
from classroom.database.models import GameType
from classroom.utils.deduplication import distinct_levels, latest_exam_completions, newest_first
from classroom.utils.exceptions import EmptyStageCategoriesError, UnknownGameTypeError
from classroom.utils.ranking import SequentialRankingPolicy

logger = logging.getLogger(__name__)


def _by_score_then_time(completion):
    # Higher score first, then faster time
    return (-(completion.score or 0), completion.time_completed_seconds or 0)


def _by_time(completion):
    return completion.time_completed_seconds or 0


class GameScoringStrategy(ABC):
    """
    Abstract base class for game-type scoring.

    Each strategy selects one representative completion per category and
    folds those selections into a single unit score.
    """

    game_type: GameType

    @abstractmethod
    def order_completions(self, completions: Iterable) -> List:
        """Order one category's completions best first."""
        pass

    @abstractmethod
    def aggregate(self, selections: Dict[int, object]) -> Optional[float]:
        """
        Combine selected completions into one unit score.

        Args:
            selections: Mapping of category id to its chosen completion

        Returns:
            The unit score, or None when nothing was selected
        """
        pass

    @abstractmethod
    def overall_contribution(self, latest_completions: Sequence) -> float:
        """Contribution of one activity to a student's overall activity score."""
        pass

    @abstractmethod
    def sequential_policy(self) -> SequentialRankingPolicy:
        """Ranking policy for this game type's unit leaderboard."""
        pass

    def scoring_categories(self, categories: Sequence) -> List:
        """Categories that take part in scoring, in eligibility order."""
        return list(categories)

    def required_level_count(self, categories: Sequence) -> int:
        """Distinct levels a student must complete for the unit to count as done."""
        return len(categories)

    def select_best(self, categories: Sequence, completions: Iterable) -> Dict[int, object]:
        """
        Pick the representative completion for each scoring category.

        Args:
            categories: Eligible categories, already deduplicated by level
            completions: One student's raw completions for the unit

        Returns:
            Ordered mapping of category id to the chosen completion; categories
            without any completion are absent
        """
        completions = list(completions)
        selections = {}
        for category in self.scoring_categories(categories):
            candidates = [com for com in completions if com.category.id == category.id]
            if candidates:
                selections[category.id] = self.order_completions(candidates)[0]
        return selections

    def score_unit(self, categories: Sequence, completions: Iterable) -> Tuple[Optional[float], Dict[int, object]]:
        """Select and aggregate in one step."""
        selections = self.select_best(categories, completions)
        return self.aggregate(selections), selections

    def category_results(self, categories: Sequence, selections: Dict[int, object]) -> Tuple[CategoryResult, ...]:
        """Pair every scoring category with its selection (or None)."""
        return tuple(
            CategoryResult(category=category, completion=selections.get(category.id))
            for category in self.scoring_categories(categories)
        )

    def is_unit_done(self, categories: Sequence, completions: Iterable) -> bool:
        """
        Whether a student has fully completed the unit.

        Counts distinct completed levels among the eligible categories and
        compares it with the type's required level count.
        """
        category_ids = {category.id for category in categories}
        completed = distinct_levels(
            com for com in newest_first(completions) if com.category.id in category_ids
        )
        if not completed:
            return False
        return len(completed) == self.required_level_count(categories)


class PointScoringStrategy(GameScoringStrategy):
    """Points accumulate across categories; partial completion still scores."""

    game_type = GameType.POINT

    def order_completions(self, completions: Iterable) -> List:
        return sorted(completions, key=_by_score_then_time)

    def aggregate(self, selections: Dict[int, object]) -> Optional[float]:
        if not selections:
            return None
        # Missing categories are simply absent, so they add nothing
        return sum((com.score or 0) for com in selections.values())

    def overall_contribution(self, latest_completions: Sequence) -> float:
        return sum((com.score or 0) for com in latest_completions)

    def sequential_policy(self) -> SequentialRankingPolicy:
        return SequentialRankingPolicy(descending=True)


class TimeScoringStrategy(GameScoringStrategy):
    """
    Time-trial scoring.

    Only the completion time is compared; the score column is carried as data.
    A unit counts as done only with every level tier completed, and the tier
    count is the fixed ``TIME_TIER_COUNT`` rather than the category count.
    """

    game_type = GameType.TIME

    def order_completions(self, completions: Iterable) -> List:
        return sorted(completions, key=_by_time)

    def aggregate(self, selections: Dict[int, object]) -> Optional[float]:
        if not selections:
            return None
        times = [com.time_completed_seconds or 0 for com in selections.values()]
        return sum(times) / len(times)

    def required_level_count(self, categories: Sequence) -> int:
        return ScoringConstants.TIME_TIER_COUNT

    def overall_contribution(self, latest_completions: Sequence) -> float:
        """
        Reciprocal of the average time across all tiers.

        Faster students get a larger number so time activities add to the
        overall score in the same "higher is better" direction as the others.
        Activities without every tier completed contribute nothing.
        """
        tiers = distinct_levels(latest_completions)
        if len(tiers) != ScoringConstants.TIME_TIER_COUNT:
            return 0.0

        average_time = sum((com.time_completed_seconds or 0) for com in tiers) / len(tiers)
        if average_time <= 0:
            logger.warning("Ignoring time activity with non-positive average time")
            return 0.0
        return 1 / average_time

    def sequential_policy(self) -> SequentialRankingPolicy:
        return SequentialRankingPolicy(
            descending=False,
            min_completions=ScoringConstants.TIME_TIER_COUNT
        )


class StageScoringStrategy(GameScoringStrategy):
    """Stage scoring uses only the most recently updated category."""

    game_type = GameType.STAGE

    def target_category(self, categories: Sequence):
        """
        The single category a stage activity is scored on.

        Raises:
            EmptyStageCategoriesError: If there is no eligible category
        """
        if not categories:
            raise EmptyStageCategoriesError()
        return categories[0]

    def scoring_categories(self, categories: Sequence) -> List:
        if not categories:
            return []
        return [self.target_category(categories)]

    def order_completions(self, completions: Iterable) -> List:
        return sorted(completions, key=_by_score_then_time)

    def aggregate(self, selections: Dict[int, object]) -> Optional[float]:
        if not selections:
            return None
        completion = next(iter(selections.values()))
        return completion.score

    def overall_contribution(self, latest_completions: Sequence) -> float:
        return sum((com.score or 0) for com in latest_completions)

    def sequential_policy(self) -> SequentialRankingPolicy:
        return SequentialRankingPolicy(descending=True)


class ExamScoringStrategy:
    """Exams are scored on the latest submission per exam."""

    @staticmethod
    def canonical_completion(completions: Iterable):
        ordered = newest_first(completions)
        return ordered[0] if ordered else None

    def score_unit(self, completions: Iterable) -> Tuple[Optional[float], Optional[object]]:
        completion = self.canonical_completion(completions)
        if completion is None:
            return None, None
        return completion.score, completion

    @staticmethod
    def overall_score(completions: Iterable) -> Optional[float]:
        """Sum of the latest score per exam, or None without any completion."""
        latest = latest_exam_completions(completions)
        if not latest:
            return None
        return sum(com.score for com in latest)

    def sequential_policy(self) -> SequentialRankingPolicy:
        return SequentialRankingPolicy(descending=True)


class ScoringStrategyFactory:
    """Factory for creating scoring strategies based on an activity's game type"""

    _STRATEGIES = {
        GameType.POINT: PointScoringStrategy,
        GameType.TIME: TimeScoringStrategy,
        GameType.STAGE: StageScoringStrategy,
    }

    @classmethod
    def create_strategy(cls, game_type: Union[GameType, str]) -> GameScoringStrategy:
        """
        Create the scoring strategy for a game type.

        Args:
            game_type: GameType member or its stored string value

        Returns:
            Configured GameScoringStrategy instance

        Raises:
            UnknownGameTypeError: If the game type is not recognized
        """
        try:
            resolved = game_type if isinstance(game_type, GameType) else GameType(game_type)
        except ValueError:
            logger.error(f"Refusing to score unknown game type {game_type!r}")
            raise UnknownGameTypeError(game_type) from None

        return cls._STRATEGIES[resolved]()

    @classmethod
    def get_available_game_types(cls) -> List[str]:
        """Get list of supported game type values"""
        return [game_type.value for game_type in cls._STRATEGIES]
