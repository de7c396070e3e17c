"""
Application-wide constants for the classroom performance engine.

Magic numbers used by scoring, ranking and paging live here so the rules
they encode have one name each.
"""

class ScoringConstants:
    """Constants related to completion scoring."""

    # Time-trial activities count as done only with this many level tiers completed.
    # Fixed tier count, not derived from the activity's category count.
    TIME_TIER_COUNT = 3

    # Completion percentages are rounded to this many decimals
    PERCENT_DECIMALS = 2

class PaginationConstants:
    """Constants for paginated roster listings."""

    DEFAULT_TAKE = 10
    MAX_TAKE = 100

class SortConstants:
    """Allowed sort keys for roster performance listings."""

    SORT_BY_NAME = "name"
    SORT_BY_RANK = "rank"
    ASCENDING = "asc"
    DESCENDING = "desc"
