"""
Completion and category deduplication.

Students may submit a unit many times and teachers may revise a category at
an existing level. These helpers collapse both down to the canonical records
used for scoring. All of them return new lists and leave their input alone.
"""

from typing import Callable, Hashable, Iterable, List, TypeVar

T = TypeVar('T')


def first_per_key(items: Iterable[T], key: Callable[[T], Hashable]) -> List[T]:
    """Keep the first item seen for each key, preserving order."""
    seen = set()
    result = []
    for item in items:
        item_key = key(item)
        if item_key in seen:
            continue
        seen.add(item_key)
        result.append(item)
    return result


def newest_first(completions: Iterable[T]) -> List[T]:
    """Sort completions by submission time, latest first (stable)."""
    return sorted(completions, key=lambda com: com.submitted_at, reverse=True)


def latest_exam_completions(completions: Iterable[T]) -> List[T]:
    """Latest submission per exam."""
    return first_per_key(newest_first(completions), lambda com: com.exam.id)


def latest_category_completions(completions: Iterable[T]) -> List[T]:
    """Latest submission per activity category."""
    return first_per_key(newest_first(completions), lambda com: com.category.id)


def distinct_levels(completions: Iterable[T]) -> List[T]:
    """First completion per category level, in input order."""
    return first_per_key(completions, lambda com: com.category.level)


def eligible_categories(categories: Iterable[T]) -> List[T]:
    """
    Drop superseded categories.

    Categories are sorted by ``updated_at`` descending and only the first one
    per level survives, so a revised category replaces the older one at the
    same level. Ties keep their input order.
    """
    ordered = sorted(categories, key=lambda cat: cat.updated_at, reverse=True)
    return first_per_key(ordered, lambda cat: cat.level)
