"""
Grouping and ranking primitives shared by the dashboard aggregators.

Ranking, vehicle and client-vehicle aggregation all follow the same pattern:
group records by a key, count per group, sort descending by count with ties
kept in first-seen order, and optionally keep the top N. This module holds
that pattern once so every aggregator applies identical tie-break rules.

Ordering guarantees:
- count_by / count_nested return dicts in first-seen key order
- rank_counts relies on sorted() stability (reverse=True keeps equal keys in
  their original order), so ties resolve to the first-seen key
- Keys for which the key function returns None are skipped
"""

from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar

T = TypeVar("T")
K = TypeVar("K")
K2 = TypeVar("K2")


def count_by(
    items: Iterable[T],
    key: Callable[[T], Optional[K]]
) -> Dict[K, int]:
    """
    Count items per key, preserving first-seen key order.

    Args:
        items: Items to group.
        key: Grouping key function; returning None excludes the item.

    Returns:
        Dict mapping each key to its item count.

    Example:
        >>> count_by(["a", "b", "a"], lambda s: s)
        {'a': 2, 'b': 1}
    """
    counts: Dict[K, int] = {}
    for item in items:
        group = key(item)
        if group is None:
            continue
        counts[group] = counts.get(group, 0) + 1
    return counts


def count_nested(
    items: Iterable[T],
    outer_key: Callable[[T], Optional[K]],
    inner_key: Callable[[T], Optional[K2]]
) -> Dict[K, Dict[K2, int]]:
    """
    Two-level cross tabulation, first-seen order at both levels.

    An item is skipped when either key is None.
    """
    table: Dict[K, Dict[K2, int]] = {}
    for item in items:
        outer = outer_key(item)
        inner = inner_key(item)
        if outer is None or inner is None:
            continue
        row = table.setdefault(outer, {})
        row[inner] = row.get(inner, 0) + 1
    return table


def rank_counts(
    counts: Mapping[K, int],
    limit: Optional[int] = None
) -> List[Tuple[K, int]]:
    """
    Sort (key, count) pairs descending by count with stable tie-break.

    Args:
        counts: Counts in first-seen key order.
        limit: Keep only the first `limit` entries; None keeps all.

    Returns:
        List of (key, count) tuples, highest count first.
    """
    ranked = sorted(counts.items(), key=lambda entry: entry[1], reverse=True)
    if limit is not None:
        ranked = ranked[:max(limit, 0)]
    return ranked


def top_entry(counts: Mapping[K, int]) -> Optional[Tuple[K, int]]:
    """Highest-count (key, count) pair, first-seen on ties; None when empty."""
    ranked = rank_counts(counts, limit=1)
    return ranked[0] if ranked else None


def group_and_rank(
    items: Iterable[T],
    key: Callable[[T], Optional[K]],
    limit: Optional[int] = None
) -> List[Tuple[K, int]]:
    """
    Group, count and rank in one call.

    Example:
        >>> group_and_rank(["x", "y", "y", "z"], lambda s: s, limit=2)
        [('y', 2), ('x', 1)]
    """
    return rank_counts(count_by(items, key), limit=limit)
