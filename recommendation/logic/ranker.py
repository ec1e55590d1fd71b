"""
Ranker

Orders scored scholarships within and across tiers and truncates each tier.
"""

from typing import Dict, List

from .contracts import ScoredScholarship
from .constants import Category, MAX_RESULTS_PER_CATEGORY


def _deadline_key(item: ScoredScholarship) -> float:
    days = item.result.days_until_deadline
    return float("inf") if days is None else days


def rank_results(scored: List[ScoredScholarship]) -> List[ScoredScholarship]:
    """
    Rank by score (descending), soonest deadline first on ties.
    Scholarships without a deadline sort after dated ones.
    """
    return sorted(scored, key=lambda item: (-item.result.score, _deadline_key(item)))


def rank_for_matching(scored: List[ScoredScholarship]) -> List[ScoredScholarship]:
    """
    Match-only ordering: eligible scholarships first, then by score and deadline.
    """
    return sorted(
        scored,
        key=lambda item: (not item.result.eligible, -item.result.score, _deadline_key(item))
    )


def group_by_category(
    ranked: List[ScoredScholarship],
    max_per_category: int = MAX_RESULTS_PER_CATEGORY
) -> Dict[Category, List[ScoredScholarship]]:
    """
    Split a ranked list into tiers, keeping ranking order, and truncate each tier.

    Args:
        ranked: Output of rank_results
        max_per_category: Maximum per tier

    Returns:
        Dict mapping every Category to its (possibly empty) list
    """
    by_category: Dict[Category, List[ScoredScholarship]] = {
        category: [] for category in Category
    }

    for item in ranked:
        bucket = by_category[Category(item.result.category)]
        if len(bucket) < max_per_category:
            bucket.append(item)

    return by_category


def flatten_categories(
    by_category: Dict[Category, List[ScoredScholarship]],
    limit: int
) -> List[ScoredScholarship]:
    """Concatenate tiers in tier order and keep the first `limit` entries."""
    combined: List[ScoredScholarship] = []
    for category in Category:
        combined.extend(by_category.get(category, []))
    return combined[:limit]
