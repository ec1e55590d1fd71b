"""
Classifier

Buckets match scores into recommendation tiers:
- Highly Recommended (score >= 80)
- Partially Suitable (60 <= score < 80)
- Explore & Prepare (score < 60)
"""

from typing import Dict, List, Optional

from .contracts import ScoringConfig, ScoredScholarship
from .constants import Category


def categorize(score: int, config: Optional[ScoringConfig] = None) -> Category:
    """
    Classify a single score into a tier.

    Args:
        score: Match score 0-100
        config: Thresholds; defaults to ScoringConfig()

    Returns:
        Category enum value
    """
    config = config or ScoringConfig()

    if score >= config.highly_recommended_min_score:
        return Category.HIGHLY_RECOMMENDED
    if score >= config.partially_suitable_min_score:
        return Category.PARTIALLY_SUITABLE
    return Category.EXPLORE_AND_PREPARE


def get_category_counts(scored: List[ScoredScholarship]) -> Dict[Category, int]:
    """
    Count scored scholarships in each tier.
    """
    counts = {category: 0 for category in Category}
    for item in scored:
        counts[Category(item.result.category)] += 1
    return counts
