"""
Engine Runner

Orchestrates the matching pipeline for one request:
1. Captures a single reference time
2. Fetches documents, profile and scholarships via the store adapters
3. Runs the recommendation engine
4. Returns the engine output

No retries and no partial results: any store failure propagates to the caller.
"""

import asyncio
import logging
import os
from datetime import datetime, timezone
from typing import List, Optional

from dotenv import load_dotenv

from .adapter import StoreBundle
from .contracts import ScoringConfig, RecommendationOutput, MatchOutput, ScoredScholarship
from .constants import Category, ScholarshipStatus
from .engine import RecommendationEngine
from .ranker import flatten_categories

load_dotenv()

logger = logging.getLogger(__name__)

RECOMMENDATION_TIMEOUT_SECONDS = float(os.getenv("RECOMMENDATION_TIMEOUT_SECONDS", "10"))

RECOMMENDATION_STATUSES = (ScholarshipStatus.OPEN.value,)
MATCHING_STATUSES = (ScholarshipStatus.OPEN.value, ScholarshipStatus.UPCOMING.value)


def _deadline(timeout: Optional[float]) -> float:
    """Loop time by which every store read of this request must finish."""
    return asyncio.get_running_loop().time() + (timeout or RECOMMENDATION_TIMEOUT_SECONDS)


async def _fetch(awaitable, deadline: float):
    remaining = max(deadline - asyncio.get_running_loop().time(), 0)
    return await asyncio.wait_for(awaitable, timeout=remaining)


async def run_recommendations(
    user_id: str,
    stores: StoreBundle,
    now: Optional[datetime] = None,
    limit: Optional[int] = None,
    config: Optional[ScoringConfig] = None,
    timeout: Optional[float] = None
) -> RecommendationOutput:
    """
    Main entry point: tiered recommendations for a user.

    Args:
        user_id: Requesting user
        stores: Document, scholarship and profile stores
        now: Reference time (captured here when omitted)
        limit: Max results per tier
        config: Scoring weights and thresholds
        timeout: Seconds allowed for all store reads together

    Returns:
        RecommendationOutput
    """
    now = now or datetime.now(timezone.utc)
    deadline = _deadline(timeout)
    logger.info(f"🚀 Starting recommendation pipeline for user: {user_id}")

    documents, user_profile, candidates = await _fetch(
        asyncio.gather(
            stores.documents.fetch_completed(user_id),
            stores.profiles.fetch_profile(user_id),
            stores.scholarships.fetch_open(now, statuses=RECOMMENDATION_STATUSES),
        ),
        deadline,
    )
    logger.info(f"📄 Parsed documents: {len(documents)} | 🎓 Open scholarships: {len(candidates)}")

    engine = RecommendationEngine(config)
    output = engine.recommend(
        documents=documents,
        user_profile=user_profile,
        candidates=candidates,
        now=now,
        limit=limit,
        user_id=user_id,
    )

    logger.info(
        f"✨ Recommendations for {user_id}: "
        f"highly={len(output.highly_recommended)} "
        f"partially={len(output.partially_recommended)} "
        f"explore={len(output.explore_and_prepare)} "
        f"eligible={output.stats.eligible_count} "
        f"missing={output.stats.missing_data} "
        f"({output.processing_time_ms}ms)"
    )
    return output


async def run_recommendations_simple(
    user_id: str,
    stores: StoreBundle,
    limit: int = 10,
    now: Optional[datetime] = None,
    config: Optional[ScoringConfig] = None,
    timeout: Optional[float] = None
) -> List[ScoredScholarship]:
    """
    Legacy output: all tiers concatenated in tier order, first `limit` entries.
    """
    output = await run_recommendations(user_id, stores, now=now, limit=limit, config=config, timeout=timeout)
    by_category = {
        Category.HIGHLY_RECOMMENDED: output.highly_recommended,
        Category.PARTIALLY_SUITABLE: output.partially_recommended,
        Category.EXPLORE_AND_PREPARE: output.explore_and_prepare,
    }
    return flatten_categories(by_category, limit)


async def run_matching(
    user_id: str,
    stores: StoreBundle,
    now: Optional[datetime] = None,
    config: Optional[ScoringConfig] = None,
    timeout: Optional[float] = None
) -> MatchOutput:
    """
    Match-only variant: scores open and upcoming scholarships, eligible first.
    """
    now = now or datetime.now(timezone.utc)
    deadline = _deadline(timeout)
    logger.info(f"🔎 Matching scholarships for user: {user_id}")

    documents, user_profile = await _fetch(
        asyncio.gather(
            stores.documents.fetch_completed(user_id),
            stores.profiles.fetch_profile(user_id),
        ),
        deadline,
    )
    if not documents:
        logger.info(f"No parsed documents for user {user_id}; skipping matching")
        return RecommendationEngine(config).match(documents, user_profile, [], now)

    candidates = await _fetch(
        stores.scholarships.fetch_open(now, statuses=MATCHING_STATUSES),
        deadline,
    )

    output = RecommendationEngine(config).match(documents, user_profile, candidates, now)
    logger.info(
        f"Matched {output.total_scholarships} scholarships for user {user_id} "
        f"(eligible={output.eligible_count})"
    )
    return output


async def explain_match(
    user_id: str,
    scholarship_id: str,
    stores: StoreBundle,
    now: Optional[datetime] = None,
    config: Optional[ScoringConfig] = None,
    timeout: Optional[float] = None
) -> ScoredScholarship:
    """
    Detailed match for one scholarship, whatever its status.

    Raises:
        LookupError: the scholarship does not exist
    """
    now = now or datetime.now(timezone.utc)
    deadline = _deadline(timeout)

    documents, user_profile, candidate = await _fetch(
        asyncio.gather(
            stores.documents.fetch_completed(user_id),
            stores.profiles.fetch_profile(user_id),
            stores.scholarships.get_by_id(scholarship_id),
        ),
        deadline,
    )
    if candidate is None:
        raise LookupError(f"Scholarship not found: {scholarship_id}")

    return RecommendationEngine(config).explain(documents, user_profile, candidate, now)
