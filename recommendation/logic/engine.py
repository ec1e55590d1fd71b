"""
Recommendation Engine

Pure orchestrator that combines the matching components into one pipeline.
Takes already-fetched documents, profile and scholarships - no I/O here.
"""

import time
from datetime import datetime
from typing import List, Optional

from .contracts import (
    ParsedDocument,
    UserProfileFields,
    CandidateScholarship,
    ScoredScholarship,
    ScoringConfig,
    RecommendationOutput,
    MatchOutput,
)
from .constants import ParsingStatus, ENGINE_VERSION
from .profile_extractor import build_profile, find_missing_data
from .aggregator import batch_score
from .ranker import rank_results, rank_for_matching, group_by_category
from .output_assembler import (
    assemble_output,
    NO_DOCUMENTS_MESSAGE,
    NO_SCHOLARSHIPS_MESSAGE,
    MATCHING_COMPLETED_MESSAGE,
)


def _completed_count(documents: List[ParsedDocument]) -> int:
    return sum(1 for d in documents if d.parsing_status == ParsingStatus.COMPLETED.value)


class RecommendationEngine:
    """
    Scholarship matching engine.

    Pipeline flow:
    1. Profile Extraction - best academic document + English test + profile fallback
    2. Scoring - weighted criteria per scholarship
    3. Classification - tier per score
    4. Ranking - score desc, soonest deadline first, truncated per tier
    5. Output Assembly - RecommendationOutput / MatchOutput
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()
        self.version = ENGINE_VERSION

    def recommend(
        self,
        documents: List[ParsedDocument],
        user_profile: Optional[UserProfileFields],
        candidates: List[CandidateScholarship],
        now: datetime,
        limit: Optional[int] = None,
        user_id: Optional[str] = None
    ) -> RecommendationOutput:
        """
        Tiered recommendations for one user.

        Missing documents are not an error: scoring proceeds with the explicit
        profile and the output carries an explanatory message.

        Args:
            documents: User documents (only completed ones are read)
            user_profile: Explicit profile fields, may be None
            candidates: Scholarships to score
            now: Reference time for deadlines
            limit: Max results per tier (defaults to config)
            user_id: Passed through to the output

        Returns:
            RecommendationOutput
        """
        start_time = time.perf_counter()
        limit = limit or self.config.max_results_per_category

        profile = build_profile(documents, user_profile)
        missing_data = find_missing_data(profile)

        scored = batch_score(profile, candidates, now, self.config)
        ranked = rank_results(scored)
        by_category = group_by_category(ranked, limit)

        processing_time = (time.perf_counter() - start_time) * 1000

        return assemble_output(
            user_id=user_id,
            by_category=by_category,
            total_analyzed=len(candidates),
            eligible_count=sum(1 for s in scored if s.result.eligible),
            missing_data=missing_data,
            document_count=_completed_count(documents),
            processing_time_ms=round(processing_time, 2),
        )

    def match(
        self,
        documents: List[ParsedDocument],
        user_profile: Optional[UserProfileFields],
        candidates: List[CandidateScholarship],
        now: datetime
    ) -> MatchOutput:
        """
        Match-only variant: every candidate scored, eligible first.
        Requires at least one completed document.
        """
        document_count = _completed_count(documents)
        if document_count == 0:
            return MatchOutput(message=NO_DOCUMENTS_MESSAGE)

        if not candidates:
            return MatchOutput(
                user_documents_count=document_count,
                message=NO_SCHOLARSHIPS_MESSAGE,
            )

        profile = build_profile(documents, user_profile)
        ranked = rank_for_matching(batch_score(profile, candidates, now, self.config))

        return MatchOutput(
            matches=ranked,
            total_scholarships=len(ranked),
            eligible_count=sum(1 for s in ranked if s.result.eligible),
            user_documents_count=document_count,
            message=MATCHING_COMPLETED_MESSAGE,
        )

    def explain(
        self,
        documents: List[ParsedDocument],
        user_profile: Optional[UserProfileFields],
        candidate: CandidateScholarship,
        now: datetime
    ) -> ScoredScholarship:
        """
        Score a single scholarship for a user.

        Useful for showing the full rationale on a scholarship detail page.
        """
        profile = build_profile(documents, user_profile)
        return batch_score(profile, [candidate], now, self.config)[0]
