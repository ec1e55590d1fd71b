"""
Pipeline runs against in-memory stores.
"""

import asyncio

import pytest

from recommendation.logic.adapter import StoreBundle
from recommendation.logic.output_assembler import (
    NO_DOCUMENTS_MESSAGE,
    NO_PARSED_DOCUMENTS_MESSAGE,
    NO_SCHOLARSHIPS_MESSAGE,
    MATCHING_COMPLETED_MESSAGE,
)
from recommendation.logic.runner import (
    run_recommendations,
    run_recommendations_simple,
    run_matching,
    explain_match,
)

from helpers import (
    NOW,
    transcript,
    ielts,
    profile_fields,
    scholarship,
    FakeDocumentStore,
    FakeScholarshipStore,
    FakeProfileStore,
)


def catalogue():
    return [
        scholarship("open-all", country="Germany"),
        scholarship("masters-only", levels=["Master"], deadline_in_days=10),
        scholarship("stretch", levels=["PhD"], min_gpa=3.9, fields=["Medicine"], english=8.0),
        scholarship("upcoming", status="upcoming"),
        scholarship("closed", status="closed"),
        scholarship("unverified", verified=False),
        scholarship("expired", deadline_in_days=-1),
    ]


def stores(documents=None, profile=None, candidates=None):
    if documents is None:
        documents = [transcript(level="Bachelor", gpa=3.5, stream="Computer Science"), ielts(7.0)]
    if profile is None:
        profile = profile_fields(preferred_countries=["Germany"])
    return StoreBundle(
        documents=FakeDocumentStore(documents),
        scholarships=FakeScholarshipStore(catalogue() if candidates is None else candidates),
        profiles=FakeProfileStore(profile),
    )


def ids(items):
    return [item.candidate.summary.id for item in items]


def test_recommendations_are_tiered():
    output = asyncio.run(run_recommendations("user-1", stores(), now=NOW))

    assert ids(output.highly_recommended) == ["open-all"]
    assert ids(output.partially_recommended) == ["masters-only"]
    assert ids(output.explore_and_prepare) == ["stretch"]
    assert output.partially_recommended[0].result.score == 73
    assert output.explore_and_prepare[0].result.score == 10

    assert output.user_id == "user-1"
    assert output.request_id
    assert output.message is None
    assert output.stats.total_analyzed == 3
    assert output.stats.eligible_count == 1
    assert output.stats.missing_data == []
    assert output.stats.has_documents
    assert output.stats.document_count == 2


def test_recommendations_without_documents_use_profile_only():
    profile = profile_fields(education_level="Master", gpa=3.2, major="Law")

    output = asyncio.run(run_recommendations("user-1", stores(documents=[], profile=profile), now=NOW))

    assert output.message == NO_PARSED_DOCUMENTS_MESSAGE
    assert not output.stats.has_documents
    assert output.stats.missing_data == ["IELTS Score", "Preferred Countries"]
    assert "masters-only" in ids(output.highly_recommended)


def test_pending_documents_do_not_count():
    output = asyncio.run(run_recommendations(
        "user-1",
        stores(documents=[transcript(gpa=3.9, status="processing")]),
        now=NOW,
    ))

    assert output.stats.document_count == 0
    assert output.message == NO_PARSED_DOCUMENTS_MESSAGE


def test_recommendations_with_no_open_scholarships():
    output = asyncio.run(run_recommendations("user-1", stores(candidates=[]), now=NOW))

    assert output.message == NO_SCHOLARSHIPS_MESSAGE
    assert output.stats.total_analyzed == 0
    assert output.highly_recommended == []


def test_limit_applies_per_tier():
    candidates = [scholarship(f"s{i}") for i in range(5)]

    output = asyncio.run(run_recommendations("user-1", stores(candidates=candidates), now=NOW, limit=2))

    assert len(output.highly_recommended) == 2
    assert output.stats.total_analyzed == 5


def test_simple_recommendations_are_flat():
    items = asyncio.run(run_recommendations_simple("user-1", stores(), limit=2, now=NOW))

    assert ids(items) == ["open-all", "masters-only"]


def test_matching_includes_upcoming_and_puts_eligible_first():
    output = asyncio.run(run_matching("user-1", stores(), now=NOW))

    assert output.message == MATCHING_COMPLETED_MESSAGE
    assert ids(output.matches)[:2] == ["open-all", "upcoming"]
    assert set(ids(output.matches)) == {"open-all", "upcoming", "masters-only", "stretch"}
    assert output.total_scholarships == 4
    assert output.eligible_count == 2
    assert output.user_documents_count == 2


def test_matching_without_documents_returns_empty_result():
    output = asyncio.run(run_matching("user-1", stores(documents=[]), now=NOW))

    assert output.matches == []
    assert output.message == NO_DOCUMENTS_MESSAGE


def test_explain_match_scores_any_status():
    item = asyncio.run(explain_match("user-1", "closed", stores(), now=NOW))

    assert item.candidate.summary.id == "closed"
    assert item.result.score == 100


def test_explain_match_unknown_scholarship():
    with pytest.raises(LookupError):
        asyncio.run(explain_match("user-1", "nope", stores(), now=NOW))


class SlowDocumentStore:
    async def fetch_completed(self, user_id):
        await asyncio.sleep(1)
        return []


def test_slow_store_times_out():
    bundle = stores()
    bundle.documents = SlowDocumentStore()

    with pytest.raises(asyncio.TimeoutError):
        asyncio.run(run_recommendations("user-1", bundle, now=NOW, timeout=0.01))


class FailingScholarshipStore:
    async def fetch_open(self, now, statuses=("open",)):
        raise RuntimeError("mongo unavailable")

    async def get_by_id(self, scholarship_id):
        raise RuntimeError("mongo unavailable")


def test_store_failures_propagate():
    bundle = stores()
    bundle.scholarships = FailingScholarshipStore()

    with pytest.raises(RuntimeError):
        asyncio.run(run_recommendations("user-1", bundle, now=NOW))
    with pytest.raises(RuntimeError):
        asyncio.run(run_matching("user-1", bundle, now=NOW))


class SlowProfileStore:
    async def fetch_profile(self, user_id):
        await asyncio.sleep(0.2)
        return None


class SlowScholarshipStore(FakeScholarshipStore):
    async def fetch_open(self, now, statuses=("open",)):
        await asyncio.sleep(0.2)
        return await super().fetch_open(now, statuses)


def test_matching_reads_share_one_timeout():
    bundle = stores()
    bundle.profiles = SlowProfileStore()
    bundle.scholarships = SlowScholarshipStore(catalogue())

    # each read fits in the budget on its own, together they do not
    with pytest.raises(asyncio.TimeoutError):
        asyncio.run(run_matching("user-1", bundle, now=NOW, timeout=0.3))


def test_matching_within_shared_timeout():
    bundle = stores()
    bundle.profiles = SlowProfileStore()

    output = asyncio.run(run_matching("user-1", bundle, now=NOW, timeout=2))

    assert output.total_scholarships == 4
