"""
Builders and in-memory stores shared by the matching engine tests.
"""

from datetime import datetime, timedelta, timezone

from recommendation.logic.contracts import (
    ParsedDocument,
    ParsedData,
    EnglishScore,
    UserProfileFields,
    EligibilityRule,
    ScholarshipSummary,
    CandidateScholarship,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def transcript(level="Bachelor", gpa=None, percentage=None, stream=None, status="completed", doc_type="bachelor"):
    return ParsedDocument(
        type=doc_type,
        document_type="transcript",
        parsing_status=status,
        parsed_data=ParsedData(level=level, gpa=gpa, percentage=percentage, stream=stream),
    )


def ielts(overall, status="completed"):
    return ParsedDocument(
        type="ielts",
        document_type="ielts",
        parsing_status=status,
        parsed_data=ParsedData(
            english_score=EnglishScore(overall=overall) if overall is not None else None
        ),
    )


def profile_fields(**kwargs):
    return UserProfileFields(**kwargs)


def scholarship(
    scholarship_id="s1",
    title="Test Scholarship",
    levels=(),
    min_gpa=None,
    fields=(),
    english=None,
    requires_english_test=False,
    country=None,
    deadline_in_days=90,
    status="open",
    verified=True,
):
    deadline = NOW + timedelta(days=deadline_in_days, hours=1) if deadline_in_days is not None else None
    rule = EligibilityRule(
        scholarship_id=scholarship_id,
        title=title,
        degree_levels=list(levels),
        min_gpa=min_gpa,
        required_fields=list(fields),
        required_english_score=english,
        requires_english_test=requires_english_test,
        country=country,
        deadline=deadline,
        status=status,
        verified=verified,
    )
    summary = ScholarshipSummary(
        id=scholarship_id,
        title=title,
        country=country,
        level=list(levels),
        fields=list(fields),
        deadline=deadline,
        status=status,
        verified=verified,
    )
    return CandidateScholarship(rule=rule, summary=summary)


class FakeDocumentStore:
    def __init__(self, documents=()):
        self.documents = list(documents)

    async def fetch_completed(self, user_id):
        return [d for d in self.documents if d.parsing_status == "completed"]


class FakeScholarshipStore:
    def __init__(self, candidates=()):
        self.candidates = list(candidates)

    async def fetch_open(self, now, statuses=("open",)):
        return [
            c for c in self.candidates
            if c.rule.status in statuses
            and c.rule.verified
            and c.rule.deadline is not None
            and c.rule.deadline > now
        ]

    async def get_by_id(self, scholarship_id):
        for c in self.candidates:
            if c.summary.id == scholarship_id:
                return c
        return None


class FakeProfileStore:
    def __init__(self, profile=None):
        self.profile = profile

    async def fetch_profile(self, user_id):
        return self.profile
