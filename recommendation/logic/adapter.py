"""
Data Adapter for the Matching Engine

Reads user documents, scholarships and user profiles from MongoDB and transforms
the raw records into the engine's contracts.

This is a pure READ + TRANSFORM layer:
- NO scoring logic
- NO ranking/classification
- NO DB writes
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence

from bson import ObjectId
from pydantic import ValidationError

from .contracts import (
    ParsedDocument,
    ParsedData,
    EnglishScore,
    UserProfileFields,
    EligibilityRule,
    ScholarshipSummary,
    CandidateScholarship,
)
from .constants import ParsingStatus, ScholarshipStatus, ENGLISH_TEST_TAG

logger = logging.getLogger(__name__)

ENGLISH_SCORE_KEYS = ("listening", "reading", "writing", "speaking", "overall")


# =============================================================================
# STORE CONTRACTS
# =============================================================================

class DocumentStore(Protocol):
    async def fetch_completed(self, user_id: str) -> List[ParsedDocument]:
        ...


class ScholarshipStore(Protocol):
    async def fetch_open(
        self,
        now: datetime,
        statuses: Sequence[str] = (ScholarshipStatus.OPEN.value,)
    ) -> List[CandidateScholarship]:
        ...

    async def get_by_id(self, scholarship_id: str) -> Optional[CandidateScholarship]:
        ...


class ProfileStore(Protocol):
    async def fetch_profile(self, user_id: str) -> Optional[UserProfileFields]:
        ...


class StoreBundle:
    """The three collaborators the runner reads from."""

    def __init__(
        self,
        documents: DocumentStore,
        scholarships: ScholarshipStore,
        profiles: ProfileStore
    ):
        self.documents = documents
        self.scholarships = scholarships
        self.profiles = profiles


# =============================================================================
# RECORD CONVERSION
# =============================================================================

def _as_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    """Accept a single string or a list; drop blanks."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set)):
        return []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def _number_in_range(value: Any, high: float) -> Optional[float]:
    """Positive number up to `high`; zero, garbage or out-of-range means absent."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not 0 < number <= high:
        return None
    return number


def _unreadable_requirement(value: Any) -> bool:
    """Set but unusable: non-numeric or above the band scale. Zero or below means none."""
    if value is None or value == "" or isinstance(value, bool):
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return True
    return number > 9.0


def _id_str(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def document_from_record(record: Dict[str, Any]) -> ParsedDocument:
    """Convert a `user_documents` record (camelCase) to ParsedDocument."""
    parsed = record.get("parsedData")
    parsed_data = None
    if isinstance(parsed, dict):
        english = parsed.get("englishScore")
        english_score = None
        if isinstance(english, dict) and any(english.get(k) is not None for k in ENGLISH_SCORE_KEYS):
            english_score = EnglishScore(**{k: english.get(k) for k in ENGLISH_SCORE_KEYS})
        parsed_data = ParsedData(
            level=parsed.get("level"),
            gpa=parsed.get("gpa"),
            percentage=parsed.get("percentage"),
            stream=parsed.get("stream"),
            passing_year=parsed.get("passingYear"),
            degree_name=parsed.get("degreeName"),
            english_score=english_score,
        )

    return ParsedDocument(
        id=_id_str(record.get("_id")),
        user_id=_id_str(record.get("userId")),
        type=record.get("type"),
        document_type=record.get("documentType"),
        parsing_status=record.get("parsingStatus") or ParsingStatus.PENDING.value,
        uploaded_at=_as_datetime(record.get("uploadedAt")),
        parsed_data=parsed_data,
    )


def candidate_from_record(record: Dict[str, Any]) -> CandidateScholarship:
    """
    Convert a `scholarships` record to a CandidateScholarship.

    Admin-entered records are inconsistently populated: anything missing or
    malformed becomes "no requirement" rather than an error.
    """
    eligibility = record.get("eligibility") or {}
    if not isinstance(eligibility, dict):
        eligibility = {}

    levels = _as_str_list(record.get("level"))
    fields = _as_str_list(record.get("fields"))
    required_docs = _as_str_list(eligibility.get("requiredDocs"))

    raw_english = eligibility.get("requiredEnglishScore")
    english_score = _number_in_range(raw_english, 9.0)
    requires_english_test = (
        any(ENGLISH_TEST_TAG in doc.lower() for doc in required_docs)
        or _unreadable_requirement(raw_english)
    )

    country = record.get("country")
    country = str(country).strip() if country else None
    deadline = _as_datetime(record.get("deadline"))
    status = record.get("status") or ScholarshipStatus.OPEN.value
    verified = bool(record.get("verified", False))
    scholarship_id = _id_str(record.get("_id"))
    title = str(record.get("title") or "").strip()

    rule = EligibilityRule(
        scholarship_id=scholarship_id,
        title=title,
        degree_levels=levels,
        min_gpa=_number_in_range(eligibility.get("minGPA"), 4.0),
        required_fields=fields,
        required_english_score=english_score,
        requires_english_test=requires_english_test,
        country=country or None,
        deadline=deadline,
        status=status,
        verified=verified,
    )

    university = record.get("university")
    if isinstance(university, dict):
        university_name = university.get("name")
    else:
        university_name = university if isinstance(university, str) else None

    summary = ScholarshipSummary(
        id=scholarship_id,
        title=title,
        country=country or None,
        level=levels,
        fields=fields,
        deadline=deadline,
        amount=str(record["amount"]) if record.get("amount") is not None else None,
        university_name=university_name,
        status=status,
        verified=verified,
    )

    return CandidateScholarship(rule=rule, summary=summary)


def profile_from_record(record: Optional[Dict[str, Any]]) -> Optional[UserProfileFields]:
    """Convert a `profiles` record (snake_case, keyed by user_id)."""
    if not record:
        return None
    return UserProfileFields(
        education_level=record.get("education_level"),
        gpa=record.get("gpa"),
        major=record.get("major"),
        preferred_countries=record.get("preferred_countries") or [],
    )


def _convert_all(records: Iterable[Dict[str, Any]], converter, kind: str) -> List[Any]:
    converted = []
    for record in records:
        try:
            converted.append(converter(record))
        except ValidationError as e:
            # Skip records that fail conversion
            logger.warning(f"Skipping malformed {kind} {record.get('_id')}: {e}")
    return converted


def _user_id_filter(user_id: str) -> Dict[str, Any]:
    """Documents may reference the user by string id or ObjectId."""
    candidates: List[Any] = [user_id]
    if ObjectId.is_valid(user_id):
        candidates.append(ObjectId(user_id))
    return {"$in": candidates}


# =============================================================================
# MONGO STORES
# =============================================================================

class MongoDocumentStore:
    """`user_documents` collection."""

    def __init__(self, collection):
        self.collection = collection

    async def fetch_completed(self, user_id: str) -> List[ParsedDocument]:
        cursor = self.collection.find({
            "userId": _user_id_filter(user_id),
            "parsingStatus": ParsingStatus.COMPLETED.value,
        }).sort("uploadedAt", -1)
        records = await cursor.to_list(length=None)
        return _convert_all(records, document_from_record, "document")


class MongoScholarshipStore:
    """`scholarships` collection."""

    def __init__(self, collection):
        self.collection = collection

    async def fetch_open(
        self,
        now: datetime,
        statuses: Sequence[str] = (ScholarshipStatus.OPEN.value,)
    ) -> List[CandidateScholarship]:
        cursor = self.collection.find({
            "status": {"$in": list(statuses)},
            "verified": True,
            "deadline": {"$gt": now},
        })
        records = await cursor.to_list(length=None)
        return _convert_all(records, candidate_from_record, "scholarship")

    async def get_by_id(self, scholarship_id: str) -> Optional[CandidateScholarship]:
        if not ObjectId.is_valid(scholarship_id):
            return None
        record = await self.collection.find_one({"_id": ObjectId(scholarship_id)})
        return candidate_from_record(record) if record else None


class MongoProfileStore:
    """`profiles` collection."""

    def __init__(self, collection):
        self.collection = collection

    async def fetch_profile(self, user_id: str) -> Optional[UserProfileFields]:
        record = await self.collection.find_one({"user_id": user_id}, {"_id": 0})
        return profile_from_record(record)
