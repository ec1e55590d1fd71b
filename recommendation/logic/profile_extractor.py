"""
Profile Extractor

Derives the NormalizedProfile used for scoring from a user's parsed documents,
then fills the gaps from the explicit user profile.

This is a pure TRANSFORM layer:
- NO scoring logic
- NO DB reads
"""

from typing import Iterable, List, Optional, Tuple

from .contracts import (
    ParsedDocument,
    ParsedData,
    EnglishScore,
    NormalizedProfile,
    UserProfileFields,
)
from .constants import (
    ParsingStatus,
    DEGREE_LEVELS,
    DEGREE_LEVEL_ALIASES,
    ENGLISH_TEST_TAG,
    MISSING_DATA_LABELS,
    PERCENTAGE_TO_GPA_DIVISOR,
)


def expand_degree_levels(raw_level: Optional[str]) -> Tuple[str, ...]:
    """
    Map a free-text degree label to the canonical levels it stands for.

    Known aliases ("bachelors", "MSc", "Graduate", ...) map to one or more of
    +2/Bachelor/Master/PhD. Unknown labels are returned stripped, as-is.
    """
    if not raw_level or not str(raw_level).strip():
        return ()
    text = str(raw_level).strip()
    return DEGREE_LEVEL_ALIASES.get(text.lower(), (text,))


def normalize_degree_level(raw_level: Optional[str]) -> Optional[str]:
    """Single canonical level for a profile, or the stripped label when unknown."""
    levels = expand_degree_levels(raw_level)
    return levels[0] if levels else None


def _canonical_or_none(raw_level: Optional[str]) -> Optional[str]:
    level = normalize_degree_level(raw_level)
    return level if level in DEGREE_LEVELS else None


def _academic_figure(data: ParsedData) -> float:
    """GPA if present, else percentage on the 4.0 scale, else 0."""
    if data.gpa is not None:
        return data.gpa
    if data.percentage is not None:
        return data.percentage / PERCENTAGE_TO_GPA_DIVISOR
    return 0.0


def _is_english_test_document(doc: ParsedDocument) -> bool:
    tags = [doc.type, doc.document_type]
    if doc.parsed_data is not None:
        tags.append(doc.parsed_data.degree_name)
    return any(tag and ENGLISH_TEST_TAG in tag.lower() for tag in tags)


def _completed(documents: Iterable[ParsedDocument]) -> List[ParsedDocument]:
    return [
        doc for doc in documents
        if doc.parsing_status == ParsingStatus.COMPLETED.value
    ]


def find_english_score(documents: Iterable[ParsedDocument]) -> Optional[EnglishScore]:
    """First English-test document carrying a score; taken verbatim."""
    for doc in _completed(documents):
        if not _is_english_test_document(doc):
            continue
        if doc.parsed_data is not None and doc.parsed_data.english_score is not None:
            return doc.parsed_data.english_score
    return None


def extract_profile(documents: Iterable[ParsedDocument]) -> NormalizedProfile:
    """
    Build a NormalizedProfile from parsed documents.

    The completed document with the highest academic figure supplies level,
    GPA, percentage, stream and passing year. Documents without any academic
    figure never win, so academic fields stay absent rather than zero.
    The English score is selected independently.

    Args:
        documents: User documents, newest first

    Returns:
        NormalizedProfile (preferred_countries empty - those come from the profile)
    """
    documents = list(documents)
    best: Optional[ParsedDocument] = None
    best_figure = 0.0

    for doc in _completed(documents):
        if doc.parsed_data is None:
            continue
        figure = _academic_figure(doc.parsed_data)
        if figure > best_figure:
            best_figure = figure
            best = doc

    english_score = find_english_score(documents)

    if best is None:
        return NormalizedProfile(english_score=english_score)

    data = best.parsed_data
    # unknown labels ("SLC", "Diploma") stay absent so the profile can fill them
    level = _canonical_or_none(data.level) or _canonical_or_none(best.type)

    return NormalizedProfile(
        degree_level=level,
        gpa=data.gpa,
        percentage=data.percentage,
        field_of_study=data.stream,
        passing_year=data.passing_year,
        english_score=english_score,
        gpa_source="document" if data.gpa is not None else "percentage",
    )


def merge_with_user_profile(
    extracted: NormalizedProfile,
    user_profile: Optional[UserProfileFields]
) -> NormalizedProfile:
    """
    Fill gaps in the document-derived profile from explicit profile fields.

    Document values win. GPA precedence: document GPA, document
    percentage/25, profile GPA. Preferred countries always come from the profile.
    """
    user_profile = user_profile or UserProfileFields()

    update = {
        "preferred_countries": list(user_profile.preferred_countries),
    }

    if extracted.degree_level is None and user_profile.education_level:
        update["degree_level"] = _canonical_or_none(user_profile.education_level)

    if extracted.usable_gpa is None and user_profile.gpa is not None:
        update["gpa"] = user_profile.gpa
        update["gpa_source"] = "profile"

    if extracted.field_of_study is None and user_profile.major and user_profile.major.strip():
        update["field_of_study"] = user_profile.major.strip()

    return extracted.model_copy(update=update)


def build_profile(
    documents: Iterable[ParsedDocument],
    user_profile: Optional[UserProfileFields] = None
) -> NormalizedProfile:
    """Convenience: extract from documents then merge the explicit profile."""
    return merge_with_user_profile(extract_profile(documents), user_profile)


def find_missing_data(profile: NormalizedProfile) -> List[str]:
    """Profile fields the user has supplied nowhere, in display order."""
    present = {
        "Education Level": profile.degree_level is not None,
        "GPA": profile.usable_gpa is not None,
        "Field of Study": profile.field_of_study is not None,
        "IELTS Score": profile.english_overall is not None,
        "Preferred Countries": bool(profile.preferred_countries),
    }
    return [label for label in MISSING_DATA_LABELS if not present[label]]
