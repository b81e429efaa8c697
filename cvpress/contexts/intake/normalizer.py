"""
Raw CV record normalizer for the Intake context.

Maps a sparse raw record to a display-ready projection. The projection only
contains keys whose source was present, so templates can use absence as the
single "hide this" signal.

Rules:
- Empty values (absent, blank, ``@``, ``none``, ``@placeholder``) are omitted
- Phone numbers get the default country code
- Phone is centered in the header when there is no email
- Skills and languages become one item per line
- Work experience slots with any sub-field present are kept as stable triples
- Section headings are synthesized only for sections that have content
- Content mode selects the sparse or standard layout
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from cvpress.contexts.intake.logger import _log_debug
from cvpress.contexts.intake.record_fields import (
    CONTENT_MODES,
    HEADINGS,
    IDENTITY,
    NARRATIVE,
    PROJECTION,
    RECOGNIZED_FIELDS,
    REFERENCE_SLOTS,
    SENTINELS,
    SINGLE_LINE_FIELDS,
    WORK_EXPERIENCE_SLOTS,
)

DEFAULT_COUNTRY_CODE = "+27"

RawRecord = Mapping[str, Optional[str]]
DisplayProjection = Dict[str, Any]


@dataclass(frozen=True)
class WorkExperience:
    """One work experience block. Missing sub-fields are empty strings."""

    title: str = ""
    duration: str = ""
    duties: str = ""


def is_empty(value: Any) -> bool:
    """
    Check if a raw value should be treated as absent.

    Empty values: None, non-strings, blank strings, '@', 'none' (any case),
    and unfilled placeholders like '@field_name'.

    Args:
        value: Raw field value

    Returns:
        True if the value must be omitted from the projection
    """
    if not isinstance(value, str):
        return True

    trimmed = value.strip()
    if trimmed in ("", SENTINELS.AT) or trimmed.lower() == SENTINELS.NONE:
        return True

    return SENTINELS.PLACEHOLDER.match(trimmed) is not None


def clean_field(value: Any, single_line: bool = False) -> Optional[str]:
    """
    Trim a raw value, returning None if it is empty.

    Args:
        value: Raw field value
        single_line: Collapse internal whitespace runs (including newlines) to one space

    Returns:
        Cleaned value, or None if empty
    """
    if is_empty(value):
        return None

    cleaned = value.strip()
    if single_line:
        cleaned = SENTINELS.WHITESPACE_RUN.sub(" ", cleaned)
    return cleaned


def format_phone_number(phone: Optional[str], country_code: str = DEFAULT_COUNTRY_CODE) -> Optional[str]:
    """
    Give a phone number an international-looking prefix.

    Best-effort only; format validation belongs to the inbound schema.

    Examples:
        >>> format_phone_number("0123456789")
        '+27123456789'
        >>> format_phone_number("+44 20 7946 0958")
        '+44 20 7946 0958'
        >>> format_phone_number("123456789")
        '+27123456789'
    """
    if phone is None:
        return None
    if phone.startswith("+"):
        return phone
    if phone.startswith("0"):
        return country_code + phone[1:]
    return country_code + phone


def split_list_items(value: Optional[str]) -> Optional[str]:
    """
    Reflow a delimited list into one item per line.

    Values that already contain newlines are returned unchanged. Otherwise the
    value is split on commas, or on '&' when there is no comma. Items that are
    themselves empty values ('', '@', 'none', placeholders) are dropped.

    Examples:
        >>> split_list_items("English, Xhosa")
        'English\\nXhosa'
        >>> split_list_items("English & Xhosa")
        'English\\nXhosa'
    """
    if value is None:
        return None
    if "\n" in value:
        return value

    delimiter = "," if "," in value else "&"
    items = [item.strip() for item in value.split(delimiter)]
    items = [item for item in items if not is_empty(item)]

    return "\n".join(items) if items else None


def detect_content_mode(projection: DisplayProjection) -> str:
    """
    Classify the layout as sparse or standard.

    Sparse when no work experience slot has a title, or tertiary education is
    missing. Standard otherwise.
    """
    has_titled_experience = any(
        projection.get(slot.projection_key) is not None
        and projection[slot.projection_key].title != ""
        for slot in WORK_EXPERIENCE_SLOTS
    )
    has_tertiary_education = NARRATIVE.TERTIARY_EDUCATION in projection

    if has_titled_experience and has_tertiary_education:
        return CONTENT_MODES.STANDARD
    return CONTENT_MODES.SPARSE


def _field(record: RawRecord, key: str) -> Optional[str]:
    return clean_field(record.get(key), single_line=key in SINGLE_LINE_FIELDS)


def _set_if_present(projection: DisplayProjection, key: str, value: Optional[str]) -> None:
    if value is not None:
        projection[key] = value


def normalize(record: RawRecord, country_code: str = DEFAULT_COUNTRY_CODE) -> DisplayProjection:
    """
    Normalize a raw CV record into a display projection.

    Pure and total: never raises, unrecognized keys are ignored.

    Args:
        record: Raw field mapping (any values; non-strings count as empty)
        country_code: Prefix for phone numbers without one

    Returns:
        Projection dict with only present keys, plus the always-present
        phone_centered flag and content_mode
    """
    record = {key: value for key, value in (record or {}).items() if key in RECOGNIZED_FIELDS}
    projection: DisplayProjection = {}

    # Identity / header
    for key in (
        IDENTITY.FULL_NAME,
        IDENTITY.DESIGNATION,
        IDENTITY.EMAIL,
        IDENTITY.PHYSICAL_ADDRESS,
        IDENTITY.PHOTO_URL,
        IDENTITY.SPLASH_IMAGE,
    ):
        _set_if_present(projection, key, _field(record, key))

    phone = format_phone_number(_field(record, IDENTITY.PHONE), country_code)
    _set_if_present(projection, IDENTITY.PHONE, phone)

    projection[PROJECTION.PHONE_CENTERED] = (
        IDENTITY.PHONE in projection and IDENTITY.EMAIL not in projection
    )

    # Career goal and education keep their line breaks (first line is styled by the template)
    for key in (
        NARRATIVE.CAREER_GOAL,
        NARRATIVE.EDUCATION_MATRIC,
        NARRATIVE.TERTIARY_EDUCATION,
    ):
        _set_if_present(projection, key, _field(record, key))

    # Certifications section only exists if one of its sub-fields does
    certificates = _field(record, NARRATIVE.CERTIFICATES)
    other_qualifications = _field(record, NARRATIVE.OTHER_QUALIFICATIONS)
    if certificates or other_qualifications:
        projection[PROJECTION.CERTIFICATIONS_HEADING] = HEADINGS.CERTIFICATIONS
        _set_if_present(projection, NARRATIVE.CERTIFICATES, certificates)
        _set_if_present(projection, NARRATIVE.OTHER_QUALIFICATIONS, other_qualifications)

    for key in (NARRATIVE.SKILLS, NARRATIVE.LANGUAGES):
        _set_if_present(projection, key, split_list_items(_field(record, key)))

    for slot in WORK_EXPERIENCE_SLOTS:
        title = _field(record, slot.title_key)
        duration = _field(record, slot.duration_key)
        duties = _field(record, slot.duties_key)
        if title is None and duration is None and duties is None:
            continue
        projection[slot.projection_key] = WorkExperience(
            title=title or "", duration=duration or "", duties=duties or ""
        )

    for slot in REFERENCE_SLOTS:
        _set_if_present(projection, slot.key, _field(record, slot.key))

    additional_experience = _field(record, NARRATIVE.ADDITIONAL_EXPERIENCE)
    if additional_experience:
        projection[PROJECTION.ADDITIONAL_EXPERIENCE_HEADING] = HEADINGS.ADDITIONAL_EXPERIENCE
        projection[NARRATIVE.ADDITIONAL_EXPERIENCE] = additional_experience

    projection[PROJECTION.CONTENT_MODE] = detect_content_mode(projection)

    _log_debug(
        f"Normalized record: email={IDENTITY.EMAIL in projection}, "
        f"phone_centered={projection[PROJECTION.PHONE_CENTERED]}, "
        f"work_experience={sum(slot.projection_key in projection for slot in WORK_EXPERIENCE_SLOTS)}, "
        f"content_mode={projection[PROJECTION.CONTENT_MODE]}"
    )

    return projection


def projection_to_record(projection: DisplayProjection) -> Dict[str, str]:
    """
    Serialize a projection back into raw record keys.

    Synthesized keys (headings, flags, content mode) are dropped and work
    experience records are flattened into their three raw fields. Normalizing
    the result again reproduces the projection.

    Args:
        projection: Output of normalize()

    Returns:
        Raw record dict
    """
    record = {}
    for key, value in projection.items():
        if key in RECOGNIZED_FIELDS and isinstance(value, str):
            record[key] = value

    for slot in WORK_EXPERIENCE_SLOTS:
        experience = projection.get(slot.projection_key)
        if experience is None:
            continue
        record[slot.title_key] = experience.title
        record[slot.duration_key] = experience.duration
        record[slot.duties_key] = experience.duties

    return record
