"""
Raw record field constants

Recognized raw record keys, projection keys and the slot descriptors used to
iterate over repeated work experience and reference fields.
Organized into frozen dataclasses by category for immutability and clear grouping.
"""

import re
from dataclasses import dataclass
from typing import Tuple

MAX_WORK_EXPERIENCE_SLOTS = 5
MAX_REFERENCE_SLOTS = 5


@dataclass(frozen=True)
class IdentityFields:
    """Header fields. All single-line except the address."""
    FULL_NAME: str = "full_name"
    DESIGNATION: str = "designation"
    PHONE: str = "phone"
    EMAIL: str = "email"
    PHYSICAL_ADDRESS: str = "physical_address"
    PHOTO_URL: str = "photo_url"
    SPLASH_IMAGE: str = "splash_image"


@dataclass(frozen=True)
class NarrativeFields:
    """Free-text sections. All multi-line."""
    CAREER_GOAL: str = "career_goal"
    EDUCATION_MATRIC: str = "education_matric"
    TERTIARY_EDUCATION: str = "tertiary_education"
    CERTIFICATES: str = "certificates"
    OTHER_QUALIFICATIONS: str = "other_qualifications"
    SKILLS: str = "skills"
    LANGUAGES: str = "languages"
    ADDITIONAL_EXPERIENCE: str = "additional_experience"


@dataclass(frozen=True)
class ProjectionKeys:
    """Keys synthesized by the normalizer (not present in raw records)."""
    PHONE_CENTERED: str = "phone_centered"
    CONTENT_MODE: str = "content_mode"
    CERTIFICATIONS_HEADING: str = "certifications_heading"
    ADDITIONAL_EXPERIENCE_HEADING: str = "additional_experience_heading"


@dataclass(frozen=True)
class SectionHeadings:
    CERTIFICATIONS: str = "CERTIFICATIONS & QUALIFICATIONS"
    ADDITIONAL_EXPERIENCE: str = "ADDITIONAL EXPERIENCE"


@dataclass(frozen=True)
class ContentModes:
    STANDARD: str = "standard"
    SPARSE: str = "sparse"


@dataclass(frozen=True)
class SentinelPatterns:
    """
    Values treated as equivalent to absence.

    PLACEHOLDER matches unfilled template markers such as ``@full_name``.
    """
    AT: str = "@"
    NONE: str = "none"
    PLACEHOLDER: "re.Pattern" = re.compile(r"^@[A-Za-z_]+$")
    WHITESPACE_RUN: "re.Pattern" = re.compile(r"\s+")


@dataclass(frozen=True)
class WorkExperienceSlot:
    """Raw keys of one work experience triple and the projection key it maps to."""
    index: int

    @property
    def title_key(self) -> str:
        return f"cv_format_type_full_{self.index}"

    @property
    def duration_key(self) -> str:
        return f"job_duration_{self.index}"

    @property
    def duties_key(self) -> str:
        return f"job_duties_{self.index}"

    @property
    def projection_key(self) -> str:
        return f"work_experience_{self.index}"


@dataclass(frozen=True)
class ReferenceSlot:
    """Raw key of one reference; the projection uses the same key."""
    index: int

    @property
    def key(self) -> str:
        return f"reference_{self.index}"


WORK_EXPERIENCE_SLOTS: Tuple[WorkExperienceSlot, ...] = tuple(
    WorkExperienceSlot(i) for i in range(1, MAX_WORK_EXPERIENCE_SLOTS + 1)
)
REFERENCE_SLOTS: Tuple[ReferenceSlot, ...] = tuple(
    ReferenceSlot(i) for i in range(1, MAX_REFERENCE_SLOTS + 1)
)

IDENTITY = IdentityFields()
NARRATIVE = NarrativeFields()
PROJECTION = ProjectionKeys()
HEADINGS = SectionHeadings()
CONTENT_MODES = ContentModes()
SENTINELS = SentinelPatterns()

# Fields whose internal whitespace runs collapse to a single space
SINGLE_LINE_FIELDS = frozenset(
    [
        IDENTITY.FULL_NAME,
        IDENTITY.DESIGNATION,
        IDENTITY.PHONE,
        IDENTITY.EMAIL,
        IDENTITY.PHOTO_URL,
        IDENTITY.SPLASH_IMAGE,
    ]
    + [slot.title_key for slot in WORK_EXPERIENCE_SLOTS]
    + [slot.duration_key for slot in WORK_EXPERIENCE_SLOTS]
)

RECOGNIZED_FIELDS = frozenset(
    [
        IDENTITY.FULL_NAME,
        IDENTITY.DESIGNATION,
        IDENTITY.PHONE,
        IDENTITY.EMAIL,
        IDENTITY.PHYSICAL_ADDRESS,
        IDENTITY.PHOTO_URL,
        IDENTITY.SPLASH_IMAGE,
        NARRATIVE.CAREER_GOAL,
        NARRATIVE.EDUCATION_MATRIC,
        NARRATIVE.TERTIARY_EDUCATION,
        NARRATIVE.CERTIFICATES,
        NARRATIVE.OTHER_QUALIFICATIONS,
        NARRATIVE.SKILLS,
        NARRATIVE.LANGUAGES,
        NARRATIVE.ADDITIONAL_EXPERIENCE,
    ]
    + [key for slot in WORK_EXPERIENCE_SLOTS
       for key in (slot.title_key, slot.duration_key, slot.duties_key)]
    + [slot.key for slot in REFERENCE_SLOTS]
)
