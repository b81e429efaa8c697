"""
Intake Context

Responsibilities:
- Receives raw CV records from the transport layer
- Filters unrecognized keys and sentinel/placeholder values
- Normalizes fields into a display-ready projection

Owns: Business rules for field visibility, phone formatting, list reflow, content mode
Never: Performs I/O or renders markup
"""

from cvpress.contexts.intake.normalizer import (
    DisplayProjection,
    RawRecord,
    WorkExperience,
    is_empty,
    normalize,
    projection_to_record,
)

__all__ = [
    "DisplayProjection",
    "RawRecord",
    "WorkExperience",
    "is_empty",
    "normalize",
    "projection_to_record",
]
