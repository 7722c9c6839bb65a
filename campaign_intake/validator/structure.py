import logging
from collections.abc import Sequence

from campaign_intake.schema import CANONICAL_FIELDS, EXPECTED_HEADERS
from campaign_intake.types import ValidationReport
from campaign_intake.validator.header import resolve_header

logger = logging.getLogger(__name__)


def _suggest(header: str) -> str | None:
    """
    First display name that contains the header or is contained in it (case-insensitive).
    Blank headers get no suggestion.
    """
    h = header.lower()
    if not h.strip():
        return None
    for field in CANONICAL_FIELDS:
        name = field.display_name.lower()
        if name in h or h in name:
            return field.display_name
    return None


def validate_structure(headers: Sequence[str]) -> ValidationReport:
    """
    Check observed headers against the canonical schema.
    - missing_fields: required fields no header resolves to (alias-aware)
    - extra_fields: headers that are not an exact, case-sensitive display name
    - suggestions: extra header -> closest display name, where one exists
    Advisory only: extra fields never make the report invalid.
    """
    missing = [
        field.display_name
        for field in CANONICAL_FIELDS
        if field.required and resolve_header(field, headers) is None
    ]

    extra: list[str] = []
    suggestions: dict[str, str] = {}
    for header in headers:
        if header in EXPECTED_HEADERS:
            continue
        extra.append(header)
        suggestion = _suggest(header)
        if suggestion is not None:
            suggestions[header] = suggestion

    if missing:
        logger.warning("Sheet is missing required columns: %s", missing)
    if extra:
        logger.info("Sheet has unexpected columns: %s (suggestions: %s)", extra, suggestions)

    return {
        "is_valid": not missing,
        "missing_fields": missing,
        "extra_fields": extra,
        "suggestions": suggestions,
    }
