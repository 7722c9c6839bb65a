import logging
from collections.abc import Iterable, Sequence

from campaign_intake.schema import CANONICAL_FIELDS
from campaign_intake.types import CanonicalField, ResolutionTier

logger = logging.getLogger(__name__)

_TIERS: tuple[ResolutionTier, ...] = ("EXACT", "CASE_INSENSITIVE", "VARIANT")


def _match_tier(
    field: CanonicalField,
    candidates: Sequence[tuple[int, str]],
    tier: ResolutionTier,
) -> int | None:
    """Return the position of the first candidate matching `field` under one tier, else None."""
    if tier == "EXACT":
        for pos, header in candidates:
            if header == field.display_name:
                return pos
        return None

    if tier == "CASE_INSENSITIVE":
        target = field.display_name.lower()
        for pos, header in candidates:
            if header.lower() == target:
                return pos
        return None

    # VARIANT: aliases in declaration order; substring either way.
    # Blank headers are skipped: "" is a substring of every alias.
    for alias in field.variant_names:
        for pos, header in candidates:
            h = header.lower()
            if not h.strip():
                continue
            if alias in h or h in alias:
                return pos
    return None


def match_header(
    field: CanonicalField, headers: Sequence[str]
) -> tuple[int, ResolutionTier] | None:
    """
    Find the observed header that best matches `field`.
    Tiers are tried in order: exact, case-insensitive, variant substring.
    Blank headers never match in the variant tier (an empty string is contained
    in every alias).
    Returns:
      (position, tier)    for the first tier that hits
      None                if no tier matches
    """
    candidates = list(enumerate(headers))
    for tier in _TIERS:
        pos = _match_tier(field, candidates, tier)
        if pos is not None:
            return pos, tier
    return None


def resolve_header(field: CanonicalField, headers: Sequence[str]) -> str | None:
    """Return the observed header text matched to `field`, or None."""
    hit = match_header(field, headers)
    if hit is None:
        return None
    pos, tier = hit
    logger.debug("Resolved %r -> %r via %s", field.display_name, headers[pos], tier)
    return headers[pos]


def map_headers(
    headers: Sequence[str],
    fields: Iterable[CanonicalField] = CANONICAL_FIELDS,
) -> dict[int, CanonicalField]:
    """
    Assign observed header positions to canonical fields for a whole header row.

    Each tier is run across all fields before the next tier starts, so a precise
    match for one field is never stolen by a looser variant match for another.
    A position is claimed by at most one field and a field claims at most one position.

    Returns {position: field} for every claimed position.
    """
    fields = list(fields)
    claimed: dict[int, CanonicalField] = {}
    taken: set[str] = set()

    for tier in _TIERS:
        for field in fields:
            if field.key in taken:
                continue
            available = [(pos, h) for pos, h in enumerate(headers) if pos not in claimed]
            if not available:
                return claimed
            pos = _match_tier(field, available, tier)
            if pos is None:
                continue
            claimed[pos] = field
            taken.add(field.key)
            if headers[pos] != field.display_name:
                logger.debug("Header %r mapped to %r via %s", headers[pos], field.display_name, tier)

    return claimed
