from typing import Literal, NamedTuple, TypedDict

# --- canonical field value types ---
ValueType = Literal[
    "text",
    "date",
    "number",
    "single-select",
    "multi-line text",
    "file-reference",
    "multi-select",
]

# --- resolution tiers (first hit wins, in this order) ---
ResolutionTier = Literal[
    "EXACT",
    "CASE_INSENSITIVE",
    "VARIANT",
]

# one output row: display name (or unresolved header) -> cell text, plus optional "_sheetId"
CampaignRecord = dict[str, str]


class CanonicalField(NamedTuple):
    key: str
    display_name: str
    required: bool
    value_type: ValueType
    allowed_values: tuple[str, ...] = ()
    variant_names: tuple[str, ...] = ()


class SheetSource(TypedDict):
    sheet_id: str
    gid: str | None
    name: str


class ValidationReport(TypedDict):
    is_valid: bool
    missing_fields: list[str]
    extra_fields: list[str]
    suggestions: dict[str, str]


class _IngestBase(TypedDict):
    records: list[CampaignRecord]
    headers: list[str]


class IngestResult(_IngestBase, total=False):
    error: str  # present only when the fetch failed


class DiagnosticResult(TypedDict):
    source: str
    success: bool
    error: str | None
    headers: list[str]
    record_count: int
    sample_records: list[CampaignRecord]
    validation: ValidationReport | None


# --- administrative (never displayed) column roles ---
AdminRole = Literal[
    "email_template",
    "record_id",
    "sheet_id",
]
