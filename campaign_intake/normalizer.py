import logging
from collections.abc import Callable, Iterable, Mapping

from campaign_intake.csv_reader import strip_quote_artifacts, tokenize_line
from campaign_intake.types import AdminRole, CampaignRecord
from campaign_intake.validator.header import map_headers

logger = logging.getLogger(__name__)

# internal navigation key carried on each record; never a visible column
SHEET_ID_KEY = "_sheetId"

# role -> predicate on the lowercased header
ADMIN_RULES: dict[AdminRole, Callable[[str], bool]] = {
    "email_template": lambda h: "email template" in h or "emailtemplate" in h,
    "record_id": lambda h: h in ("id", "campaign id", "record id"),
    "sheet_id": lambda h: "sheet id" in h or "sheetid" in h,
}


def find_admin_columns(
    headers: list[str],
    rules: Mapping[AdminRole, Callable[[str], bool]] = ADMIN_RULES,
) -> dict[AdminRole, int]:
    """Position of the first header matching each administrative role (roles with no match are absent)."""
    found: dict[AdminRole, int] = {}
    for role, matches in rules.items():
        for pos, header in enumerate(headers):
            if matches(header.lower()):
                found[role] = pos
                break
    return found


def _output_keys(final_headers: list[str]) -> list[str | None]:
    """
    Record key for each retained column: the canonical display name when the header
    resolves, else the header text. A key already used by an earlier column maps to
    None (that column is dropped from records; the first one wins).
    """
    mapping = map_headers(final_headers)
    keys: list[str | None] = []
    used: set[str] = set()
    for pos, header in enumerate(final_headers):
        key = mapping[pos].display_name if pos in mapping else header
        if key in used:
            logger.warning(
                "Column %r (position %d) maps to %r, already taken by an earlier column; keeping the first",
                header, pos, key,
            )
            keys.append(None)
            continue
        used.add(key)
        keys.append(key)
    return keys


def normalize(
    header_line: str,
    data_lines: Iterable[str],
    rules: Mapping[AdminRole, Callable[[str], bool]] = ADMIN_RULES,
) -> tuple[list[str], list[CampaignRecord]]:
    """
    Turn raw CSV lines into (final_headers, records).

    - administrative columns are removed by position; the sheet-id value is kept
      per record under "_sheetId"
    - headers are remapped onto canonical display names where they resolve
    - rows whose retained values are all blank are skipped
    - rows whose retained values repeat an earlier row are dropped
    - short rows are padded with "" (no error)

    The duplicate-tracking set is local to this call.
    """
    headers = strip_quote_artifacts(tokenize_line(header_line))
    admin = find_admin_columns(headers, rules)
    excluded = set(admin.values())
    if admin:
        logger.debug("Administrative columns: %s", {role: headers[pos] for role, pos in admin.items()})

    final_headers = [h for pos, h in enumerate(headers) if pos not in excluded]
    keys = _output_keys(final_headers)
    sheet_pos = admin.get("sheet_id")

    records: list[CampaignRecord] = []
    seen: set[str] = set()
    blank = 0
    dupes = 0

    for row_index, line in enumerate(data_lines, start=1):
        values = strip_quote_artifacts(tokenize_line(line))

        # capture before excluded positions are removed
        sheet_value = ""
        if sheet_pos is not None and sheet_pos < len(values):
            sheet_value = values[sheet_pos]

        retained = [v for pos, v in enumerate(values) if pos not in excluded]
        if all(not v.strip() for v in retained):
            blank += 1
            continue

        aligned = tuple(retained[i] if i < len(retained) else "" for i in range(len(final_headers)))

        record: CampaignRecord = {}
        for key, value in zip(keys, aligned):
            if key is not None:
                record[key] = value
        if sheet_value:
            record[SHEET_ID_KEY] = sheet_value

        # composite key: retained values concatenated in header order
        row_key = "".join(aligned)
        if row_key in seen:
            dupes += 1
            logger.debug("Duplicate row %d skipped", row_index)
            continue
        seen.add(row_key)
        records.append(record)

    logger.debug(
        "Normalized %d records (blank=%d duplicates=%d, %d columns)",
        len(records), blank, dupes, len(final_headers),
    )
    return final_headers, records
