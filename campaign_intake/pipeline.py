import logging
import time
from collections.abc import Mapping

from .csv_reader import split_lines
from .normalizer import SHEET_ID_KEY, normalize
from .sheets.client import SheetsClient
from .sheets import errors as err
from .types import CampaignRecord, DiagnosticResult, IngestResult, SheetSource
from .validator.structure import validate_structure

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 2


def ingest(source: SheetSource, client: SheetsClient) -> IngestResult:
    """
    Fetch one sheet and turn it into canonical records.

    Returns:
      {"records": [...], "headers": [...]}                    on success
      {"records": [], "headers": [], "error": "<message>"}    on any fetch failure

    Notes:
    - Fetch failures (SheetError) never escape; callers render `error` uniformly.
    - The structure report is logged as advice only; it never blocks ingestion.
    - Each call owns its duplicate-tracking state; results are returned whole.
    """
    t0 = time.time()
    try:
        text = client.fetch_csv(source)
        lines = split_lines(text)
        if not lines:
            raise err.EmptyData(f"No data found in {source['name']}")
    except err.SheetError as e:
        logger.error(
            "Fetch failed: source=%s type=%s status=%s url=%s msg=%s",
            source["name"], e.__class__.__name__, e.status, e.url, str(e),
        )
        return {"records": [], "headers": [], "error": str(e)}

    headers, records = normalize(lines[0], lines[1:])
    report = validate_structure(headers)
    logger.debug("Sheet validation for %s: %s", source["name"], report)

    logger.info(
        "Fetched %d records from %s (%d columns, valid=%s) in %.3fs",
        len(records), source["name"], len(headers), report["is_valid"], time.time() - t0,
    )
    return {"records": records, "headers": headers}


def diagnose(client: SheetsClient, sources: Mapping[str, SheetSource]) -> list[DiagnosticResult]:
    """
    Check each source end to end: fetch, normalize, and validate the headers.
    One result per source, in the given order.
    """
    results: list[DiagnosticResult] = []
    for key, source in sources.items():
        logger.info("Testing %s...", source["name"])
        result = ingest(source, client)
        headers = result["headers"]
        results.append({
            "source": f"{key} ({source['name']})",
            "success": "error" not in result,
            "error": result.get("error"),
            "headers": headers,
            "record_count": len(result["records"]),
            "sample_records": result["records"][:SAMPLE_SIZE],
            "validation": validate_structure(headers) if headers else None,
        })
    return results


def detail_source(record: CampaignRecord) -> SheetSource | None:
    """
    The campaign's own spreadsheet, as linked from a listing record by its "_sheetId".
    Read from the first tab (no gid). None when the record carries no sheet id.
    """
    sheet_id = record.get(SHEET_ID_KEY, "").strip()
    if not sheet_id:
        return None
    return {"sheet_id": sheet_id, "gid": None, "name": f"Campaign Sheet {sheet_id}"}


def ingest_detail(record: CampaignRecord, client: SheetsClient) -> IngestResult:
    """Ingest the spreadsheet a listing record points at; same result shape as `ingest`."""
    source = detail_source(record)
    if source is None:
        logger.error("Record has no %s; cannot open its campaign sheet", SHEET_ID_KEY)
        return {"records": [], "headers": [], "error": "Record has no linked campaign sheet"}
    return ingest(source, client)
