from campaign_intake.schema import EXPECTED_HEADERS
from campaign_intake.validator.structure import validate_structure

def test_partial_sheet_reports_missing_and_extra():
    report = validate_structure(["Campaign Name", "Brand Name", "Extra Col"])
    assert report["is_valid"] is False
    assert report["missing_fields"] == [
        "Influencers Followers", "Campaign Type", "Start Date", "End Date",
        "Niche", "Priority", "Budget", "Deliverables", "Platforms",
    ]
    assert report["extra_fields"] == ["Extra Col"]
    assert report["suggestions"] == {}

def test_well_formed_sheet_is_valid():
    report = validate_structure(list(EXPECTED_HEADERS))
    assert report == {"is_valid": True, "missing_fields": [], "extra_fields": [], "suggestions": {}}

def test_optional_fields_are_never_missing():
    headers = [h for h in EXPECTED_HEADERS if h not in ("Notes", "Attachment", "Submission Date")]
    assert validate_structure(headers)["is_valid"] is True

def test_differently_cased_header_resolves_but_is_reported_extra():
    headers = [h for h in EXPECTED_HEADERS if h != "Budget"] + ["budget"]
    report = validate_structure(headers)
    assert report["is_valid"] is True          # resolution is case-insensitive
    assert report["extra_fields"] == ["budget"]  # extra detection is exact
    assert report["suggestions"] == {"budget": "Budget"}

def test_alias_satisfies_required_field():
    headers = [h for h in EXPECTED_HEADERS if h != "Niche"] + ["Category"]
    report = validate_structure(headers)
    assert report["missing_fields"] == []
    assert report["extra_fields"] == ["Category"]
    assert "Category" not in report["suggestions"]

def test_suggestion_when_header_contains_display_name():
    report = validate_structure(["Campaign Name (internal)"])
    assert report["suggestions"] == {"Campaign Name (internal)": "Campaign Name"}

def test_extra_fields_never_invalidate(caplog):
    with caplog.at_level("INFO"):
        report = validate_structure(list(EXPECTED_HEADERS) + ["Owner", ""])
    assert report["is_valid"] is True
    assert report["extra_fields"] == ["Owner", ""]
    assert report["suggestions"] == {}   # blank header gets no suggestion
    assert any("unexpected columns" in r.message for r in caplog.records)
