from datetime import date

import pytest

from campaign_intake.csv_reader import read_table
from campaign_intake.schema import (
    CANONICAL_FIELDS, EXPECTED_HEADERS, field_by_display_name, field_by_key,
    generate_csv_header, generate_template_csv, required_fields, sample_record,
)

def test_fourteen_fields_with_unique_keys_and_names():
    assert len(CANONICAL_FIELDS) == 14
    assert len({f.key for f in CANONICAL_FIELDS}) == 14
    assert len(set(EXPECTED_HEADERS)) == 14

def test_display_names_in_sheet_order():
    assert EXPECTED_HEADERS == (
        "Campaign Name", "Influencers Followers", "Campaign Type", "Start Date",
        "Brand Name", "End Date", "Niche", "Priority", "Budget", "Notes",
        "Deliverables", "Platforms", "Attachment", "Submission Date",
    )

def test_optional_fields():
    optional = {f.display_name for f in CANONICAL_FIELDS if not f.required}
    assert optional == {"Notes", "Attachment", "Submission Date"}
    assert len(required_fields()) == 11

def test_select_fields_carry_allowed_values():
    assert field_by_display_name("Priority").allowed_values == ("High", "Medium", "Low")
    assert field_by_display_name("Platforms").value_type == "multi-select"
    assert field_by_display_name("Budget").allowed_values == ()

def test_variant_names_are_lowercase():
    for f in CANONICAL_FIELDS:
        assert f.variant_names, f.key
        assert all(v == v.lower() for v in f.variant_names)

def test_lookups():
    assert field_by_key("timestamp").display_name == "Submission Date"
    assert field_by_key("nope") is None
    assert field_by_display_name("budget") is None   # exact only

def test_fields_are_immutable():
    with pytest.raises(AttributeError):
        CANONICAL_FIELDS[0].required = False

def test_csv_header():
    assert generate_csv_header().split(",") == list(EXPECTED_HEADERS)

def test_template_quotes_values_with_commas():
    text = generate_template_csv(date(2024, 11, 5))
    header, row = text.split("\n")
    assert header == generate_csv_header()
    assert '"3 Instagram posts, 2 Stories"' in row
    assert row.endswith(",11/05/2024")

def test_template_reads_back_as_sample_record():
    today = date(2024, 11, 5)
    headers, rows = read_table(generate_template_csv(today))
    assert headers == list(EXPECTED_HEADERS)
    assert dict(zip(headers, rows[0])) == sample_record(today)
