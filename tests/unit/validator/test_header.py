from campaign_intake.schema import field_by_display_name
from campaign_intake.validator.header import map_headers, match_header, resolve_header

BUDGET = field_by_display_name("Budget")

def test_case_insensitive_tier_before_variant_tier():
    assert match_header(BUDGET, ["budget", "Notes"]) == (0, "CASE_INSENSITIVE")
    assert resolve_header(BUDGET, ["budget", "Notes"]) == "budget"

def test_exact_tier_wins_over_earlier_case_insensitive_header():
    assert match_header(BUDGET, ["BUDGET", "Budget"]) == (1, "EXACT")

def test_variant_header_contains_alias():
    # aliases in order: budget, amount, cost -> "cost" hits
    assert match_header(BUDGET, ["Total Cost", "Notes"]) == (0, "VARIANT")

def test_variant_alias_contains_header():
    start = field_by_display_name("Start Date")
    assert resolve_header(start, ["Brand", "start"]) == "start"

def test_no_match_returns_none():
    niche = field_by_display_name("Niche")
    assert match_header(niche, ["Foo", "Bar"]) is None
    assert resolve_header(niche, []) is None

def test_blank_header_never_matches_variant_tier():
    name = field_by_display_name("Campaign Name")
    assert resolve_header(name, ["", "  ", "Brand"]) is None
    assert resolve_header(name, ["", "X"]) is None
    assert match_header(name, ["", "campaign"]) == (1, "VARIANT")

def test_map_headers_prefers_precise_match_for_other_field():
    # "Campaign Type" contains the Campaign Name alias "campaign" but is claimed exactly first
    mapping = map_headers(["Campaign Type"])
    assert {pos: f.display_name for pos, f in mapping.items()} == {0: "Campaign Type"}

def test_map_headers_mixed_tiers():
    mapping = map_headers(["campaign name", "Brand", "Total Cost", "Whatever"])
    assert {pos: f.display_name for pos, f in mapping.items()} == {
        0: "Campaign Name",
        1: "Brand Name",
        2: "Budget",
    }

def test_map_headers_claims_each_position_and_field_once():
    mapping = map_headers(["Budget", "budget"])
    assert {pos: f.display_name for pos, f in mapping.items()} == {0: "Budget"}

def test_map_headers_alias_fallback_with_exact_elsewhere():
    mapping = map_headers(["Campaign", "Campaign Type"])
    assert mapping[0].display_name == "Campaign Name"
    assert mapping[1].display_name == "Campaign Type"
