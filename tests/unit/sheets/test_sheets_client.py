import pytest
import requests
import responses

from campaign_intake.sheets.client import SheetsClient, extract_sheet_id
from campaign_intake.sheets import errors as err

BASE = "https://sheets.example.test"
SOURCE = {"sheet_id": "abc123", "gid": "42", "name": "Test Sheet"}
URL = f"{BASE}/spreadsheets/d/abc123/export?format=csv&gid=42"

def make_client(max_retries=0):
    return SheetsClient(
        base_url=BASE,
        timeout=(0.01, 0.01),
        max_retries=max_retries,
        backoff_base_s=0.0,
        backoff_cap_s=0.0,  # zero backoff -> fast tests
    )

def test_export_url_with_and_without_gid():
    c = SheetsClient(base_url=BASE + "/")
    assert c.export_url("abc123", "42") == URL
    assert c.export_url("abc123") == f"{BASE}/spreadsheets/d/abc123/export?format=csv"

def test_default_base_url_is_google_docs():
    assert SheetsClient().export_url("x").startswith("https://docs.google.com/spreadsheets/d/x/export")

@responses.activate
def test_fetch_csv_sends_csv_headers():
    responses.add(responses.GET, URL, body="Campaign Name\nA\n", status=200)

    text = make_client().fetch_csv(SOURCE)
    assert text == "Campaign Name\nA\n"
    assert len(responses.calls) == 1
    req = responses.calls[0].request
    assert req.headers.get("Accept") == "text/csv"
    assert req.headers.get("Cache-Control") == "no-cache"

@responses.activate
def test_redirect_status_raises_access_denied_without_retry():
    responses.add(responses.GET, URL, status=302)

    with pytest.raises(err.AccessDenied):
        make_client(max_retries=3).fetch_csv(SOURCE)
    assert len(responses.calls) == 1

@responses.activate
def test_no_retry_by_default():
    responses.add(responses.GET, URL, body="down", status=503)

    with pytest.raises(err.HttpError) as excinfo:
        make_client().fetch_csv(SOURCE)
    assert excinfo.value.status == 503
    assert len(responses.calls) == 1

@responses.activate
def test_5xx_then_200_retries_when_enabled(monkeypatch):
    responses.add(responses.GET, URL, body="down", status=503)
    responses.add(responses.GET, URL, body="Campaign Name\nA\n", status=200)
    monkeypatch.setattr("time.sleep", lambda s: None)

    assert make_client(max_retries=1).fetch_csv(SOURCE) == "Campaign Name\nA\n"
    assert len(responses.calls) == 2

@responses.activate
def test_404_is_not_retried():
    responses.add(responses.GET, URL, status=404)

    with pytest.raises(err.HttpError):
        make_client(max_retries=2).fetch_csv(SOURCE)
    assert len(responses.calls) == 1

@responses.activate
def test_transport_error_is_wrapped(monkeypatch):
    responses.add(responses.GET, URL, body=requests.ConnectionError("no route to host"))
    responses.add(responses.GET, URL, body=requests.ConnectionError("no route to host"))
    monkeypatch.setattr("time.sleep", lambda s: None)

    with pytest.raises(err.NetworkError, match="ConnectionError"):
        make_client(max_retries=1).fetch_csv(SOURCE)
    assert len(responses.calls) == 2

def test_backoff_honors_retry_after_and_cap():
    c = SheetsClient(backoff_base_s=1.0, backoff_cap_s=4.0)
    assert c._compute_backoff(attempt=0, retry_after_s=2.0) == 2.0
    assert c._compute_backoff(attempt=0, retry_after_s=60.0) == 4.0
    assert 0.0 < c._compute_backoff(attempt=5, retry_after_s=None) <= 4.4

@pytest.mark.parametrize("value, expected", [
    ("https://docs.google.com/spreadsheets/d/1sJGO3IZ8-Ce_v8/edit#gid=0", "1sJGO3IZ8-Ce_v8"),
    ("/d/xyz789/", "xyz789"),
    ("  abc123  ", "abc123"),
    ("not a sheet!", None),
])
def test_extract_sheet_id(value, expected):
    assert extract_sheet_id(value) == expected
