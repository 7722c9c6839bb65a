import logging
import random
import re
import time
from urllib.parse import urlencode

import requests

from . import errors as err
from campaign_intake.types import SheetSource

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://docs.google.com"

_SHEET_ID_PATTERNS = (
    re.compile(r"/spreadsheets/d/([a-zA-Z0-9_-]+)"),
    re.compile(r"/d/([a-zA-Z0-9_-]+)"),
    re.compile(r"^([a-zA-Z0-9_-]+)$"),
)


def extract_sheet_id(value: str) -> str | None:
    """Pull the sheet id out of a spreadsheet URL, a '/d/<id>' fragment, or a bare id."""
    value = value.strip()
    for pattern in _SHEET_ID_PATTERNS:
        m = pattern.search(value)
        if m:
            return m.group(1)
    return None


class SheetsClient:
    """
    Fetches the CSV export of a published spreadsheet tab.
    - GET {base_url}/spreadsheets/d/{sheet_id}/export?format=csv[&gid={gid}]
    - Explicit (connect, read) timeout on every request.
    - No retries by default; with max_retries > 0, network errors and 429/5xx are
      retried with exponential backoff (honoring Retry-After).
    - Access-denied and empty payloads are never retried.
    """
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        session: requests.Session | None = None,
        timeout: tuple[float, float] = (3, 15),
        max_retries: int = 0,
        backoff_base_s: float = 0.5,
        backoff_cap_s: float = 8.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout
        self._max_retries = max_retries
        self._backoff_base_s = backoff_base_s
        self._backoff_cap_s = backoff_cap_s

        logger.debug(
            "SheetsClient init base_url=%s timeout=%s max_retries=%d "
            "backoff(base=%.2f cap=%.2f) session_provided=%s",
            self._base_url, self._timeout, self._max_retries,
            self._backoff_base_s, self._backoff_cap_s, session is not None,
        )

    # ---------- public API ------------

    def export_url(self, sheet_id: str, gid: str | None = None) -> str:
        params = {"format": "csv"}
        if gid:
            params["gid"] = gid
        return f"{self._base_url}/spreadsheets/d/{sheet_id}/export?{urlencode(params)}"

    def fetch_csv(self, source: SheetSource) -> str:
        """
        Return the raw CSV text for `source`.
        Raises AccessDenied / EmptyData / HttpError / NetworkError (all SheetError).
        """
        url = self.export_url(source["sheet_id"], source.get("gid"))
        logger.info("Fetching %s: %s", source["name"], url)
        text = self._get_with_retry(url, name=source["name"])
        logger.debug("Fetched %s: %d chars", source["name"], len(text))
        return text

    # ---------- helpers -----------

    def _compute_backoff(self, *, attempt: int, retry_after_s: float | None) -> float:
        """
        Sleep before the next retry: Retry-After if given (capped),
        else base * 2^attempt, capped, with ±10% jitter.
        """
        if retry_after_s is not None:
            return min(retry_after_s, self._backoff_cap_s)

        delay = min(self._backoff_base_s * (2 ** attempt), self._backoff_cap_s)
        jitter = delay * (0.1 * (random.random() - 0.5) * 2)
        return max(0.0, delay + jitter)

    @staticmethod
    def _is_retryable(exc: err.SheetError) -> bool:
        if isinstance(exc, err.NetworkError):
            return True
        if isinstance(exc, err.HttpError) and exc.status is not None:
            return exc.status == 429 or 500 <= exc.status < 600
        return False

    def _get_with_retry(self, url: str, *, name: str) -> str:
        attempt = 0
        headers = {"Accept": "text/csv", "Cache-Control": "no-cache"}

        while True:
            try:
                resp = self._session.get(url, headers=headers, timeout=self._timeout)
                logger.debug("GET %s status=%s", url, getattr(resp, "status_code", None))
                return err.classify_response(resp, name=name, url=url)
            except requests.RequestException as ex:
                retry_exc: err.SheetError = err.from_transport(ex, url=url)
                logger.warning("Transport error fetching %s: %s", name, ex.__class__.__name__)
            except err.SheetError as ex:
                if not self._is_retryable(ex):
                    raise
                retry_exc = ex

            if attempt >= self._max_retries:
                if self._max_retries:
                    logger.error("Retries exhausted fetching %s (%s).", name, retry_exc.__class__.__name__)
                raise retry_exc
            sleep_s = self._compute_backoff(attempt=attempt, retry_after_s=retry_exc.retry_after_s)
            logger.warning(
                "Retrying %s attempt=%d sleep=%.2fs (%s)",
                name, attempt + 1, sleep_s, retry_exc.__class__.__name__,
            )
            time.sleep(sleep_s)
            attempt += 1
