from email.utils import parsedate_to_datetime
from datetime import datetime, timezone

MAX_BODY_CHARS = 300

# hosts a private sheet redirects to
AUTH_DOMAINS = ("accounts.google.com",)

_REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})
_HTML_MARKERS = ("<!doctype", "<html")

# ---- exceptions ----

class SheetError(Exception):
    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        body: str | None = None,
        retry_after_s: float | None = None,
        url: str | None = None
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body = body
        self.retry_after_s = retry_after_s
        self.url = url

class AccessDenied(SheetError): ...     # private sheet: auth redirect or HTML login page
class EmptyData(SheetError): ...        # reachable, but no usable lines
class HttpError(SheetError): ...        # any other non-2xx
class NetworkError(SheetError): ...     # DNS/timeout/connection reset


# ---- helpers ----

def parse_retry_after(value: str | None) -> float | None:
    """Parse Retry-After header: seconds or HTTP-date -> seconds; else None."""
    if not value:
        return None
    v = value.strip()
    if v.isdigit():
        return float(v)
    try:
        dt = parsedate_to_datetime(v)
        if dt is None:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        else:
            dt = dt.astimezone(timezone.utc)
        return max(0.0, (dt - datetime.now(timezone.utc)).total_seconds())
    except (TypeError, ValueError):
        return None


def is_auth_url(url: str | None) -> bool:
    return bool(url) and any(domain in url for domain in AUTH_DOMAINS)


def looks_like_html(text: str) -> bool:
    """True if the payload starts with an HTML document marker (login pages come back as 200)."""
    return text.lstrip()[:16].lower().startswith(_HTML_MARKERS)


def classify_response(resp, *, name: str, url: str) -> str:
    """
    Return the CSV text of a usable response.
    Else raise a typed error:
      - redirect status or auth-domain URL   -> AccessDenied
      - other non-2xx                        -> HttpError(status)
      - 2xx with an HTML document body       -> AccessDenied
      - no non-blank lines                   -> EmptyData
    `name` is the human-readable source name used in messages.
    """
    status = getattr(resp, "status_code", None)
    if status is None:
        raise HttpError(f"Failed to fetch data from {name}. Missing status code.", url=url)

    text = getattr(resp, "text", "") or ""
    final_url = getattr(resp, "url", None) or url
    history = getattr(resp, "history", None) or []
    redirected_to_auth = is_auth_url(final_url) or any(
        is_auth_url(getattr(h, "headers", {}).get("Location")) for h in history
    )

    if not (200 <= status < 300):
        body = text[:MAX_BODY_CHARS]
        headers = getattr(resp, "headers", {}) or {}
        retry_after_s = parse_retry_after(headers.get("Retry-After"))
        if status in _REDIRECT_STATUSES or redirected_to_auth:
            raise AccessDenied(
                f'Sheet "{name}" appears to be private or inaccessible. '
                "Please ensure the sheet is publicly viewable.",
                status=status, body=body, retry_after_s=retry_after_s, url=final_url,
            )
        raise HttpError(f"Failed to fetch data from {name}. Status: {status}",
                        status=status, body=body, retry_after_s=retry_after_s, url=final_url)

    if redirected_to_auth or looks_like_html(text):
        raise AccessDenied(
            f'Sheet "{name}" appears to be private. Please make the sheet publicly viewable.',
            status=status, body=text[:MAX_BODY_CHARS], url=final_url,
        )

    if not text.strip():
        raise EmptyData(f"No data found in {name}", status=status, url=final_url)

    return text


def from_transport(exc: Exception, *, url: str) -> NetworkError:
    """Wrap network/timeout errors into a NetworkError with context."""
    return NetworkError(f"Network error: {exc.__class__.__name__}: {exc}",
                        status=None, body=None, retry_after_s=None, url=url)
