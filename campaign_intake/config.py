import json
import logging
import os

from campaign_intake.sheets.client import DEFAULT_BASE_URL
from campaign_intake.types import SheetSource

logger = logging.getLogger(__name__)

# Published sheets used by the dashboard and view pages
DEFAULT_SOURCES: dict[str, SheetSource] = {
    "dashboard": {
        "sheet_id": "1sJGO3IZ8Cev8F5pkdDo8uxXL7oCVlmsRtrGERsZHxSM",
        "gid": "0",
        "name": "Dashboard Sheet",
    },
    "view": {
        "sheet_id": "1Vd0HJJqjdEkCNs2F37B3OmQp7sFelpLibDUIBKmh_lw",
        "gid": "566681534",
        "name": "View Sheet",
    },
}

ENV_BASE_URL = "SHEETS_BASE_URL"
# per source: <NAME>_SHEET_ID, <NAME>_GID (e.g. DASHBOARD_SHEET_ID)
ENV_SHEET_ID_SUFFIX = "_SHEET_ID"
ENV_GID_SUFFIX = "_GID"


# ---------- helper functions ----------

def _env_str(name: str) -> str | None:
    """Read a non-empty, trimmed string from the environment, else None."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def _load_json_file(path: str) -> dict:
    """
    Read a small JSON file. If the file is missing or invalid,
    return {} and log a message.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.info("Config file not found: %s (using env/defaults)", path)
        return {}
    except (OSError, ValueError) as e:
        logger.warning("Could not read config file %s: %s (using env/defaults)", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a JSON object (using env/defaults)", path)
        return {}
    return data


def _validate_sources(sources: dict[str, SheetSource]) -> None:
    """Every source needs a sheet id."""
    empty = [name for name, src in sources.items() if not src["sheet_id"]]
    if empty:
        raise ValueError(f"Sheet id must not be empty for source(s): {empty}")


# ---------- config ----------

class Config:
    """
    Runtime settings, loaded once at startup.
    Precedence: CLI overrides > file > env vars > defaults.

    cfg = Config(file_path="sheets.json", sheet_id=args.sheet_id, gid=args.gid, source_name="dashboard")
    cfg.source("dashboard")  # {'sheet_id': ..., 'gid': ..., 'name': ...}

    CLI `sheet_id`/`gid` overrides apply to `source_name` only.
    """

    def __init__(
        self,
        *,
        file_path: str | None = None,
        base_url: str | None = None,
        source_name: str | None = None,
        sheet_id: str | None = None,
        gid: str | None = None,
    ) -> None:
        data = _load_json_file(file_path) if file_path else {}

        file_base = data.get("base_url") if isinstance(data.get("base_url"), str) else None
        self._base_url = (base_url or file_base or _env_str(ENV_BASE_URL) or DEFAULT_BASE_URL).strip().rstrip("/")

        sources: dict[str, SheetSource] = {}
        for name, default in DEFAULT_SOURCES.items():
            src: SheetSource = dict(default)
            prefix = name.upper()
            src["sheet_id"] = _env_str(prefix + ENV_SHEET_ID_SUFFIX) or src["sheet_id"]
            src["gid"] = _env_str(prefix + ENV_GID_SUFFIX) or src["gid"]
            sources[name] = src

        # file: may override known sources or add new ones
        file_sources = data.get("sources")
        if isinstance(file_sources, dict):
            for name, entry in file_sources.items():
                if not isinstance(entry, dict):
                    logger.warning("Ignoring source %r in config file: not an object", name)
                    continue
                src = sources.get(name) or {"sheet_id": "", "gid": None, "name": name}
                if isinstance(entry.get("sheet_id"), str):
                    src["sheet_id"] = entry["sheet_id"].strip()
                if "gid" in entry:
                    src["gid"] = str(entry["gid"]) if entry["gid"] is not None else None
                if isinstance(entry.get("name"), str):
                    src["name"] = entry["name"]
                sources[name] = src

        # cli overrides
        if source_name is not None and (sheet_id is not None or gid is not None):
            src = sources.get(source_name) or {"sheet_id": "", "gid": None, "name": source_name}
            if sheet_id is not None:
                src["sheet_id"] = sheet_id.strip()
            if gid is not None:
                src["gid"] = gid.strip() or None
            sources[source_name] = src

        _validate_sources(sources)
        self._sources = sources
        logger.debug("Config loaded base_url=%s sources=%s", self._base_url, sorted(sources))

    # ----- public API -----

    def base_url(self) -> str:
        return self._base_url

    def source(self, name: str) -> SheetSource:
        """Return a copy of one configured source; KeyError names the known ones."""
        try:
            return dict(self._sources[name])
        except KeyError:
            raise KeyError(f"Unknown sheet source {name!r} (known: {sorted(self._sources)})") from None

    def sources(self) -> dict[str, SheetSource]:
        return {name: dict(src) for name, src in self._sources.items()}
