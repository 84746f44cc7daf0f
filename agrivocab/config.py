from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path

from agrivocab.errors import InvalidConfiguration

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

SHEET_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv&gid=0"

DEFAULTS = {
    "sheets_url": "",
    "daily_goal": 15,
    "pass_rate": 0.75,
    "master_rate": 0.90,
    "batch_size": 15,
    "db_path": "progress.db",
    "request_timeout": 15.0,
}

# Keys written by the browser version of the app
_LEGACY_KEYS = {
    "sheetsUrl": "sheets_url",
    "dailyGoal": "daily_goal",
    "passRate": "pass_rate",
    "masterRate": "master_rate",
}


@dataclass
class Settings:
    sheets_url: str = DEFAULTS["sheets_url"]
    daily_goal: int = DEFAULTS["daily_goal"]
    pass_rate: float = DEFAULTS["pass_rate"]
    master_rate: float = DEFAULTS["master_rate"]
    batch_size: int = DEFAULTS["batch_size"]
    db_path: str = DEFAULTS["db_path"]
    request_timeout: float = DEFAULTS["request_timeout"]

    @property
    def project_root(self) -> Path:
        return Path(__file__).resolve().parent.parent

    @property
    def db_full_path(self) -> Path:
        return self.project_root / self.db_path

    def validate(self) -> None:
        for name in ("pass_rate", "master_rate"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not 0 < value <= 1:
                raise InvalidConfiguration(f"{name} must be in (0, 1], got {value!r}")
        if not isinstance(self.batch_size, int) or self.batch_size < 1:
            raise InvalidConfiguration(f"batch_size must be >= 1, got {self.batch_size!r}")
        if not isinstance(self.sheets_url, str):
            raise InvalidConfiguration("sheets_url must be a string")
        if self.sheets_url.startswith(("http://", "https://")):
            csv_export_url(self.sheets_url)
        if not isinstance(self.daily_goal, int) or self.daily_goal < 1:
            raise InvalidConfiguration(f"daily_goal must be >= 1, got {self.daily_goal!r}")
        if (
            isinstance(self.request_timeout, bool)
            or not isinstance(self.request_timeout, (int, float))
            or self.request_timeout <= 0
        ):
            raise InvalidConfiguration(
                f"request_timeout must be a positive number, got {self.request_timeout!r}"
            )

    def to_dict(self) -> dict:
        return {
            "sheets_url": self.sheets_url,
            "daily_goal": self.daily_goal,
            "pass_rate": self.pass_rate,
            "master_rate": self.master_rate,
            "batch_size": self.batch_size,
            "db_path": self.db_path,
            "request_timeout": self.request_timeout,
        }


def extract_sheet_id(url: str) -> str | None:
    m = re.search(r"/d/([a-zA-Z0-9-_]+)", url or "")
    return m.group(1) if m else None


def csv_export_url(url: str) -> str:
    """Turn a Google Sheets share link into its CSV export URL."""
    sheet_id = extract_sheet_id(url)
    if not sheet_id:
        raise InvalidConfiguration(f"Not a valid Google Sheets URL: {url!r}")
    return SHEET_EXPORT_URL.format(sheet_id=sheet_id)


def load_settings() -> Settings:
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        # Migrate: camelCase keys from the browser version
        for old, new in _LEGACY_KEYS.items():
            if old in raw:
                raw.setdefault(new, raw[old])
                del raw[old]
        known = {f.name for f in Settings.__dataclass_fields__.values()}
        filtered = {k: v for k, v in raw.items() if k in known}
        return Settings(**filtered)
    return Settings()


def save_settings(settings: Settings) -> None:
    CONFIG_PATH.write_text(json.dumps(settings.to_dict(), indent=4) + "\n")
