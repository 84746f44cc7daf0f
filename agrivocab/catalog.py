"""Retrieve the word sheet and turn it into a catalog snapshot."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import httpx

from agrivocab.config import csv_export_url
from agrivocab.errors import CatalogUnavailable
from agrivocab.models import WordRecord
from agrivocab.parsers.sheet_parser import parse_catalog

if TYPE_CHECKING:
    from agrivocab.config import Settings

log = logging.getLogger("agrivocab.catalog")


def _require_rows(records: list[WordRecord], source: str) -> list[WordRecord]:
    if not records:
        raise CatalogUnavailable(f"No usable rows in {source}. Check the sheet columns.")
    log.info("Loaded %d words from %s", len(records), source)
    return records


def fetch_catalog(
    url: str,
    client: httpx.Client | None = None,
    timeout: float = 15.0,
) -> list[WordRecord]:
    """Download the sheet's CSV export. The sheet must be shared publicly."""
    export_url = csv_export_url(url)
    own_client = client is None
    if own_client:
        client = httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        resp = client.get(export_url)
        resp.raise_for_status()
    except httpx.HTTPError as e:
        log.warning("Catalog download failed: %s", e)
        raise CatalogUnavailable(
            "Could not download the word sheet. Make sure it is shared publicly."
        ) from e
    finally:
        if own_client:
            client.close()
    return _require_rows(parse_catalog(resp.text), export_url)


def load_catalog_file(path: Path) -> list[WordRecord]:
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise CatalogUnavailable(f"Could not read {path}: {e}") from e
    return _require_rows(parse_catalog(text), path.name)


def load_catalog(settings: Settings, client: httpx.Client | None = None) -> list[WordRecord]:
    """Read sheets_url as a local path unless it is an http(s) URL."""
    source = settings.sheets_url.strip()
    if source and not source.startswith(("http://", "https://")):
        path = Path(source).expanduser()
        if not path.is_absolute():
            path = settings.project_root / path
        return load_catalog_file(path)
    return fetch_catalog(source, client=client, timeout=settings.request_timeout)
