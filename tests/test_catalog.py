"""Tests for retrieving the word sheet."""
from __future__ import annotations

import httpx
import pytest

from agrivocab.catalog import fetch_catalog, load_catalog, load_catalog_file
from agrivocab.config import Settings
from agrivocab.errors import CatalogUnavailable, InvalidConfiguration

SHEET_URL = "https://docs.google.com/spreadsheets/d/sheet123/edit"
EXPORT_URL = "https://docs.google.com/spreadsheets/d/sheet123/export?format=csv&gid=0"


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestFetchCatalog:
    def test_downloads_export(self, sheet_csv):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, text=sheet_csv)

        with _client(handler) as client:
            words = fetch_catalog(SHEET_URL, client=client)
        assert seen == [EXPORT_URL]
        assert len(words) == 3

    def test_http_error(self):
        with _client(lambda request: httpx.Response(404, text="gone")) as client:
            with pytest.raises(CatalogUnavailable):
                fetch_catalog(SHEET_URL, client=client)

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("offline", request=request)

        with _client(handler) as client:
            with pytest.raises(CatalogUnavailable):
                fetch_catalog(SHEET_URL, client=client)

    def test_zero_rows(self):
        with _client(lambda request: httpx.Response(200, text="header only\n")) as client:
            with pytest.raises(CatalogUnavailable):
                fetch_catalog(SHEET_URL, client=client)

    def test_invalid_url(self):
        with pytest.raises(InvalidConfiguration):
            fetch_catalog("https://example.com/sheet")


class TestLoadCatalogFile:
    def test_reads_file(self, tmp_path, sheet_tsv):
        f = tmp_path / "words.tsv"
        f.write_text(sheet_tsv, encoding="utf-8")
        words = load_catalog_file(f)
        assert [w.english for w in words] == ["soil", "irrigation"]

    def test_bom_is_ignored(self, tmp_path, sheet_csv):
        f = tmp_path / "words.csv"
        f.write_text(sheet_csv, encoding="utf-8-sig")
        assert len(load_catalog_file(f)) == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogUnavailable):
            load_catalog_file(tmp_path / "missing.csv")


class TestLoadCatalog:
    def test_local_path(self, tmp_path, sheet_csv):
        f = tmp_path / "words.csv"
        f.write_text(sheet_csv, encoding="utf-8")
        words = load_catalog(Settings(sheets_url=str(f)))
        assert len(words) == 3

    def test_sheet_url(self, sheet_csv):
        with _client(lambda request: httpx.Response(200, text=sheet_csv)) as client:
            words = load_catalog(Settings(sheets_url=SHEET_URL), client=client)
        assert words[0].english == "soil"

    def test_not_configured(self):
        with pytest.raises(InvalidConfiguration):
            load_catalog(Settings(sheets_url=""))

    def test_missing_local_path(self, tmp_path):
        with pytest.raises(CatalogUnavailable):
            load_catalog(Settings(sheets_url=str(tmp_path / "nope.csv")))
