"""Tests for svcspec.compiler.loader."""

from __future__ import annotations

import io
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from svcspec.compiler.loader import load_source
from svcspec.exceptions import SourceLoadError

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


class TestLoadFromFile:
    def test_reads_fixture(self) -> None:
        text = load_source(str(FIXTURES_DIR / "greeter.bal"))
        assert "service<http:Service> Greeter" in text

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SourceLoadError, match="not found"):
            load_source(str(tmp_path / "nope.bal"))

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.bal"
        path.write_text("  \n", encoding="utf-8")
        with pytest.raises(SourceLoadError, match="empty"):
            load_source(str(path))


class TestLoadFromStdin:
    def test_reads_stdin(self) -> None:
        with patch("svcspec.compiler.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO("service S { }")
            assert load_source("-") == "service S { }"

    def test_empty_stdin(self) -> None:
        with patch("svcspec.compiler.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO("")
            with pytest.raises(SourceLoadError, match="No input"):
                load_source("-")


class TestLoadFromUrl:
    URL = "https://example.com/greeter.bal"

    def test_fetches_text(self) -> None:
        response = httpx.Response(
            status_code=200,
            text="service S { }",
            request=httpx.Request("GET", self.URL),
        )
        with patch("svcspec.compiler.loader.httpx.get", return_value=response) as mock_get:
            assert load_source(self.URL) == "service S { }"
        mock_get.assert_called_once_with(self.URL, timeout=30.0, follow_redirects=True)

    def test_http_error_status(self) -> None:
        response = httpx.Response(
            status_code=404,
            text="missing",
            request=httpx.Request("GET", self.URL),
        )
        with patch("svcspec.compiler.loader.httpx.get", return_value=response):
            with pytest.raises(SourceLoadError, match="HTTP 404"):
                load_source(self.URL)

    def test_transport_error(self) -> None:
        error = httpx.ConnectError("refused", request=httpx.Request("GET", self.URL))
        with patch("svcspec.compiler.loader.httpx.get", side_effect=error):
            with pytest.raises(SourceLoadError, match="Failed to fetch"):
                load_source(self.URL)

    def test_empty_body(self) -> None:
        response = httpx.Response(
            status_code=200,
            text="",
            request=httpx.Request("GET", self.URL),
        )
        with patch("svcspec.compiler.loader.httpx.get", return_value=response):
            with pytest.raises(SourceLoadError, match="empty"):
                load_source(self.URL)
