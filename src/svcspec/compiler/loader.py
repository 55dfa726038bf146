"""Load service-description source from a URL, local file, or stdin.

This module handles all I/O for fetching source text before it is handed to
a :class:`~svcspec.compiler.base.Compiler`. The single public function is
:func:`load_source`.
"""

from __future__ import annotations

import sys
from pathlib import Path

import httpx

from svcspec.exceptions import SourceLoadError


def load_source(source: str) -> str:
    """Load service source text from URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The source text.

    Raises:
        SourceLoadError: If the source cannot be read or is empty.
    """
    if source == "-":
        return _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source)
    else:
        return _load_from_file(source)


def _load_from_stdin() -> str:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SourceLoadError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SourceLoadError("No input received from stdin")
    return content


def _load_from_url(url: str) -> str:
    """Fetch source text over HTTP(S), following redirects.

    Raises:
        SourceLoadError: On a non-2xx status or a transport failure.
    """
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SourceLoadError(
            f"HTTP {exc.response.status_code} fetching source from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SourceLoadError(f"Failed to fetch source from {url}: {exc}") from exc

    if not response.text.strip():
        raise SourceLoadError(f"Source at {url} is empty")
    return response.text


def _load_from_file(path: str) -> str:
    file_path = Path(path)
    if not file_path.is_file():
        raise SourceLoadError(f"Source file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceLoadError(f"Failed to read source file {path}: {exc}") from exc

    if not content.strip():
        raise SourceLoadError(f"Source file is empty: {path}")
    return content
