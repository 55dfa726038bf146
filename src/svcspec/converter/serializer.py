"""Render specification documents to YAML or JSON text."""

from __future__ import annotations

import json
from typing import Any

import yaml

from svcspec.models import SpecDocument, SpecFormat


def to_dict(doc: SpecDocument) -> dict[str, Any]:
    """Dump *doc* to plain data using the document's wire names.

    ``None`` fields are omitted and vendor extensions follow the declared
    fields, so the key order is stable for a given document.
    """
    return doc.model_dump(mode="json", by_alias=True, exclude_none=True)


def serialize(doc: SpecDocument, fmt: SpecFormat = SpecFormat.YAML) -> str:
    """Serialize *doc* in *fmt*.

    YAML is emitted in block style without key sorting; JSON is indented by
    two spaces. Both end with a newline.
    """
    data = to_dict(doc)
    if SpecFormat(fmt) == SpecFormat.JSON:
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    return yaml.safe_dump(
        data,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )
