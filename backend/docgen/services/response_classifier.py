from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional


STRUCTURED = "structured"
MARKUP = "markup"
INVALID = "invalid"


@dataclass(frozen=True)
class ClassifiedResponse:
    kind: str
    html: Optional[str] = None
    project_id: Optional[str] = None
    payload: Optional[Dict[str, Any]] = None


_NOT_JSON = object()


def _parse_json(body: str) -> Any:
    try:
        return json.loads(body)
    except ValueError:
        return _NOT_JSON


def _structured_payload(data: Any) -> Optional[Dict[str, Any]]:
    # Webhook platforms often wrap a single result in a list.
    if isinstance(data, list) and data and isinstance(data[0], dict):
        data = data[0]
    if not isinstance(data, dict):
        return None

    content = data.get("html")
    if not isinstance(content, str) or not content.strip():
        return None
    return data


def looks_like_html(text: str) -> bool:
    stripped = text.strip()
    lowered = stripped[:16].lower()
    if lowered.startswith("<!doctype") or lowered.startswith("<html"):
        return True
    return "<" in stripped and ">" in stripped


def classify_response(body: str) -> ClassifiedResponse:
    """
    Decide how to treat a generation service response body.

    Rules:
    - JSON object (or a list whose first item is an object) with a non-empty
      string "html" -> structured; "projectId" or "project_id" is carried along.
    - Any other JSON document -> invalid.
    - Non-JSON body starting with a doctype / <html>, or containing both "<"
      and ">" -> markup.
    - Anything else -> invalid.
    """
    data = _parse_json(body)
    if data is not _NOT_JSON:
        payload = _structured_payload(data)
        if payload is None:
            return ClassifiedResponse(kind=INVALID)
        project_id = payload.get("projectId") or payload.get("project_id")
        return ClassifiedResponse(
            kind=STRUCTURED,
            html=payload["html"],
            project_id=str(project_id) if project_id else None,
            payload=payload,
        )

    if looks_like_html(body):
        return ClassifiedResponse(kind=MARKUP, html=body)

    return ClassifiedResponse(kind=INVALID)
