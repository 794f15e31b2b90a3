"""
Rendering of tool results as JSON or Markdown text.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any

import core.config as config
from core.errors import ApiError, describe_error

RESPONSE_FORMAT_JSON = "json"
RESPONSE_FORMAT_MARKDOWN = "markdown"

PAYLOAD_PREVIEW_CHARS = 50
GENERIC_TABLE_COLUMNS = 5
_BYTE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")


def _dumps(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _compact(data: Any) -> str:
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False, default=str)


def truncate(text: str, limit: int | None = None) -> str:
    limit = config.CHARACTER_LIMIT if limit is None else limit
    if len(text) <= limit:
        return text
    return text[:limit] + f"\n\n... [truncated: response exceeded {limit} characters]"


def format_response(data: Any, format: str = RESPONSE_FORMAT_JSON, entity_type: str = "result") -> str:
    if format == RESPONSE_FORMAT_MARKDOWN:
        text = format_markdown(data, entity_type)
    else:
        text = _dumps(data)
    return truncate(text)


def format_error(error: BaseException) -> str:
    """JSON error text safe to hand back to the caller."""
    message = f"Error: {error}"
    if isinstance(error, ApiError) and error.retryable:
        message += " (retryable)"
    return _dumps({"error": message, "details": describe_error(error)})


# =============================================================================
# Markdown
# =============================================================================


def format_markdown(data: Any, entity_type: str) -> str:
    if isinstance(data, (list, tuple)):
        return _format_list(list(data), entity_type)
    if isinstance(data, dict):
        return _format_object(data, entity_type)
    if data is None:
        return "-"
    return str(data)


def _format_list(items: list, entity_type: str) -> str:
    if not items:
        return f"## {_capitalize(entity_type)}\n\n_No items found._"
    if entity_type == "collections":
        return _collections_table(items)
    if entity_type in ("points", "search_results"):
        return _points_table(items)
    if entity_type == "snapshots":
        return _snapshots_table(items)
    return _generic_table(items)


def _collections_table(collections: list) -> str:
    lines = ["## Collections", "", f"**Count:** {len(collections)}", "", "| Name |", "|---|"]
    for collection in collections:
        lines.append(f"| {_get(collection, 'name')} |")
    return "\n".join(lines)


def _payload_preview(point: Any) -> str:
    payload = _get(point, "payload", None)
    if not payload:
        return "-"
    return _compact(payload)[:PAYLOAD_PREVIEW_CHARS] + "..."


def _points_table(points: list) -> str:
    lines = ["## Points", "", f"**Count:** {len(points)}", ""]
    has_scores = any(isinstance(point, dict) and "score" in point for point in points)
    if has_scores:
        lines.extend(["| ID | Score | Payload Preview |", "|---|---|---|"])
        for point in points:
            score = _get(point, "score", None)
            score_text = f"{score:.4f}" if isinstance(score, (int, float)) else "-"
            lines.append(f"| {_get(point, 'id')} | {score_text} | {_payload_preview(point)} |")
    else:
        lines.extend(["| ID | Payload Preview |", "|---|---|"])
        for point in points:
            lines.append(f"| {_get(point, 'id')} | {_payload_preview(point)} |")
    return "\n".join(lines)


def _snapshots_table(snapshots: list) -> str:
    lines = ["## Snapshots", "", f"**Count:** {len(snapshots)}", "", "| Name | Size | Created |", "|---|---|---|"]
    for snapshot in snapshots:
        size = _get(snapshot, "size", None)
        size_text = format_bytes(size) if isinstance(size, (int, float)) else "-"
        created = _get(snapshot, "creation_time", None) or "-"
        lines.append(f"| {_get(snapshot, 'name')} | {size_text} | {created} |")
    return "\n".join(lines)


def _generic_table(items: list) -> str:
    first = items[0]
    if not isinstance(first, dict):
        return "\n".join(f"- {_cell(item)}" for item in items)
    keys = list(first.keys())[:GENERIC_TABLE_COLUMNS]
    lines = [f"| {' | '.join(keys)} |", f"|{'|'.join('---' for _ in keys)}|"]
    for item in items:
        record = item if isinstance(item, dict) else {}
        lines.append(f"| {' | '.join(_cell(record.get(key)) for key in keys)} |")
    return "\n".join(lines)


def _format_object(data: dict, entity_type: str) -> str:
    lines = [f"## {_capitalize(re.sub(r's$', '', entity_type))}", ""]

    if entity_type == "collection" and "status" in data:
        lines.append(f"**Status:** {data['status']}")
        if data.get("points_count") is not None:
            lines.append(f"**Points Count:** {_thousands(data['points_count'])}")
        if data.get("vectors_count") is not None:
            lines.append(f"**Vectors Count:** {_thousands(data['vectors_count'])}")
        if data.get("segments_count") is not None:
            lines.append(f"**Segments:** {data['segments_count']}")
        lines.extend(["", "### Configuration", "```json", _dumps(data.get("config")), "```"])
        return "\n".join(lines)

    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, (dict, list)):
            lines.extend([f"**{format_key(key)}:**", "```json", _dumps(value), "```"])
        else:
            lines.append(f"**{format_key(key)}:** {_cell(value)}")
    return "\n".join(lines)


# =============================================================================
# Helpers
# =============================================================================


def _get(item: Any, key: str, default: Any = "-") -> Any:
    if isinstance(item, dict):
        value = item.get(key, default)
        return default if value is None else value
    return default


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return _compact(value)
    return str(value)


def _thousands(value: Any) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        return f"{value:,}"
    return str(value)


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def format_key(key: str) -> str:
    """snake_case or camelCase key to a display label."""
    text = key.replace("_", " ")
    text = re.sub(r"([A-Z])", r" \1", text)
    return _capitalize(text).strip()


def format_bytes(size: float) -> str:
    if size <= 0:
        return "0 Bytes"
    index = max(0, min(int(math.floor(math.log(size) / math.log(1024))), len(_BYTE_UNITS) - 1))
    value = f"{size / math.pow(1024, index):.2f}".rstrip("0").rstrip(".")
    return f"{value} {_BYTE_UNITS[index]}"
