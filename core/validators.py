"""
Shared validation helpers for tool arguments.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from core.config import MAX_BATCH_OPERATIONS, MAX_PAGE_SIZE
from core.errors import ValidationIssue

RESPONSE_FORMATS = ("json", "markdown")
MAX_NAME_LENGTH = 255


def validate_required_text(value: str, field: str, max_len: int = MAX_NAME_LENGTH) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValidationIssue(f"{field} must be a non-empty string", field=field, error_type="required")
    if len(value) > max_len:
        raise ValidationIssue(f"{field} exceeds max length {max_len}", field=field, error_type="max_length")


def validate_optional_text(value: Optional[str], field: str, max_len: int = MAX_NAME_LENGTH) -> None:
    if value is None:
        return
    if not isinstance(value, str):
        raise ValidationIssue(f"{field} must be a string", field=field, error_type="invalid_type")
    if len(value) > max_len:
        raise ValidationIssue(f"{field} exceeds max length {max_len}", field=field, error_type="max_length")


def validate_collection_name(name: str) -> None:
    validate_required_text(name, "collection_name")


def validate_limit(value: int, field: str = "limit", max_value: int = MAX_PAGE_SIZE) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationIssue(f"{field} must be an integer", field=field, error_type="invalid_type")
    if value <= 0 or value > max_value:
        raise ValidationIssue(f"{field} must be between 1 and {max_value}", field=field, error_type="out_of_range")


def validate_optional_limit(value: Optional[int], field: str = "limit", max_value: int = MAX_PAGE_SIZE) -> None:
    if value is None:
        return
    validate_limit(value, field, max_value)


def validate_non_negative(value: Optional[int], field: str) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationIssue(f"{field} must be a non-negative integer", field=field, error_type="out_of_range")


def validate_list(
    values: Optional[Sequence],
    field: str,
    max_items: int = MAX_BATCH_OPERATIONS,
    required: bool = False,
) -> None:
    if values is None:
        if required:
            raise ValidationIssue(f"{field} is required", field=field, error_type="required")
        return
    if not isinstance(values, (list, tuple)):
        raise ValidationIssue(f"{field} must be a list", field=field, error_type="invalid_type")
    if required and not values:
        raise ValidationIssue(f"{field} must not be empty", field=field, error_type="required")
    if len(values) > max_items:
        raise ValidationIssue(f"{field} exceeds max items {max_items}", field=field, error_type="max_items")


def validate_string_list(
    values: Optional[Sequence[str]],
    field: str,
    max_items: int = MAX_BATCH_OPERATIONS,
    required: bool = False,
) -> None:
    validate_list(values, field, max_items, required=required)
    for item in values or ():
        if not isinstance(item, str) or not item:
            raise ValidationIssue(f"{field} must contain only non-empty strings", field=field, error_type="invalid_type")


def validate_point_id(value: Any, field: str = "id") -> None:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValidationIssue(f"{field} must be an integer or UUID string", field=field, error_type="invalid_type")
    if isinstance(value, int) and value < 0:
        raise ValidationIssue(f"{field} must be a non-negative integer", field=field, error_type="invalid_id")
    if isinstance(value, str) and not value.strip():
        raise ValidationIssue(f"{field} must be a non-empty string", field=field, error_type="required")


def validate_point_ids(values: Optional[Sequence[Any]], field: str = "ids", required: bool = False) -> None:
    validate_list(values, field, required=required)
    for item in values or ():
        validate_point_id(item, field)


def validate_points_selector(points: Optional[Sequence[Any]], filter: Optional[dict]) -> None:
    """Operations that select points need ids or a filter (or both)."""
    if not points and not filter:
        raise ValidationIssue(
            "either points or filter must be provided",
            field="points",
            error_type="required",
        )
    validate_point_ids(points, "points")
    validate_mapping(filter, "filter")


def validate_mapping(value: Optional[dict], field: str, required: bool = False) -> None:
    if value is None:
        if required:
            raise ValidationIssue(f"{field} is required", field=field, error_type="required")
        return
    if not isinstance(value, dict):
        raise ValidationIssue(f"{field} must be an object", field=field, error_type="invalid_type")


def validate_vector(values: Sequence[Any], field: str = "vector") -> None:
    validate_list(values, field, max_items=65536, required=True)
    for item in values:
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            raise ValidationIssue(f"{field} must contain only numbers", field=field, error_type="invalid_type")


def validate_response_format(value: str) -> None:
    if value not in RESPONSE_FORMATS:
        raise ValidationIssue(
            f"format must be one of: {', '.join(RESPONSE_FORMATS)}",
            field="format",
            error_type="invalid_choice",
        )


def validate_score_threshold(value: Optional[float]) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationIssue("score_threshold must be a number", field="score_threshold", error_type="invalid_type")
