from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from sqlalchemy import Boolean, Integer, String, Text, JSON
from sqlalchemy.orm import DeclarativeMeta

from .errors import ValidationError


# Largest cents amount accepted on any money field: 9,999,999.99
MAX_AMOUNT_CENTS = 999_999_999


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - min_lengths: minimum stripped length for text fields
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)
    min_lengths: dict[str, int] = field(default_factory=dict)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def coerce_int(
    value: Any,
    field_name: str,
    *,
    minimum: int | None = None,
    maximum: int | None = None,
) -> int:
    """
    Strict integer parsing for JSON input.

    Rejects bools, floats, scientific notation and decimals; accepts ints and
    plain digit strings.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        result = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field_name} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if "e" in stripped.lower():
            raise ValidationError(f"{field_name} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if "." in stripped:
            raise ValidationError(f"{field_name} must be an integer (no decimals)")
        try:
            result = int(stripped)
        except ValueError:
            raise ValidationError(f"{field_name} must be an integer")
    elif isinstance(value, float):
        raise ValidationError(f"{field_name} must be an integer, not a decimal")
    else:
        raise ValidationError(f"{field_name} must be an integer")

    if minimum is not None and result < minimum:
        raise ValidationError(f"{field_name} must be >= {minimum}")
    if maximum is not None and result > maximum:
        raise ValidationError(f"{field_name} must be <= {maximum}")
    return result


def coerce_amount_cents(value: Any, field_name: str) -> int:
    return coerce_int(value, field_name, maximum=MAX_AMOUNT_CENTS)


def require_positive_int(value: Any, field_name: str) -> int:
    if value is None:
        raise ValidationError(f"{field_name} is required", errors={field_name: "required"})
    result = coerce_int(value, field_name)
    if result <= 0:
        raise ValidationError(f"{field_name} must be positive", errors={field_name: "must be > 0"})
    return result


def require_choice(value: Any, field_name: str, choices: Iterable[str]) -> str:
    allowed = tuple(choices)
    if value not in allowed:
        raise ValidationError(
            f"{field_name} must be one of: {', '.join(allowed)}",
            errors={field_name: "invalid choice"},
        )
    return value


def require_text(
    value: Any,
    field_name: str,
    *,
    min_length: int = 1,
    max_length: int | None = None,
) -> str:
    """Required non-blank string, stripped, with optional length bounds."""
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required", errors={field_name: "required"})
    text = value.strip()
    if len(text) < min_length:
        raise ValidationError(
            f"{field_name} must be at least {min_length} characters",
            errors={field_name: f"min length {min_length}"},
        )
    if max_length is not None and len(text) > max_length:
        raise ValidationError(
            f"{field_name} exceeds max length {max_length}",
            errors={field_name: f"max length {max_length}"},
        )
    return text


def optional_text(value: Any, field_name: str, *, max_length: int | None = None) -> str | None:
    """None/blank -> None, otherwise a stripped, length-checked string."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    text = value.strip()
    if not text:
        return None
    if max_length is not None and len(text) > max_length:
        raise ValidationError(
            f"{field_name} exceeds max length {max_length}",
            errors={field_name: f"max length {max_length}"},
        )
    return text


def coerce_str_list(value: Any, field_name: str, *, max_item_length: int = 64) -> list[str]:
    """
    Normalise a list of labels (categories, tags): strip, drop blanks,
    de-duplicate while keeping first-seen order.
    """
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError(f"{field_name} must be a list of strings")
    seen: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValidationError(f"{field_name} must be a list of strings")
        label = item.strip()
        if not label:
            continue
        if len(label) > max_item_length:
            raise ValidationError(f"{field_name} entries exceed max length {max_item_length}")
        if label not in seen:
            seen.append(label)
    return seen


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Integer):
        return coerce_int(value, col.key)

    # Booleans
    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise ValidationError(f"{col.key} must be a boolean")

    if isinstance(coltype, JSON):
        if not isinstance(value, (dict, list)):
            raise ValidationError(f"{col.key} must be an object or a list")
        return value

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        if isinstance(value, (dict, list)):
            raise ValidationError(f"{col.key} must be a string")
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                errors={f: "required" for f in missing},
            )

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        # NULL handling
        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null", errors={k: "required"})
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank", errors={k: "required"})

        # Nullable text: blank means "clear it"
        if isinstance(col.type, (String, Text)) and col.nullable and val == "":
            val = None

        min_len = policy.min_lengths.get(k)
        if min_len and isinstance(val, str) and len(val) < min_len:
            raise ValidationError(
                f"{k} must be at least {min_len} characters",
                errors={k: f"min length {min_len}"},
            )

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(
                    f"{k} exceeds max length {col.type.length}",
                    errors={k: f"max length {col.type.length}"},
                )

        patch[k] = val

    return patch
