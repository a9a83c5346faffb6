from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta


# Upper bound for any single quantity (initial stock or one distribution line).
# Keeps values well inside a 32-bit integer column.
MAX_QUANTITY = 1_000_000_000


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate user id)."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def coerce_int(value: Any, field: str) -> int:
    """
    Strict integer coercion: rejects bools, floats, decimals and scientific notation.
    """
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # String input - must be plain digits (with optional leading minus)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        if 'e' in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        if '.' in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    if isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    raise ValidationError(f"{field} must be an integer")


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Integer):
        return coerce_int(value, col.key)

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

    Blank strings on nullable text columns are stored as NULL.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

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

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        if isinstance(col.type, (String, Text)) and isinstance(val, str) and val == "":
            if not col.nullable:
                raise ValidationError(f"{k} cannot be blank")
            val = None

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    """
    if "initial_quantity" in patch:
        qty = patch["initial_quantity"]
        if qty is None:
            raise ValidationError("initial_quantity is required")
        if qty < 0:
            raise ValidationError("initial_quantity must be >= 0")
        if qty > MAX_QUANTITY:
            raise ValidationError(f"initial_quantity cannot exceed {MAX_QUANTITY}")


def parse_allocations(raw: Any) -> list[tuple[int, int]]:
    """
    Validate the allocation lines of one worker submission.

    Expects a non-empty list of {"product_id": int, "quantity": int > 0}.
    A product may appear at most once: one distribution row per (worker, product).
    """
    if not isinstance(raw, list) or not raw:
        raise ValidationError("allocations must be a non-empty list")

    allocations: list[tuple[int, int]] = []
    seen: set[int] = set()
    for index, line in enumerate(raw):
        if not isinstance(line, dict):
            raise ValidationError(f"allocations[{index}] must be an object")
        if "product_id" not in line or "quantity" not in line:
            raise ValidationError(f"allocations[{index}] requires product_id and quantity")

        product_id = coerce_int(line["product_id"], f"allocations[{index}].product_id")
        quantity = coerce_int(line["quantity"], f"allocations[{index}].quantity")

        if quantity <= 0:
            raise ValidationError(f"allocations[{index}].quantity must be > 0")
        if quantity > MAX_QUANTITY:
            raise ValidationError(f"allocations[{index}].quantity cannot exceed {MAX_QUANTITY}")
        if product_id in seen:
            raise ValidationError(f"product {product_id} appears more than once")
        seen.add(product_id)

        allocations.append((product_id, quantity))

    return allocations
