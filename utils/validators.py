"""Field validators for sweets and accounts.

Each check fails fast with a ``ValidationError`` whose code names the rule
that was broken. Checks that normalize (trim, int coercion) return the
normalized value.
"""
from __future__ import annotations

import math
import re
from typing import Any, Mapping

from core.errors import ValidationError
from schemas.sweet import SweetCreate, SweetSearch

EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")

MIN_PASSWORD_LENGTH = 6
# bcrypt only looks at the first 72 bytes and newer releases reject longer input
MAX_PASSWORD_BYTES = 72
MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 100
# Mongo stores integers as signed 64-bit
MAX_QUANTITY = 2**63 - 1


def is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid amount
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_finite(value: Any) -> bool:
    try:
        return is_number(value) and math.isfinite(value)
    except OverflowError:
        # int too large to convert to float
        return False


def is_integer(value: Any) -> bool:
    if not is_number(value):
        return False
    if isinstance(value, int):
        return True
    return value.is_integer()


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


# ---- Accounts ----
def validate_email(email: Any) -> str:
    if not isinstance(email, str) or not EMAIL_RE.match(email):
        raise ValidationError("Invalid email format", "INVALID_EMAIL")
    return email


def validate_password(password: Any) -> str:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long", "WEAK_PASSWORD"
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes", "PASSWORD_TOO_LONG"
        )
    return password


def validate_register_input(name: Any, email: Any, password: Any) -> tuple[str, str, str]:
    if _is_blank(name):
        raise ValidationError("Name is required", "MISSING_NAME")
    validate_email(email)
    validate_password(password)
    return name.strip(), email, password


# ---- Sweets ----
def validate_sweet_name(name: Any) -> str:
    trimmed = name.strip() if isinstance(name, str) else ""
    if not trimmed:
        raise ValidationError("Name is required", "MISSING_NAME")
    if len(trimmed) < MIN_NAME_LENGTH:
        raise ValidationError(f"Name must be at least {MIN_NAME_LENGTH} characters", "NAME_TOO_SHORT")
    if len(trimmed) > MAX_NAME_LENGTH:
        raise ValidationError(f"Name cannot exceed {MAX_NAME_LENGTH} characters", "NAME_TOO_LONG")
    return trimmed


def validate_sweet_category(category: Any) -> str:
    trimmed = category.strip() if isinstance(category, str) else ""
    if not trimmed:
        raise ValidationError("Category is required", "MISSING_CATEGORY")
    return trimmed


def validate_sweet_price(price: Any) -> float:
    if not is_finite(price):
        raise ValidationError("Price must be a valid number", "INVALID_PRICE")
    if price < 0:
        raise ValidationError("Price cannot be negative", "NEGATIVE_PRICE")
    return float(price)


def validate_sweet_quantity(quantity: Any) -> int:
    if not is_number(quantity) or quantity < 0:
        raise ValidationError("Quantity must be a non-negative number", "NEGATIVE_QUANTITY")
    if not is_integer(quantity):
        raise ValidationError("Quantity must be a whole number", "INVALID_QUANTITY")
    if quantity > MAX_QUANTITY:
        raise ValidationError("Quantity is too large", "INVALID_QUANTITY")
    return int(quantity)


def validate_sweet_input(data: Mapping[str, Any]) -> SweetCreate:
    """Validate a full sweet record: name, category, price, quantity in that order."""
    name = validate_sweet_name(data.get("name"))
    category = validate_sweet_category(data.get("category"))
    price = validate_sweet_price(data.get("price"))
    quantity = validate_sweet_quantity(data.get("quantity"))
    return SweetCreate(name=name, category=category, price=price, quantity=quantity)


def validate_sweet_update_input(data: Mapping[str, Any]) -> dict[str, Any]:
    """Validate only the fields that were supplied.

    A field counts as supplied when its key is present with a non-null
    value, so ``{"name": ""}`` is rejected while ``{}`` is a no-op.
    """
    update: dict[str, Any] = {}
    if data.get("name") is not None:
        update["name"] = validate_sweet_name(data["name"])
    if data.get("category") is not None:
        update["category"] = validate_sweet_category(data["category"])
    if data.get("price") is not None:
        update["price"] = validate_sweet_price(data["price"])
    if data.get("quantity") is not None:
        update["quantity"] = validate_sweet_quantity(data["quantity"])
    return update


def _validate_bound(value: Any, message: str, code: str) -> float | None:
    if value is None:
        return None
    if not is_finite(value) or value < 0:
        raise ValidationError(message, code)
    return float(value)


def validate_search_query(
    name: Any = None,
    category: Any = None,
    min_price: Any = None,
    max_price: Any = None,
) -> SweetSearch:
    low = _validate_bound(min_price, "Minimum price must be a non-negative number", "INVALID_MIN_PRICE")
    high = _validate_bound(max_price, "Maximum price must be a non-negative number", "INVALID_MAX_PRICE")
    if low is not None and high is not None and low > high:
        raise ValidationError("Minimum price cannot be greater than maximum price", "INVALID_PRICE_RANGE")
    return SweetSearch(
        name=None if _is_blank(name) else name.strip(),
        category=None if _is_blank(category) else category.strip(),
        min_price=low,
        max_price=high,
    )


def validate_inventory_quantity(quantity: Any) -> int:
    """Purchase / restock amount: a strictly positive whole number."""
    if not is_finite(quantity):
        raise ValidationError("Quantity must be a valid number", "INVALID_QUANTITY")
    if quantity <= 0:
        raise ValidationError("Quantity must be greater than zero", "INVALID_QUANTITY")
    if not is_integer(quantity):
        raise ValidationError("Quantity must be a whole number", "INVALID_QUANTITY")
    if quantity > MAX_QUANTITY:
        raise ValidationError("Quantity is too large", "INVALID_QUANTITY")
    return int(quantity)


__all__ = [
    "EMAIL_RE",
    "MAX_QUANTITY",
    "is_number",
    "is_finite",
    "is_integer",
    "validate_email",
    "validate_password",
    "validate_register_input",
    "validate_sweet_name",
    "validate_sweet_category",
    "validate_sweet_price",
    "validate_sweet_quantity",
    "validate_sweet_input",
    "validate_sweet_update_input",
    "validate_search_query",
    "validate_inventory_quantity",
]
