"""
Boundary normalization for order records.

Orders reach the service from three places: the joined and flat database
queries and the local ledger. Over time those sources have used different
field names for the same thing (total_amount / total_price / total,
created_at / date, customer_name / customerName ...). normalize_order is the
only place that knows about the variants; everything past it works with the
canonical shape below.

    {
        "id", "customer_id", "customer_name", "phone", "address", "note",
        "total_amount", "payment_method", "payment_number", "status",
        "created_at", "consignment_id", "tracking_code", "is_local",
        "items": [{"product_id", "product_name", "quantity", "price"}],
    }
"""

import hashlib
import json
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from models.orders import ORDER_STATUSES


TOTAL_KEYS = ("total_amount", "total_price", "total", "totalAmount")
CREATED_KEYS = ("created_at", "date", "createdAt")
NAME_KEYS = ("customer_name", "customerName", "name")
ADDRESS_KEYS = ("address", "shipping_address", "shippingAddress")
LOCAL_KEYS = ("is_local", "isLocal")

ITEM_PRODUCT_ID_KEYS = ("product_id", "productId")
ITEM_NAME_KEYS = ("product_name", "productName", "name")

# Labels the storefront UI has written into the status column
STATUS_ALIASES = {
    "অপেক্ষমান": "pending",
    "প্রক্রিয়াধীন": "processing",
    "শিপিং-এ": "shipped",
    "পৌঁছে গেছে": "delivered",
    "বাতিল": "cancelled",
    "অসম্পূর্ণ": "incomplete",
    "canceled": "cancelled",
}

UNKNOWN_CUSTOMER = "Unknown"
UNKNOWN_PRODUCT = "Unknown product"
# Placeholder for records with no usable timestamp
UNKNOWN_TIMESTAMP = datetime(1970, 1, 1)


def _first(raw: dict, keys: Iterable[str], default: Any = None) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return default


def _to_number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse datetimes, ISO-8601 strings and epoch milliseconds into naive UTC.

    Returns None for anything unparseable.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def normalize_status(value: Any) -> str:
    if not value:
        return "pending"
    text = str(value).strip()
    text = STATUS_ALIASES.get(text, text).lower()
    return text if text in ORDER_STATUSES else "pending"


def normalize_item(raw: dict) -> dict:
    product_id = _first(raw, ITEM_PRODUCT_ID_KEYS)
    name = _first(raw, ITEM_NAME_KEYS)
    if name is None:
        name = f"{UNKNOWN_PRODUCT} ({str(product_id)[:4]})" if product_id is not None else UNKNOWN_PRODUCT

    return {
        "product_id": product_id,
        "product_name": name,
        "quantity": _to_int(raw.get("quantity")),
        "price": _to_number(raw.get("price")),
    }


def fallback_order_id(raw: dict) -> str:
    """Stable id for a record that has none, derived from its content."""
    digest = hashlib.sha1(json.dumps(raw, sort_keys=True, default=str).encode("utf-8")).hexdigest()
    return f"local-{digest[:12]}"


def normalize_order(raw: dict, include_items: bool = True) -> dict:
    """
    Map any known order shape onto the canonical record.

    Args:
        raw: order as read from the database or the local ledger
        include_items: False forces items to [] (flat query tier)

    Returns:
        New dict in canonical shape; raw is not modified
    """
    order_id = raw.get("id")
    if order_id is None or order_id == "":
        order_id = fallback_order_id(raw)

    created_at = parse_timestamp(_first(raw, CREATED_KEYS))
    if created_at is None:
        created_at = UNKNOWN_TIMESTAMP

    items = []
    if include_items:
        items = [normalize_item(item) for item in (raw.get("items") or []) if isinstance(item, dict)]

    return {
        "id": order_id,
        "customer_id": raw.get("customer_id"),
        "customer_name": _first(raw, NAME_KEYS, UNKNOWN_CUSTOMER),
        "phone": raw.get("phone") or "",
        "address": _first(raw, ADDRESS_KEYS, ""),
        "note": raw.get("note"),
        "total_amount": _to_number(_first(raw, TOTAL_KEYS, 0)),
        "payment_method": raw.get("payment_method") or "cash_on_delivery",
        "payment_number": raw.get("payment_number"),
        "status": normalize_status(raw.get("status")),
        "created_at": created_at,
        "consignment_id": raw.get("consignment_id"),
        "tracking_code": raw.get("tracking_code"),
        "is_local": bool(_first(raw, LOCAL_KEYS, False)),
        "items": items,
    }
