"""
Data-shape normalization for products, categories and orders.

Every read path re-normalizes rows coming back from the store, so each
function here is pure and idempotent.
"""

import math
from enum import Enum
from typing import Any, Dict, List, Mapping

PLACEHOLDER_IMAGE = "https://via.placeholder.com/400x300"
DEFAULT_FLAVOR_NAME = "No name"
DEFAULT_CATEGORY = "default"

# external (camelCase) -> storage (snake_case)
ORDER_FIELDS = {
    "customerName": "customer_name",
    "customerPhone": "customer_phone",
    "paymentMethod": "payment_method",
    "createdAt": "created_at",
}


def _quantity(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return int(float(value or 0))
    except (TypeError, ValueError, OverflowError):
        return 0


def capitalize(text: str) -> str:
    """Upper-case the first character only."""
    return text[:1].upper() + text[1:]


# Products

class ProductShape(Enum):
    LEGACY = "legacy"    # colors with per-size stock
    CURRENT = "current"  # flavors with a single quantity
    OTHER = "other"


def product_shape(product: Any) -> ProductShape:
    if isinstance(product, Mapping):
        if isinstance(product.get("colors"), list):
            return ProductShape.LEGACY
        if isinstance(product.get("flavors"), list):
            return ProductShape.CURRENT
    return ProductShape.OTHER


def available_first(flavors: List[dict]) -> List[dict]:
    """Stable partition: flavors in stock keep their order ahead of sold-out ones."""
    in_stock = [f for f in flavors if _quantity(f.get("quantity")) > 0]
    sold_out = [f for f in flavors if _quantity(f.get("quantity")) <= 0]
    return in_stock + sold_out


def _flavor(entry: Mapping, quantity: int) -> dict:
    return {
        "name": entry.get("name") or DEFAULT_FLAVOR_NAME,
        "image": entry.get("image") or PLACEHOLDER_IMAGE,
        "quantity": quantity,
        "description": entry.get("description") or "",
    }


def _color_stock(color: Mapping) -> int:
    sizes = color.get("sizes")
    if isinstance(sizes, list):
        return sum(_quantity(size.get("stock")) for size in sizes if isinstance(size, Mapping))
    return _quantity(color.get("quantity"))


def _from_colors(product: Mapping) -> dict:
    flavors = [_flavor(c, _color_stock(c)) for c in product["colors"] if isinstance(c, Mapping)]
    upgraded = {k: v for k, v in product.items() if k != "colors"}
    upgraded["flavors"] = available_first(flavors)
    return upgraded


def _from_flavors(product: Mapping) -> dict:
    entries = [f for f in product["flavors"] if isinstance(f, Mapping)]
    flavors = [_flavor(f, _quantity(f.get("quantity"))) for f in available_first(entries)]
    return {**product, "flavors": flavors}


def _unchanged(product: Any) -> Any:
    return product


_PRODUCT_CONVERTERS = {
    ProductShape.LEGACY: _from_colors,
    ProductShape.CURRENT: _from_flavors,
    ProductShape.OTHER: _unchanged,
}


def normalize_products(products: Any) -> List[Any]:
    if not isinstance(products, list):
        return []
    return [_PRODUCT_CONVERTERS[product_shape(p)](p) for p in products]


def product_from_storage(row: Mapping) -> dict:
    product = dict(row)
    if "display_order" in product:
        product["displayOrder"] = product.pop("display_order")
    return product


def product_to_storage(product: Mapping) -> dict:
    if not isinstance(product, Mapping):
        raise ValueError(f"product must be an object, got {type(product).__name__}")
    display_order = product.get("display_order", product.get("displayOrder"))
    return {
        "title": product.get("title"),
        "category": product.get("category"),
        "price": product.get("price"),
        "description": product.get("description"),
        "status": product.get("status"),
        "flavors": product.get("flavors"),
        "display_order": display_order or 0,
    }


# Categories

def normalize_categories(categories: Any) -> List[dict]:
    if not isinstance(categories, list):
        return []
    normalized = []
    for cat in categories:
        if isinstance(cat, str):
            normalized.append({
                "id": cat,
                "name": capitalize(cat),
                "description": f"Category of {cat}",
            })
        elif isinstance(cat, Mapping) and cat.get("id"):
            cat_id = cat["id"]
            name = cat.get("name") or capitalize(str(cat_id))
            normalized.append({
                "id": cat_id,
                "name": name,
                "description": cat.get("description") or f"Category of {cat.get('name') or cat_id}",
            })
    return normalized


# Orders

def _total(value: Any) -> float:
    try:
        total = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(total) or math.isinf(total):
        return 0.0
    return total


def _order_field(order: Mapping, external: str) -> Any:
    return order.get(ORDER_FIELDS[external]) or order.get(external)


def normalize_orders(orders: Any) -> List[Dict[str, Any]]:
    if not isinstance(orders, list):
        return []
    return [
        {
            "id": order.get("id"),
            "date": order.get("date"),
            "time": order.get("time"),
            "customerName": _order_field(order, "customerName"),
            "customerPhone": _order_field(order, "customerPhone"),
            "items": order["items"] if isinstance(order.get("items"), list) else [],
            "total": _total(order.get("total")),
            "paymentMethod": _order_field(order, "paymentMethod"),
            "status": order.get("status") or "pending",
            "createdAt": _order_field(order, "createdAt"),
        }
        for order in orders
        if isinstance(order, Mapping)
    ]


def order_to_storage(order: Mapping) -> dict:
    """Map a submitted order onto its storage columns."""
    return {
        "date": order.get("date"),
        "time": order.get("time"),
        "customer_name": order.get("customerName"),
        "customer_phone": order.get("customerPhone"),
        "items": order["items"] if isinstance(order.get("items"), list) else [],
        "total": _total(order.get("total")),
        "payment_method": order.get("paymentMethod"),
        "status": order.get("status") or "pending",
    }
