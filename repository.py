"""
Collection operations over the store document.

Reads return plain dicts (camelCase keys, as stored). Every mutation runs
inside ``db.transaction()`` so it either lands in full or not at all.
"""
import logging
from typing import Any, Dict, List

from database import db, next_id, now_iso
from errors import NotFound, ValidationError
from orders import COMPLETED, PENDING, apply_status_change, compute_total

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = ("name", "description", "price", "currency", "category", "status", "images")


def find_index(items: List[Dict[str, Any]], item_id: int, label: str) -> int:
    for index, item in enumerate(items):
        if item.get("id") == item_id:
            return index
    raise NotFound(f"{label} not found")


def merge_settings(current: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    """Top-level merge; nested objects such as contact/social merge key by key.

    A null sent for a nested object leaves the stored object in place.
    """
    merged = dict(current)
    for key, value in changes.items():
        if value is None and isinstance(merged.get(key), dict):
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def public_profile(user: Dict[str, Any]) -> Dict[str, Any]:
    return {"name": user.get("name"), "role": user.get("role"), "avatar": user.get("avatar")}


# Settings & profile

def get_settings() -> Dict[str, Any]:
    return db.read()["settings"]


def update_settings(changes: Dict[str, Any]) -> Dict[str, Any]:
    with db.transaction() as data:
        data["settings"] = merge_settings(data["settings"], changes)
        return data["settings"]


def get_profile() -> Dict[str, Any]:
    return public_profile(db.read()["user"])


# Categories

def list_categories() -> List[Dict[str, Any]]:
    return db.read()["categories"]


def add_category(name: str, description: str = "") -> Dict[str, Any]:
    if not name or not name.strip():
        raise ValidationError("Category name is required")
    with db.transaction() as data:
        category = {
            "id": next_id(data["categories"]),
            "name": name,
            "description": description or "",
            "createdAt": now_iso(),
        }
        data["categories"].append(category)
    return category


def update_category(category_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
    if "name" in fields and not fields["name"]:
        raise ValidationError("Category name is required")
    with db.transaction() as data:
        index = find_index(data["categories"], category_id, "Category")
        category = data["categories"][index]
        for key in ("name", "description"):
            if fields.get(key) is not None:
                category[key] = fields[key]
        category["updatedAt"] = now_iso()
    return category


def delete_category(category_id: int) -> None:
    with db.transaction() as data:
        index = find_index(data["categories"], category_id, "Category")
        del data["categories"][index]


# Products

def list_products() -> List[Dict[str, Any]]:
    return db.read()["products"]


def get_product(product_id: int) -> Dict[str, Any]:
    products = db.read()["products"]
    return products[find_index(products, product_id, "Product")]


def add_product(fields: Dict[str, Any]) -> Dict[str, Any]:
    if not fields.get("name"):
        raise ValidationError("Product name is required")
    if fields.get("price") is None:
        raise ValidationError("Product price is required")
    with db.transaction() as data:
        stamp = now_iso()
        product = {
            "id": next_id(data["products"]),
            "name": fields["name"],
            "description": fields.get("description") or "",
            "price": fields["price"],
            "currency": fields.get("currency") or "DA",
            "category": fields.get("category") or "",
            "status": fields.get("status", True),
            "images": list(fields.get("images") or []),
            "createdAt": stamp,
            "updatedAt": stamp,
        }
        data["products"].append(product)
    return product


def update_product(product_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
    if "name" in fields and not fields["name"]:
        raise ValidationError("Product name is required")
    with db.transaction() as data:
        index = find_index(data["products"], product_id, "Product")
        product = data["products"][index]
        for key in PRODUCT_FIELDS:
            if fields.get(key) is not None:
                product[key] = fields[key]
        product["updatedAt"] = now_iso()
    return product


def delete_product(product_id: int) -> None:
    with db.transaction() as data:
        index = find_index(data["products"], product_id, "Product")
        del data["products"][index]


# Orders

def list_orders() -> List[Dict[str, Any]]:
    return db.read()["orders"]


def get_order(order_id: int) -> Dict[str, Any]:
    orders = db.read()["orders"]
    return orders[find_index(orders, order_id, "Order")]


def create_order(fields: Dict[str, Any]) -> Dict[str, Any]:
    for key in ("customerName", "phone"):
        if not fields.get(key):
            raise ValidationError(f"{key} is required")
    items = list(fields.get("items") or [])
    total = fields.get("total")
    if total is None:
        total = compute_total(items)
    with db.transaction() as data:
        stamp = now_iso()
        order = {
            "id": next_id(data["orders"]),
            "items": items,
            "customerName": fields["customerName"],
            "phone": fields["phone"],
            "description": fields.get("description") or "",
            "status": PENDING,
            "total": total,
            "createdAt": stamp,
            "updatedAt": stamp,
        }
        data["orders"].append(order)
    logger.info(f"Order {order['id']} created for {order['customerName']} (total {total})")
    return order


def update_order_status(order_id: int, status: str) -> Dict[str, Any]:
    with db.transaction() as data:
        index = find_index(data["orders"], order_id, "Order")
        order = data["orders"][index]
        apply_status_change(data["analytics"], order, status)
        order["updatedAt"] = now_iso()
    return order


# Analytics

def track_visitor() -> None:
    with db.transaction() as data:
        data["analytics"]["visitors"] = data["analytics"].get("visitors", 0) + 1


def get_analytics() -> Dict[str, Any]:
    return db.read()["analytics"]


def dashboard_stats() -> Dict[str, Any]:
    data = db.read()
    analytics = data["analytics"]
    return {
        "orders": sum(1 for order in data["orders"] if order.get("status") == COMPLETED),
        "products": len(data["products"]),
        "visitors": analytics.get("visitors", 0),
        "revenue": analytics.get("revenue", 0),
    }
