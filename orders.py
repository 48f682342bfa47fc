"""
Order lifecycle

Orders start as ``pending``. Revenue and the completed-orders counter in
``analytics`` move only when an order enters or leaves ``completed``;
creating an order leaves them untouched.
"""
import logging
from typing import Any, Dict, Iterable

from errors import ValidationError

logger = logging.getLogger(__name__)

PENDING = "pending"
COMPLETED = "completed"
CANCELLED = "cancelled"
ORDER_STATUSES = (PENDING, COMPLETED, CANCELLED)


def line_total(item: Dict[str, Any]) -> float:
    # "PRV" and other non-numeric prices count as 0
    try:
        return float(item.get("price", 0)) * int(item.get("quantity", 1))
    except (TypeError, ValueError):
        return 0.0


def compute_total(items: Iterable[Dict[str, Any]]) -> float:
    return round(sum(line_total(item) for item in items), 2)


def apply_status_change(analytics: Dict[str, Any], order: Dict[str, Any], new_status: str) -> str:
    """Set ``order['status']`` and adjust ``analytics`` in place.

    Returns the previous status. Counters never go below zero, and a
    transition to the status the order already has changes nothing.
    """
    if new_status not in ORDER_STATUSES:
        raise ValidationError(f"Invalid order status: {new_status}")

    old_status = order.get("status", PENDING)
    total = float(order.get("total") or 0)
    orders_count = analytics.get("ordersCount", 0)
    revenue = analytics.get("revenue", 0)

    if new_status == COMPLETED and old_status != COMPLETED:
        analytics["ordersCount"] = orders_count + 1
        analytics["revenue"] = round(revenue + total, 2)
    elif old_status == COMPLETED and new_status != COMPLETED:
        analytics["ordersCount"] = max(0, orders_count - 1)
        analytics["revenue"] = max(0, round(revenue - total, 2))

    order["status"] = new_status
    if old_status != new_status:
        logger.info(f"Order {order.get('id')} status {old_status} -> {new_status}")
    return old_status
