# nursery/services/status.py
# Единая таблица статусов и сведение статусов дочерних заказов к одному

from typing import Iterable, Optional, Sequence

from nursery.schemas.order import Order, OrderStatus, StatusSummary

# ────────────── Подписи и цвета бейджей ──────────────
STATUS_META = {
    OrderStatus.PENDING:    {"label": "Pending",    "color": "bg-yellow-100 text-yellow-800"},
    OrderStatus.CONFIRMED:  {"label": "Confirmed",  "color": "bg-green-100 text-green-800"},
    OrderStatus.PROCESSING: {"label": "Processing", "color": "bg-blue-100 text-blue-800"},
    OrderStatus.SHIPPED:    {"label": "Shipped",    "color": "bg-purple-100 text-purple-800"},
    OrderStatus.DELIVERED:  {"label": "Delivered",  "color": "bg-green-100 text-green-800"},
    OrderStatus.CANCELLED:  {"label": "Cancelled",  "color": "bg-red-100 text-red-800"},
}

DEFAULT_COLOR = "bg-gray-100 text-gray-800"
PARTIALLY_SHIPPED = "Partially Shipped"


def _meta(status) -> Optional[dict]:
    try:
        return STATUS_META[OrderStatus(status)]
    except ValueError:
        return None


def status_label(status) -> str:
    meta = _meta(status)
    return meta["label"] if meta else str(status)


def status_color(status) -> str:
    meta = _meta(status)
    return meta["color"] if meta else DEFAULT_COLOR


def aggregate_status(statuses: Sequence[Optional[str]]) -> str:
    """
    Сводит статусы дочерних заказов к одному. Первое совпадение побеждает:
    нет детей → pending; один общий статус → он; все delivered → delivered;
    есть shipped → shipped; есть processing → processing;
    есть confirmed → confirmed; иначе pending.

    Для cancelled отдельного правила нет: [delivered, cancelled] → pending.
    """
    statuses = [s or OrderStatus.PENDING.value for s in statuses]
    if not statuses:
        return OrderStatus.PENDING.value

    unique = set(statuses)
    if len(unique) == 1:
        return statuses[0]

    if all(s == OrderStatus.DELIVERED.value for s in statuses):
        return OrderStatus.DELIVERED.value
    for status in (OrderStatus.SHIPPED, OrderStatus.PROCESSING, OrderStatus.CONFIRMED):
        if status.value in unique:
            return status.value
    return OrderStatus.PENDING.value


def summarize_statuses(statuses: Iterable[Optional[str]]) -> StatusSummary:
    # пустой статус считается pending
    statuses = [s or OrderStatus.PENDING.value for s in statuses]
    status = aggregate_status(statuses)
    is_mixed = len(set(statuses)) > 1

    if is_mixed and status == OrderStatus.SHIPPED.value:
        label = PARTIALLY_SHIPPED
    else:
        label = status_label(status)

    return StatusSummary(
        status=status,
        label=label,
        is_mixed=is_mixed,
        cancelled_count=sum(1 for s in statuses if s == OrderStatus.CANCELLED.value),
    )


def summarize_order(order: Order, children: Sequence[Order]) -> StatusSummary:
    """Статус по дочерним заказам, а без них по собственному статусу заказа."""
    if children:
        return summarize_statuses([child.status for child in children])
    return summarize_statuses([order.status or OrderStatus.PENDING.value])
