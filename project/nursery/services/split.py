# nursery/services/split.py
# Разбивка родительского заказа по продавцам для отображения

import json
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Sequence

from nursery.config import settings
from nursery.exceptions import RepositoryError
from nursery.schemas.merchant import MerchantGroup, MerchantInfo, MerchantOrderView
from nursery.schemas.order import LineItem, Order, OrderItem, as_money
from nursery.utils.log import Log

UNKNOWN_PRODUCT = "Unknown Product"


# ────────────── Позиции заказа ──────────────
def _from_order_item(item: OrderItem, order: Order) -> LineItem:
    quantity = item.quantity or 1
    unit_price = item.effective_unit_price
    subtotal = item.subtotal if item.subtotal is not None else quantity * unit_price
    return LineItem(
        id=item.id,
        product_id=item.product_id,
        name=item.product_name or UNKNOWN_PRODUCT,
        image=item.product_image,
        quantity=quantity,
        unit_price=unit_price,
        subtotal=subtotal,
        quotation_id=item.quotation_id,
        merchant_code=item.merchant_code or order.merchant_code,
    )


def _from_cart_entry(entry: dict, index: int, order: Order) -> LineItem:
    """
    Позиция из старого JSON-поля cart_items.
    У позиций по коммерческому предложению price хранит сумму строки,
    у остальных цену за единицу.
    """
    quantity = int(entry.get("quantity") or 1)
    price = as_money(entry.get("price"))
    quotation_id = entry.get("quotation_id")

    if quotation_id:
        subtotal = price
        unit_price = as_money(entry.get("unit_price")) or price / quantity
    else:
        unit_price = as_money(entry.get("unit_price")) or price
        subtotal = unit_price * quantity

    product_id = entry.get("id")
    return LineItem(
        id=f"{product_id}-{index}" if product_id is not None else f"item-{index}",
        product_id=str(product_id) if product_id is not None else None,
        name=entry.get("name") or entry.get("product_name") or UNKNOWN_PRODUCT,
        image=entry.get("image") or entry.get("image_url"),
        quantity=quantity,
        unit_price=unit_price,
        subtotal=subtotal,
        quotation_id=str(quotation_id) if quotation_id else None,
        merchant_code=entry.get("merchant_code") or entry.get("selected_merchant") or order.merchant_code,
    )


async def order_line_items(order: Order, log: Optional[Log] = None) -> List[LineItem]:
    """
    Позиции заказа в едином виде. order_items главнее; если их нет,
    разбирается cart_items. Битый cart_items даёт пустой список.
    """
    if order.order_items:
        return [_from_order_item(item, order) for item in order.order_items]

    if not order.cart_items:
        return []

    try:
        entries = json.loads(order.cart_items) if isinstance(order.cart_items, str) else order.cart_items
        if isinstance(entries, dict):
            entries = [entries]
        if not isinstance(entries, list):
            raise ValueError(f"unexpected cart_items type {type(entries).__name__}")
        return [_from_cart_entry(entry, index, order) for index, entry in enumerate(entries)]
    except (ValueError, TypeError, AttributeError, InvalidOperation) as e:
        if log:
            await log.log_error("split", f"Не удалось разобрать cart_items: {e}", {"id": order.id})
        return []


# ────────────── Продавцы ──────────────
def platform_merchant_info() -> MerchantInfo:
    return MerchantInfo(
        name=settings.PLATFORM_STORE_NAME,
        email=settings.PLATFORM_STORE_EMAIL,
        phone=settings.PLATFORM_STORE_PHONE,
        address=settings.PLATFORM_STORE_ADDRESS,
    )


def placeholder_merchant_info(merchant_code: str) -> MerchantInfo:
    return MerchantInfo(name=f"Merchant {merchant_code}")


async def merchant_info_for(merchant_code: str, repo, log: Optional[Log] = None) -> MerchantInfo:
    if merchant_code in settings.PLATFORM_MERCHANT_CODES:
        return platform_merchant_info()

    try:
        merchant = await repo.lookup_merchant(merchant_code)
    except RepositoryError as e:
        if log:
            await log.log_warning("split", f"Продавец не найден: {e}", {"merchant_code": merchant_code})
        return placeholder_merchant_info(merchant_code)

    return MerchantInfo(
        name=merchant.nursery_name or merchant.full_name or f"Merchant {merchant_code}",
        email=merchant.email or "N/A",
        phone=merchant.phone_number or "N/A",
        address=merchant.nursery_address or "N/A",
    )


async def build_merchant_groups(
    children: Sequence[Order], repo, log: Optional[Log] = None
) -> List[MerchantGroup]:
    """
    Группирует дочерние заказы по merchant_code в порядке первого появления
    кода; внутри группы порядок заказов сохраняется.
    """
    grouped: Dict[str, List[Order]] = {}
    for child in children:
        grouped.setdefault(child.merchant_code or "admin", []).append(child)

    groups = []
    for merchant_code, orders in grouped.items():
        info = await merchant_info_for(merchant_code, repo, log)
        views = [
            MerchantOrderView(order=order, items=await order_line_items(order, log))
            for order in orders
        ]
        groups.append(MerchantGroup(
            merchant_code=merchant_code,
            merchant_info=info,
            orders=views,
            merchant_total=sum((as_money(order.total_amount) for order in orders), Decimal("0")),
        ))
    return groups
