# nursery/services/repair.py

from decimal import Decimal
from typing import Optional

from nursery.exceptions import RepositoryError
from nursery.schemas.order import RepairResult
from nursery.utils.log import Log


async def _fail(log: Optional[Log], order_id: str, message: str) -> RepairResult:
    if log:
        await log.log_error("repair", message, {"id": order_id})
    return RepairResult(success=False, message=message)


async def fix_order_subtotals(order_id: str, repo, log: Optional[Log] = None) -> RepairResult:
    """
    Пересчитывает subtotal позиций заказа (quantity * unit_price) и subtotal
    самого заказа как сумму исправленных позиций.

    Работает только с одним заказом: total_amount и родительский заказ
    не трогает. Записи не атомарны, при первой ошибке работа прекращается.
    """
    try:
        try:
            items = await repo.fetch_items(order_id)
        except RepositoryError as e:
            return await _fail(log, order_id, f"Failed to fetch order items: {e}")

        order_subtotal = Decimal("0")
        for item in items:
            correct_subtotal = item.expected_subtotal
            try:
                await repo.update_item_subtotal(item.id, correct_subtotal)
            except RepositoryError as e:
                return await _fail(log, order_id, f"Failed to update order item {item.id}: {e}")
            order_subtotal += correct_subtotal

        try:
            await repo.update_order_subtotal(order_id, order_subtotal)
        except RepositoryError as e:
            return await _fail(log, order_id, f"Failed to update order subtotal: {e}")

    except Exception as e:
        return await _fail(log, order_id, f"Error fixing subtotals: {e}")

    if log:
        await log.log_info("repair", "Суммы заказа пересчитаны", {
            "id": order_id,
            "items": len(items),
            "subtotal": order_subtotal,
        })
    return RepairResult(success=True, message="Order subtotals fixed successfully")
