# nursery/services/validation.py
# Проверка сумм в связке «родительский заказ → дочерние заказы → позиции»

from decimal import Decimal
from typing import Iterable, List, Optional

from nursery.config import settings
from nursery.exceptions import NotFoundError, RepositoryError
from nursery.schemas.order import Order, OrderItem, ValidationResult, as_money
from nursery.utils.log import Log


def _result(errors: List[str], warnings: Optional[List[str]] = None) -> ValidationResult:
    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings or [])


def _exceeds(a: Decimal, b: Decimal, tolerance: Decimal) -> bool:
    return abs(a - b) > tolerance


def check_parent_totals(
    parent: Order, children: Iterable[Order], tolerance: Decimal | None = None
) -> List[str]:
    """
    total_amount родителя должен совпадать с суммой subtotal дочерних заказов,
    а subtotal родителя с его total_amount.
    """
    tolerance = settings.TOTALS_TOLERANCE if tolerance is None else tolerance
    errors = []

    child_sum = sum((as_money(child.subtotal) for child in children), Decimal("0"))
    parent_total = as_money(parent.total_amount)
    parent_subtotal = as_money(parent.subtotal)

    if _exceeds(parent_total, child_sum, tolerance):
        errors.append(
            f"Parent order total ({parent_total}) does not match sum of child subtotals ({child_sum})"
        )
    if _exceeds(parent_subtotal, parent_total, tolerance):
        errors.append(
            f"Parent order subtotal ({parent_subtotal}) does not match total_amount ({parent_total})"
        )
    return errors


def check_item_subtotals(items: Iterable[OrderItem], tolerance: Decimal | None = None) -> List[str]:
    """subtotal каждой позиции равен quantity * unit_price (или price)."""
    tolerance = settings.TOTALS_TOLERANCE if tolerance is None else tolerance
    errors = []
    for item in items:
        expected = item.expected_subtotal
        actual = as_money(item.subtotal)
        if _exceeds(expected, actual, tolerance):
            errors.append(f"Order item {item.id}: expected subtotal {expected}, got {actual}")
    return errors


async def _load_parent(parent_order_id: str, repo, errors: List[str]) -> Optional[Order]:
    try:
        parent = await repo.fetch_order(parent_order_id)
    except NotFoundError:
        errors.append(f"Parent order {parent_order_id} not found")
        return None
    except RepositoryError as e:
        errors.append(f"Failed to fetch parent order: {e}")
        return None

    if not parent.is_parent:
        errors.append(f"Order {parent_order_id} is not a parent order")
        return None
    return parent


async def _load_children(parent_order_id: str, repo, errors: List[str]) -> Optional[List[Order]]:
    try:
        return await repo.fetch_children(parent_order_id)
    except RepositoryError as e:
        errors.append(f"Failed to fetch child orders: {e}")
        return None


async def _report(log: Optional[Log], target_id: str, check: str, result: ValidationResult):
    if log is None:
        return
    data = {"id": target_id, "check": check, "errors": result.errors}
    if result.is_valid:
        await log.log_info("validation", "Суммы заказа согласованы", data)
    else:
        await log.log_warning("validation", "Найдены расхождения в суммах заказа", data)


async def validate_parent_order_totals(parent_order_id: str, repo, log: Optional[Log] = None) -> ValidationResult:
    """Проверка I1/I2 для одного родительского заказа."""
    errors: List[str] = []
    try:
        parent = await _load_parent(parent_order_id, repo, errors)
        if parent is not None:
            children = await _load_children(parent_order_id, repo, errors)
            if children is not None:
                errors.extend(check_parent_totals(parent, children))
    except Exception as e:
        if log:
            await log.log_error("validation", f"Ошибка проверки заказа: {e}", {"id": parent_order_id})
        errors.append(f"Validation error: {e}")

    result = _result(errors)
    await _report(log, parent_order_id, "parent_totals", result)
    return result


async def validate_order_items_subtotals(order_id: str, repo, log: Optional[Log] = None) -> ValidationResult:
    """Проверка I3 для позиций одного заказа (родительского или дочернего)."""
    errors: List[str] = []
    try:
        items = await repo.fetch_items(order_id)
        errors.extend(check_item_subtotals(items))
    except RepositoryError as e:
        errors.append(f"Failed to fetch order items: {e}")
    except Exception as e:
        if log:
            await log.log_error("validation", f"Ошибка проверки позиций: {e}", {"id": order_id})
        errors.append(f"Validation error: {e}")

    result = _result(errors)
    await _report(log, order_id, "item_subtotals", result)
    return result


async def validate_order_structure(parent_order_id: str, repo, log: Optional[Log] = None) -> ValidationResult:
    """
    Полная проверка родительского заказа.

    Расхождения копятся все сразу; сбой чтения из хранилища останавливает
    проверку и попадает в errors одной записью. Позиции дочерних заказов
    читаются последовательно, по одному запросу на заказ.
    """
    errors: List[str] = []
    try:
        parent = await _load_parent(parent_order_id, repo, errors)
        if parent is not None:
            children = await _load_children(parent_order_id, repo, errors)
            if children is not None:
                errors.extend(check_parent_totals(parent, children))

                for child in children:
                    try:
                        items = await repo.fetch_items(child.id)
                    except RepositoryError as e:
                        errors.append(f"Failed to fetch order items for {child.id}: {e}")
                        break
                    errors.extend(check_item_subtotals(items))
    except Exception as e:
        if log:
            await log.log_error("validation", f"Ошибка проверки структуры заказа: {e}", {"id": parent_order_id})
        errors.append(f"Validation error: {e}")

    result = _result(errors)
    await _report(log, parent_order_id, "structure", result)
    return result
