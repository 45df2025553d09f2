# nursery/services/order.py

from decimal import Decimal
from typing import List, Optional

from fastapi import HTTPException, Request

from nursery.exceptions import NotFoundError
from nursery.schemas.merchant import (
    CustomerOrderSummary,
    MerchantOrderStats,
    MerchantOrderView,
    MerchantOrders,
    OrderDetail,
)
from nursery.schemas.order import Order, OrderStatus, RepairResult, ValidationResult, as_money
from nursery.services.repair import fix_order_subtotals
from nursery.services.repository import OrderRepository
from nursery.services.split import build_merchant_groups, order_line_items
from nursery.services.status import summarize_order
from nursery.services.validation import validate_order_structure


def get_repository(request: Request) -> OrderRepository:
    return OrderRepository(request.state.db)


async def read_customer_orders_service(user_id: str, request: Request) -> List[CustomerOrderSummary]:
    """
    Родительские заказы покупателя (новые первыми) со сводным статусом.
    """
    repo = get_repository(request)
    log = request.app.state.log

    summaries = []
    for order in await repo.list_parent_orders(user_id):
        children = await repo.fetch_children(order.id)
        summaries.append(CustomerOrderSummary(
            order=order,
            status_summary=summarize_order(order, children),
            child_count=len(children),
        ))

    await log.log_info("order", f"{len(summaries)} заказов покупателя загружено", {"user_id": user_id})
    return summaries


async def read_order_detail_service(id: str, request: Request) -> OrderDetail:
    """
    Заказ с разбивкой дочерних заказов по продавцам.
    """
    repo = get_repository(request)
    log = request.app.state.log

    try:
        order = await repo.fetch_order(id)
    except NotFoundError:
        await log.log_error("order", "Заказ не найден", {"id": id})
        raise HTTPException(status_code=404, detail="Order not found")

    children = await repo.fetch_children(id) if order.is_parent else []

    detail = OrderDetail(
        order=order,
        status_summary=summarize_order(order, children),
        items=await order_line_items(order, log),
        merchant_groups=await build_merchant_groups(children, repo, log),
    )

    await log.log_info("order", "Заказ загружен", {"id": id, "children": len(children)})
    return detail


async def update_order_status_service(id: str, status: OrderStatus, request: Request) -> Order:
    """
    Запись статуса одного заказа. Допустим любой статус, переходы не проверяются.
    """
    repo = get_repository(request)
    log = request.app.state.log

    try:
        order = await repo.update_order_status(id, status.value)
    except NotFoundError:
        await log.log_error("order", "Заказ не найден для смены статуса", {"id": id})
        raise HTTPException(status_code=404, detail="Order not found")

    await log.log_info("order", "Статус заказа обновлён", {"id": id, "status": status.value})
    return order


async def validate_order_service(id: str, request: Request) -> ValidationResult:
    return await validate_order_structure(id, get_repository(request), request.app.state.log)


async def repair_order_service(id: str, request: Request) -> RepairResult:
    return await fix_order_subtotals(id, get_repository(request), request.app.state.log)


async def read_quotation_orders_service(quotation_code: str, request: Request) -> List[Order]:
    repo = get_repository(request)
    orders = await repo.list_quotation_orders(quotation_code)
    await request.app.state.log.log_info(
        "order", "Заказы по коммерческому предложению загружены",
        {"quotation_code": quotation_code, "count": len(orders)},
    )
    return orders


def merchant_order_stats(orders: List[Order]) -> MerchantOrderStats:
    by_status = {status.value: 0 for status in OrderStatus}
    for order in orders:
        if order.status:
            by_status[order.status] = by_status.get(order.status, 0) + 1
    return MerchantOrderStats(
        total=len(orders),
        by_status=by_status,
        total_revenue=sum((as_money(order.total_amount) for order in orders), Decimal("0")),
    )


async def read_merchant_orders_service(
    merchant_code: str, request: Request, status: Optional[OrderStatus] = None
) -> MerchantOrders:
    """
    Дочерние заказы продавца с позициями и статистикой.
    Статистика считается по всем заказам, фильтр статуса влияет только на список.
    """
    repo = get_repository(request)
    log = request.app.state.log

    merchant_id = None
    try:
        merchant_id = (await repo.lookup_merchant(merchant_code)).id
    except NotFoundError:
        await log.log_warning("merchant", "Продавец не найден, поиск только по коду", {"merchant_code": merchant_code})

    orders = await repo.list_merchant_orders(merchant_code, merchant_id)
    stats = merchant_order_stats(orders)

    if status is not None:
        orders = [order for order in orders if order.status == status.value]

    views = [MerchantOrderView(order=order, items=await order_line_items(order, log)) for order in orders]

    await log.log_info("merchant", "Заказы продавца загружены", {
        "merchant_code": merchant_code,
        "count": len(views),
    })
    return MerchantOrders(merchant_code=merchant_code, stats=stats, orders=views)
