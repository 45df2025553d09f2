# nursery/routes/order.py

from fastapi import APIRouter, Request, status
from typing import List
from nursery.schemas.merchant import CustomerOrderSummary, OrderDetail
from nursery.schemas.order import Order, OrderStatusUpdate, RepairResult, ValidationResult
from nursery.services.order import (
    read_customer_orders_service,
    read_order_detail_service,
    read_quotation_orders_service,
    update_order_status_service,
    validate_order_service,
    repair_order_service,
)

router = APIRouter()

# ────────────── READ ALL (покупатель) ──────────────
@router.get(
    "/",
    response_model=List[CustomerOrderSummary],
    status_code=status.HTTP_200_OK,
    summary="Заказы покупателя",
    response_description="Родительские заказы покупателя со сводным статусом, новые первыми",
    responses={
        200: {"description": "Список заказов успешно получен"},
        422: {"description": "Не передан user_id"},
        500: {"description": "Внутренняя ошибка сервера"},
    },
)
async def read_customer_orders(request: Request, user_id: str):
    try:
        return await read_customer_orders_service(user_id, request)
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при получении заказов покупателя: {str(e)}", {"user_id": user_id})
        raise


# ────────────── READ BY QUOTATION ──────────────
@router.get(
    "/quotation/{quotation_code}",
    response_model=List[Order],
    status_code=status.HTTP_200_OK,
    summary="Заказы по коммерческому предложению",
    responses={
        200: {"description": "Список заказов успешно получен"},
        500: {"description": "Внутренняя ошибка сервера"},
    },
)
async def read_quotation_orders(quotation_code: str, request: Request):
    try:
        return await read_quotation_orders_service(quotation_code, request)
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при получении заказов предложения: {str(e)}", {"quotation_code": quotation_code})
        raise


# ────────────── READ ONE ──────────────
@router.get(
    "/{id}",
    response_model=OrderDetail,
    status_code=status.HTTP_200_OK,
    summary="Получить заказ с разбивкой по продавцам",
    responses={
        200: {"description": "Заказ найден и возвращён"},
        404: {"description": "Заказ не найден"},
        500: {"description": "Внутренняя ошибка сервера"},
    },
)
async def read_order(id: str, request: Request):
    try:
        return await read_order_detail_service(id, request)
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при получении заказа: {str(e)}", {"id": id})
        raise


# ────────────── UPDATE STATUS ──────────────
@router.put(
    "/{id}/status",
    response_model=Order,
    status_code=status.HTTP_200_OK,
    summary="Изменить статус заказа",
    responses={
        200: {"description": "Статус обновлён"},
        404: {"description": "Заказ не найден"},
        422: {"description": "Неизвестный статус"},
        500: {"description": "Внутренняя ошибка сервера"},
    },
)
async def update_order_status(id: str, payload: OrderStatusUpdate, request: Request):
    try:
        return await update_order_status_service(id, payload.status, request)
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при обновлении статуса: {str(e)}", {"id": id})
        raise


# ────────────── VALIDATE ──────────────
@router.get(
    "/{id}/validate",
    response_model=ValidationResult,
    status_code=status.HTTP_200_OK,
    summary="Проверить суммы родительского заказа",
    response_description="is_valid, список ошибок и предупреждений",
)
async def validate_order(id: str, request: Request):
    return await validate_order_service(id, request)


# ────────────── REPAIR ──────────────
@router.post(
    "/{id}/repair",
    response_model=RepairResult,
    status_code=status.HTTP_200_OK,
    summary="Пересчитать subtotal позиций и заказа",
    response_description="success и сообщение о результате",
)
async def repair_order(id: str, request: Request):
    return await repair_order_service(id, request)
