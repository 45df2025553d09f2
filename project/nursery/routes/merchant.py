# nursery/routes/merchant.py

from typing import Optional
from fastapi import APIRouter, Request, status
from nursery.schemas.merchant import MerchantOrders
from nursery.schemas.order import OrderStatus
from nursery.services.order import read_merchant_orders_service

router = APIRouter()

# ────────────── READ ORDERS ──────────────
@router.get(
    "/{merchant_code}/orders",
    response_model=MerchantOrders,
    status_code=status.HTTP_200_OK,
    summary="Заказы продавца",
    response_description="Дочерние заказы продавца с позициями и статистикой по статусам",
    responses={
        200: {"description": "Заказы продавца получены"},
        422: {"description": "Неизвестный статус в фильтре"},
        500: {"description": "Внутренняя ошибка сервера"},
    },
)
async def read_merchant_orders(
    merchant_code: str,
    request: Request,
    status: Optional[OrderStatus] = None,
):
    try:
        return await read_merchant_orders_service(merchant_code, request, status)
    except Exception as e:
        await request.app.state.log.log_error("merchant", f"Ошибка при получении заказов продавца: {str(e)}", {"merchant_code": merchant_code})
        raise
