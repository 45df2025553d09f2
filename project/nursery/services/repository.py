# nursery/services/repository.py

from decimal import Decimal
from typing import List

from sqlalchemy import or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from nursery.exceptions import (
    MerchantNotFoundError,
    OrderItemNotFoundError,
    OrderNotFoundError,
    RepositoryError,
)
from nursery.models.merchant import Merchant as MerchantModel
from nursery.models.order import Order as OrderModel, OrderItem as OrderItemModel
from nursery.schemas.merchant import Merchant
from nursery.schemas.order import Order, OrderItem


class OrderRepository:
    """
    Доступ к таблицам orders / order_items / merchants.

    Возвращает pydantic-схемы (а не ORM-объекты), чтобы ядро не зависело
    от сессии. Любая ошибка драйвера превращается в RepositoryError.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    def _orders(self):
        return select(OrderModel).options(selectinload(OrderModel.order_items))

    async def _scalars(self, stmt) -> list:
        # после точечных update объекты в сессии могут быть устаревшими
        stmt = stmt.execution_options(populate_existing=True)
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise RepositoryError(str(e)) from e
        return list(result.scalars().all())

    async def _write(self, stmt) -> int:
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise RepositoryError(str(e)) from e
        return result.rowcount

    # ────────────── Чтение ──────────────
    async def fetch_order(self, order_id: str) -> Order:
        rows = await self._scalars(self._orders().where(OrderModel.id == order_id))
        if not rows:
            raise OrderNotFoundError(order_id)
        return Order.model_validate(rows[0])

    async def fetch_children(self, parent_id: str) -> List[Order]:
        stmt = (
            self._orders()
            .where(OrderModel.parent_order_id == parent_id)
            .order_by(OrderModel.created_at.asc(), OrderModel.order_code.asc())
        )
        return [Order.model_validate(row) for row in await self._scalars(stmt)]

    async def fetch_items(self, order_id: str) -> List[OrderItem]:
        stmt = (
            select(OrderItemModel)
            .where(OrderItemModel.order_id == order_id)
            .order_by(OrderItemModel.position.asc())
        )
        return [OrderItem.model_validate(row) for row in await self._scalars(stmt)]

    async def lookup_merchant(self, merchant_code: str) -> Merchant:
        rows = await self._scalars(
            select(MerchantModel).where(MerchantModel.merchant_code == merchant_code)
        )
        if not rows:
            raise MerchantNotFoundError(merchant_code)
        return Merchant.model_validate(rows[0])

    async def list_parent_orders(self, user_id: str) -> List[Order]:
        """Родительские заказы покупателя, новые первыми."""
        stmt = (
            self._orders()
            .where(OrderModel.user_id == user_id, OrderModel.parent_order_id.is_(None))
            .order_by(OrderModel.created_at.desc())
        )
        return [Order.model_validate(row) for row in await self._scalars(stmt)]

    async def list_merchant_orders(self, merchant_code: str, merchant_id: str | None = None) -> List[Order]:
        """Дочерние заказы продавца по коду или id продавца, новые первыми."""
        match = OrderModel.merchant_code == merchant_code
        if merchant_id:
            match = or_(match, OrderModel.merchant_id == merchant_id)
        stmt = (
            self._orders()
            .where(match, OrderModel.parent_order_id.is_not(None))
            .order_by(OrderModel.created_at.desc())
        )
        return [Order.model_validate(row) for row in await self._scalars(stmt)]

    async def list_quotation_orders(self, quotation_code: str) -> List[Order]:
        stmt = (
            self._orders()
            .where(OrderModel.quotation_code == quotation_code)
            .order_by(OrderModel.created_at.desc())
        )
        return [Order.model_validate(row) for row in await self._scalars(stmt)]

    # ────────────── Запись ──────────────
    async def update_item_subtotal(self, item_id: str, value: Decimal) -> None:
        stmt = update(OrderItemModel).where(OrderItemModel.id == item_id).values(subtotal=value)
        if await self._write(stmt) == 0:
            raise OrderItemNotFoundError(item_id)

    async def update_order_subtotal(self, order_id: str, value: Decimal) -> None:
        stmt = update(OrderModel).where(OrderModel.id == order_id).values(subtotal=value)
        if await self._write(stmt) == 0:
            raise OrderNotFoundError(order_id)

    async def update_order_status(self, order_id: str, status: str) -> Order:
        stmt = update(OrderModel).where(OrderModel.id == order_id).values(status=status)
        if await self._write(stmt) == 0:
            raise OrderNotFoundError(order_id)
        return await self.fetch_order(order_id)
