# nursery/schemas/order.py

from enum import Enum
from decimal import Decimal
from datetime import datetime
from typing import Any, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


def as_money(value) -> Decimal:
    """Сумма как Decimal; None и пустые значения считаются нулём."""
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# ────────────── Адрес доставки ──────────────
class DeliveryAddress(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    type: Optional[str] = None


# ────────────── Позиция заказа ──────────────
class OrderItem(BaseModel):
    id: str
    order_id: Optional[str] = None
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    product_image: Optional[str] = None
    quantity: Optional[int] = None
    unit_price: Optional[Decimal] = None
    price: Optional[Decimal] = None          # устаревшее поле, если unit_price пуст
    subtotal: Optional[Decimal] = None
    merchant_code: Optional[str] = None
    quotation_id: Optional[str] = None
    variety: Optional[str] = None
    size: Optional[str] = None
    is_grafted: Optional[bool] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def effective_unit_price(self) -> Decimal:
        if self.unit_price is not None:
            return self.unit_price
        return as_money(self.price)

    @property
    def expected_subtotal(self) -> Decimal:
        return (self.quantity or 0) * self.effective_unit_price


# ────────────── Заказ ──────────────
class OrderBase(BaseModel):
    order_code: str
    parent_order_id: Optional[str] = None
    merchant_code: Optional[str] = None
    merchant_id: Optional[str] = None
    user_id: Optional[str] = None
    total_amount: Optional[Decimal] = None
    subtotal: Optional[Decimal] = None
    status: Optional[str] = OrderStatus.PENDING.value
    cart_items: Optional[Any] = None          # JSON-строка или список (старый формат)
    delivery_address: Optional[Union[DeliveryAddress, str]] = None
    quotation_code: Optional[str] = None


class Order(OrderBase):
    id: str
    created_at: Optional[datetime] = None
    order_items: List[OrderItem] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_parent(self) -> bool:
        return self.parent_order_id is None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


# ────────────── Результаты проверки и исправления ──────────────
class ValidationResult(BaseModel):
    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class RepairResult(BaseModel):
    success: bool
    message: str


# ────────────── Сводный статус ──────────────
class StatusSummary(BaseModel):
    status: str
    label: str
    is_mixed: bool = False
    cancelled_count: int = 0


# ────────────── Позиция для отображения ──────────────
class LineItem(BaseModel):
    id: str
    product_id: Optional[str] = None
    name: str
    image: Optional[str] = None
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    quotation_id: Optional[str] = None
    merchant_code: Optional[str] = None
