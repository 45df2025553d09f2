# nursery/schemas/merchant.py

from decimal import Decimal
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from nursery.schemas.order import LineItem, Order, StatusSummary


class Merchant(BaseModel):
    """Запись продавца из таблицы merchants."""
    id: Optional[str] = None
    merchant_code: str
    full_name: Optional[str] = None
    nursery_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    nursery_address: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class MerchantInfo(BaseModel):
    """Контакты продавца для карточки в разбивке заказа."""
    name: str
    email: str = "N/A"
    phone: str = "N/A"
    address: str = "N/A"


class MerchantOrderView(BaseModel):
    order: Order
    items: List[LineItem] = Field(default_factory=list)


class MerchantGroup(BaseModel):
    merchant_code: str
    merchant_info: MerchantInfo
    orders: List[MerchantOrderView] = Field(default_factory=list)
    merchant_total: Decimal = Decimal("0")


# ────────────── Ответы API ──────────────
class CustomerOrderSummary(BaseModel):
    order: Order
    status_summary: StatusSummary
    child_count: int = 0


class OrderDetail(BaseModel):
    order: Order
    status_summary: StatusSummary
    items: List[LineItem] = Field(default_factory=list)
    merchant_groups: List[MerchantGroup] = Field(default_factory=list)


class MerchantOrderStats(BaseModel):
    total: int = 0
    by_status: Dict[str, int] = Field(default_factory=dict)
    total_revenue: Decimal = Decimal("0")


class MerchantOrders(BaseModel):
    merchant_code: str
    stats: MerchantOrderStats
    orders: List[MerchantOrderView] = Field(default_factory=list)
