# nursery/models/order.py

import uuid
from sqlalchemy import Column, String, Text, DateTime, Numeric, Integer, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from nursery.utils.database import Base


def new_id() -> str:
    return str(uuid.uuid4())


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=new_id)

    order_code      = Column(String, unique=True, nullable=False)            # Номер заказа для покупателя
    parent_order_id = Column(String(36), ForeignKey("orders.id"), nullable=True, index=True)  # NULL → родительский заказ
    merchant_code   = Column(String, nullable=True, index=True)              # Продавец (admin/parent у родителя)
    merchant_id     = Column(String(36), nullable=True, index=True)
    user_id         = Column(String(36), nullable=True, index=True)          # Покупатель
    total_amount    = Column(Numeric(14, 4), nullable=True)                  # Итог
    subtotal        = Column(Numeric(14, 4), nullable=True)                  # Дублирует total_amount
    status          = Column(String, nullable=True, default="pending")       # Статус
    cart_items      = Column(Text, nullable=True)                            # Старый формат: JSON-строка позиций
    delivery_address = Column(JSON, nullable=True)                           # Адрес (объект или строка)
    quotation_code  = Column(String, nullable=True, index=True)              # Общее коммерческое предложение
    created_at      = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    order_items = relationship(
        "OrderItem",
        back_populates="order",
        order_by="OrderItem.position",
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=new_id)

    order_id      = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)
    position      = Column(Integer, nullable=False, default=0)   # Порядок позиции в заказе
    product_id    = Column(String, nullable=True)
    product_name  = Column(String, nullable=True)
    product_image = Column(String, nullable=True)
    quantity      = Column(Integer, nullable=True)
    unit_price    = Column(Numeric(14, 4), nullable=True)        # Цена за единицу
    price         = Column(Numeric(14, 4), nullable=True)        # Устаревшее поле цены
    subtotal      = Column(Numeric(14, 4), nullable=True)        # quantity * unit_price
    merchant_code = Column(String, nullable=True)
    quotation_id  = Column(String, nullable=True)

    # Описание растения (только для отображения)
    variety    = Column(String, nullable=True)
    size       = Column(String, nullable=True)
    is_grafted = Column(Boolean, nullable=True)

    order = relationship("Order", back_populates="order_items")
