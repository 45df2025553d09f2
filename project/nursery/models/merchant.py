# nursery/models/merchant.py

import uuid
from sqlalchemy import Column, String
from nursery.utils.database import Base

class Merchant(Base):
    __tablename__ = "merchants"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    merchant_code   = Column(String, unique=True, nullable=False, index=True)  # Код продавца
    full_name       = Column(String, nullable=True)                            # ФИО владельца
    nursery_name    = Column(String, nullable=True)                            # Название питомника
    email           = Column(String, nullable=True)
    phone_number    = Column(String, nullable=True)
    nursery_address = Column(String, nullable=True)
