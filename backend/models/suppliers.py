from sqlalchemy import Column, Integer, String, Numeric
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class Supplier(Base, TimestampMixin):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    name = Column(String, nullable=False)
    phone_number = Column(String, nullable=True)
    # Opening balance: positive means we owe the supplier, negative means an advance
    balance = Column(Numeric(14, 2), default=0, nullable=False)

    # Relationships
    purchase_invoices = relationship("PurchaseInvoice", back_populates="supplier")
