from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    DISPATCHED = "DISPATCHED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class CodFeePaidBy(str, enum.Enum):
    CUSTOMER = "CUSTOMER"
    BUSINESS = "BUSINESS"


class Order(Base, TimestampMixin):
    __tablename__ = "orders"
    __table_args__ = (UniqueConstraint('tenant_id', 'order_number', name='_tenant_order_number_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    order_number = Column(String, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)
    status = Column(Enum(OrderStatus), default=OrderStatus.PENDING, nullable=False)
    city = Column(String, nullable=True)
    shipping_charges = Column(Numeric(14, 2), default=0, nullable=False)
    payment_amount = Column(Numeric(14, 2), default=0, nullable=False)
    # Part of payment_amount that came out of the customer's advance
    advance_applied = Column(Numeric(14, 2), default=0, nullable=False)
    refund_amount = Column(Numeric(14, 2), default=0, nullable=False)
    cod_amount = Column(Numeric(14, 2), default=0, nullable=False)
    cod_fee = Column(Numeric(14, 2), default=0, nullable=False)
    cod_fee_paid_by = Column(Enum(CodFeePaidBy), nullable=True)
    logistics_company_id = Column(Integer, ForeignKey("logistics_companies.id"), nullable=True)

    # Relationships
    customer = relationship("Customer", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    logistics_company = relationship("LogisticsCompany")


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Numeric(14, 2), nullable=False, default=0)

    # Relationships
    order = relationship("Order", back_populates="items")
    product = relationship("Product")
