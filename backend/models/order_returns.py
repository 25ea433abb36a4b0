from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin


class ReturnType(str, enum.Enum):
    CUSTOMER_FULL = "CUSTOMER_FULL"
    CUSTOMER_PARTIAL = "CUSTOMER_PARTIAL"
    SUPPLIER = "SUPPLIER"


class ReturnStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REFUNDED = "REFUNDED"
    REJECTED = "REJECTED"
    PROCESSED = "PROCESSED"  # supplier returns post on creation


class ShippingChargeHandling(str, enum.Enum):
    FULL_REFUND = "FULL_REFUND"      # shipping is refunded along with the products
    CUSTOMER_PAYS = "CUSTOMER_PAYS"  # shipping is kept out of the refund


class RefundMethod(str, enum.Enum):
    CASH = "Cash"
    BANK_TRANSFER = "Bank Transfer"
    CREDIT_TO_ACCOUNT = "Credit to Account"


class SupplierReturnHandling(str, enum.Enum):
    REDUCE_AP = "REDUCE_AP"  # supplier credits what we owe them
    REFUND = "REFUND"        # supplier pays the value back


class OrderReturn(Base, TimestampMixin):
    """Goods coming back from a customer order, or going back to a supplier."""
    __tablename__ = "order_returns"
    __table_args__ = (UniqueConstraint('tenant_id', 'return_number', name='_tenant_return_number_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    return_number = Column(String, nullable=False)
    return_type = Column(Enum(ReturnType), nullable=False)
    status = Column(Enum(ReturnStatus), default=ReturnStatus.PENDING, nullable=False)
    return_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=True)
    # Value of the return: the refund owed to a customer, or the goods sent to a supplier
    total_amount = Column(Numeric(14, 2), default=0, nullable=False)

    # Customer side
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True, index=True)
    shipping_charge_handling = Column(Enum(ShippingChargeHandling), nullable=True)
    shipping_charge_amount = Column(Numeric(14, 2), default=0, nullable=False)
    refund_method = Column(Enum(RefundMethod), nullable=True)
    refunded_amount = Column(Numeric(14, 2), default=0, nullable=False)

    # Supplier side
    purchase_invoice_id = Column(Integer, ForeignKey("purchase_invoices.id"), nullable=True, index=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=True, index=True)
    handling_method = Column(Enum(SupplierReturnHandling), nullable=True)
    refund_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)

    # Relationships
    order = relationship("Order")
    items = relationship("OrderReturnItem", back_populates="order_return", cascade="all, delete-orphan")


class OrderReturnItem(Base):
    __tablename__ = "order_return_items"

    id = Column(Integer, primary_key=True, index=True)
    order_return_id = Column(Integer, ForeignKey("order_returns.id"), nullable=False, index=True)
    order_item_id = Column(Integer, ForeignKey("order_items.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(14, 2), nullable=False)

    # Relationships
    order_return = relationship("OrderReturn", back_populates="items")
    order_item = relationship("OrderItem")
