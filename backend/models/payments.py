from sqlalchemy import Column, Integer, Numeric, Date, String, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin


class PaymentType(str, enum.Enum):
    CUSTOMER_PAYMENT = "CUSTOMER_PAYMENT"
    SUPPLIER_PAYMENT = "SUPPLIER_PAYMENT"
    REFUND = "REFUND"


class Payment(Base, TimestampMixin):
    __tablename__ = "payments"
    __table_args__ = (UniqueConstraint('tenant_id', 'payment_number', name='_tenant_payment_number_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    payment_number = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    type = Column(Enum(PaymentType), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    payment_method = Column(String, nullable=True)  # e.g., "Cash", "Bank Transfer", "Cheque"
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    # NULL until the payment is verified and posted to the ledger
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True, index=True)
    purchase_invoice_id = Column(Integer, ForeignKey("purchase_invoices.id"), nullable=True, index=True)

    # Relationships
    account = relationship("Account")
    transaction = relationship("Transaction")
