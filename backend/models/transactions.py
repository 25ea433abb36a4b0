from sqlalchemy import Column, Integer, String, Date, Numeric, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class Transaction(Base, TimestampMixin):
    __tablename__ = "transactions"
    __table_args__ = (UniqueConstraint('tenant_id', 'transaction_number', name='_tenant_transaction_number_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    transaction_number = Column(String(50), nullable=False)
    date = Column(Date, nullable=False, index=True)
    description = Column(String, nullable=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True, index=True)
    purchase_invoice_id = Column(Integer, ForeignKey("purchase_invoices.id"), nullable=True)
    order_return_id = Column(Integer, ForeignKey("order_returns.id"), nullable=True, index=True)

    # Relationships
    lines = relationship("TransactionLine", back_populates="transaction", order_by="TransactionLine.id")


class TransactionLine(Base):
    __tablename__ = "transaction_lines"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    debit_amount = Column(Numeric(14, 2), CheckConstraint('debit_amount >= 0'), nullable=False, default=0)
    credit_amount = Column(Numeric(14, 2), CheckConstraint('credit_amount >= 0'), nullable=False, default=0)

    # Relationships
    transaction = relationship("Transaction", back_populates="lines")
    account = relationship("Account")

    @property
    def account_code(self):
        return self.account.code if self.account else None

    @property
    def account_name(self):
        return self.account.name if self.account else None
