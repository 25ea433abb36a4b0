from sqlalchemy import Column, Integer, Numeric, Date, String, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class Expense(Base, TimestampMixin):
    __tablename__ = "expenses"
    __table_args__ = (UniqueConstraint('tenant_id', 'expense_number', name='_tenant_expense_number_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    expense_number = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    category = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    description = Column(Text, nullable=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)

    # Relationships
    account = relationship("Account")
    transaction = relationship("Transaction")
