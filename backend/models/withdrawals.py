from sqlalchemy import Column, Integer, Numeric, Date, String, Text, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin


class WithdrawalType(str, enum.Enum):
    OWNER_PERSONAL = "OWNER_PERSONAL"


class Withdrawal(Base, TimestampMixin):
    __tablename__ = "withdrawals"
    __table_args__ = (UniqueConstraint('tenant_id', 'withdrawal_number', name='_tenant_withdrawal_number_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    withdrawal_number = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    type = Column(Enum(WithdrawalType), default=WithdrawalType.OWNER_PERSONAL, nullable=False)
    description = Column(Text, nullable=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)

    # Relationships
    transaction = relationship("Transaction")
