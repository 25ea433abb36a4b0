from sqlalchemy import Column, Integer, String, Text, Boolean, Numeric, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin


class AccountType(str, enum.Enum):
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class AccountSubType(str, enum.Enum):
    CASH = "CASH"
    BANK = "BANK"


class Account(Base, TimestampMixin):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    code = Column(String(20), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    type = Column(Enum(AccountType), nullable=False)
    account_sub_type = Column(Enum(AccountSubType), nullable=True)
    parent_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    # Running total, only ever moved by ledger postings
    balance = Column(Numeric(14, 2), default=0, nullable=False)

    parent = relationship("Account", remote_side=[id])

    __table_args__ = (
        UniqueConstraint('tenant_id', 'code', name='_tenant_account_code_uc'),
    )
