from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin


class DistributionStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DISTRIBUTED = "DISTRIBUTED"


class ProfitDistribution(Base, TimestampMixin):
    __tablename__ = "profit_distributions"
    __table_args__ = (UniqueConstraint('tenant_id', 'distribution_number', name='_tenant_distribution_number_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    distribution_number = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    from_date = Column(Date, nullable=False)
    to_date = Column(Date, nullable=False)
    total_profit_amount = Column(Numeric(14, 2), nullable=False)
    distribution_method = Column(String, nullable=False)  # e.g. "OWNER", "REINVEST_PARTIAL"
    status = Column(Enum(DistributionStatus), default=DistributionStatus.PENDING, nullable=False)
    description = Column(Text, nullable=True)
    # Set when the money leaves cash/bank
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)

    # Relationships
    transaction = relationship("Transaction")
