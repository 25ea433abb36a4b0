from sqlalchemy import Column, Integer, String, Text, Numeric, Enum
from database import Base
import enum
from models.audit_mixin import TimestampMixin


class CompanyStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class CodFeeCalculationType(str, enum.Enum):
    FIXED = "FIXED"
    PERCENTAGE = "PERCENTAGE"
    RANGE_BASED = "RANGE_BASED"


class LogisticsCompany(Base, TimestampMixin):
    __tablename__ = "logistics_companies"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    status = Column(Enum(CompanyStatus), default=CompanyStatus.ACTIVE, nullable=False)
    cod_fee_calculation_type = Column(Enum(CodFeeCalculationType), nullable=False)
    cod_fee_percentage = Column(Numeric(6, 3), nullable=True)
    cod_fee_rules = Column(Text, nullable=True)  # JSON list of ranges
    fixed_cod_fee = Column(Numeric(14, 2), nullable=True)
