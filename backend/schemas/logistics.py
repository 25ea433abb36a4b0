from pydantic import BaseModel, field_validator
from typing import Dict, List, Optional
from datetime import datetime
from decimal import Decimal
from .fee_rules import CodFeeConfig
from models.logistics_companies import CodFeeCalculationType, CompanyStatus


class CodFeeRequest(BaseModel):
    cod_amount: Decimal

    @field_validator('cod_amount')
    @classmethod
    def validate_amount(cls, v):
        if v < 0:
            raise ValueError("cod_amount cannot be negative")
        return v


class CodFeeResult(BaseModel):
    cod_fee: Decimal
    cod_amount: Decimal
    calculation_type: str
    logistics_company_id: int
    logistics_company_name: str


class CodFeeConfigUpdate(BaseModel):
    config: CodFeeConfig


class LogisticsCompany(BaseModel):
    id: int
    tenant_id: str
    name: str
    status: CompanyStatus
    cod_fee_calculation_type: CodFeeCalculationType
    cod_fee_percentage: Optional[Decimal] = None
    cod_fee_rules: Optional[str] = None
    fixed_cod_fee: Optional[Decimal] = None

    class Config:
        from_attributes = True


class CompanyCodFeeSummary(BaseModel):
    count: int = 0
    total_cod_amount: Decimal = Decimal("0")
    total_cod_fee: Decimal = Decimal("0")


class CodFeeOrder(BaseModel):
    order_id: int
    order_number: str
    cod_amount: Decimal
    cod_fee: Decimal
    logistics_company_id: Optional[int] = None
    created_at: Optional[datetime] = None


class CodFeePeriodSummary(BaseModel):
    orders: List[CodFeeOrder] = []
    total_cod_amount: Decimal = Decimal("0")
    total_cod_fee: Decimal = Decimal("0")
    by_company: Dict[str, CompanyCodFeeSummary] = {}
