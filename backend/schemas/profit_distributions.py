from pydantic import BaseModel, field_validator, model_validator
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from models.profit_distributions import DistributionStatus


class ProfitDistributionCreate(BaseModel):
    date: date
    from_date: date
    to_date: date
    total_profit_amount: Decimal
    distribution_method: str
    description: Optional[str] = None

    @field_validator('total_profit_amount')
    @classmethod
    def validate_amount(cls, v):
        if v <= 0:
            raise ValueError("Profit amount must be greater than zero")
        return v

    @model_validator(mode='after')
    def check_period(self):
        if self.from_date > self.to_date:
            raise ValueError("from_date must not be after to_date")
        return self


class ProfitPayout(BaseModel):
    account_id: Optional[int] = None
    payment_method: Optional[str] = "Cash"
    on_date: Optional[date] = None


class ProfitDistribution(BaseModel):
    id: int
    tenant_id: str
    distribution_number: str
    date: date
    from_date: date
    to_date: date
    total_profit_amount: Decimal
    distribution_method: str
    status: DistributionStatus
    description: Optional[str] = None
    account_id: Optional[int] = None
    transaction_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
