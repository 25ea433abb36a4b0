from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from models.withdrawals import WithdrawalType


class WithdrawalCreate(BaseModel):
    date: date
    amount: Decimal
    type: WithdrawalType = WithdrawalType.OWNER_PERSONAL
    description: Optional[str] = None
    payment_method: Optional[str] = "Cash"
    account_id: Optional[int] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        if v <= 0:
            raise ValueError("Withdrawal amount must be greater than zero")
        return v


class Withdrawal(BaseModel):
    id: int
    tenant_id: str
    withdrawal_number: str
    date: date
    amount: Decimal
    type: WithdrawalType
    description: Optional[str] = None
    transaction_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
