from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import date, datetime
from decimal import Decimal


class ExpenseCreate(BaseModel):
    date: date
    category: str
    amount: Decimal
    description: Optional[str] = None
    payment_method: Optional[str] = "Cash"
    account_id: Optional[int] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        if v <= 0:
            raise ValueError("Expense amount must be greater than zero")
        return v

    @field_validator('category')
    @classmethod
    def normalize_category(cls, v):
        return v.strip().upper()


class Expense(BaseModel):
    id: int
    tenant_id: str
    expense_number: str
    date: date
    category: str
    amount: Decimal
    description: Optional[str] = None
    account_id: int
    transaction_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
