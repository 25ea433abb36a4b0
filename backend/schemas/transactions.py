from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
import enum


class BalanceSide(str, enum.Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class TransactionLineCreate(BaseModel):
    account_id: int
    debit_amount: Decimal = Decimal("0")
    credit_amount: Decimal = Decimal("0")

    @field_validator('debit_amount', 'credit_amount')
    @classmethod
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError("Line amounts cannot be negative")
        return v


class TransactionCreate(BaseModel):
    date: date
    description: Optional[str] = None
    transaction_number: Optional[str] = None
    order_id: Optional[int] = None
    purchase_invoice_id: Optional[int] = None
    order_return_id: Optional[int] = None


class TransactionPost(TransactionCreate):
    """Request body for a manual journal posting: header plus its lines."""
    lines: List[TransactionLineCreate]


class TransactionLine(BaseModel):
    id: int
    account_id: int
    debit_amount: Decimal
    credit_amount: Decimal
    account_code: Optional[str] = None
    account_name: Optional[str] = None

    class Config:
        from_attributes = True


class Transaction(TransactionCreate):
    id: int
    tenant_id: str
    transaction_number: str
    lines: List[TransactionLine] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TransactionFilters(BaseModel):
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    account_id: Optional[int] = None
    order_id: Optional[int] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class TransactionPage(BaseModel):
    data: List[Transaction] = []
    pagination: Pagination
    opening_balance: Optional[Decimal] = None
