from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from models.payments import PaymentType


class CustomerPaymentCreate(BaseModel):
    customer_id: int
    amount: Decimal
    date: date
    order_id: Optional[int] = None
    payment_method: Optional[str] = "Cash"
    account_id: Optional[int] = None
    description: Optional[str] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        if v <= 0:
            raise ValueError("Payment amount must be greater than zero")
        return v


class SupplierPaymentCreate(BaseModel):
    supplier_id: int
    amount: Decimal  # cash paid now, may be 0 when settling fully from advance
    date: date
    purchase_invoice_id: Optional[int] = None
    use_advance_amount: Decimal = Decimal("0")
    payment_method: Optional[str] = "Cash"
    account_id: Optional[int] = None
    description: Optional[str] = None

    @field_validator('amount', 'use_advance_amount')
    @classmethod
    def validate_amounts(cls, v):
        if v < 0:
            raise ValueError("Amounts cannot be negative")
        return v


class AdvanceApplication(BaseModel):
    customer_id: int
    order_id: int
    amount: Decimal

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        if v <= 0:
            raise ValueError("Amount must be greater than zero")
        return v


class Payment(BaseModel):
    id: int
    tenant_id: str
    payment_number: str
    date: date
    type: PaymentType
    amount: Decimal
    payment_method: Optional[str] = None
    account_id: Optional[int] = None
    transaction_id: Optional[int] = None
    customer_id: Optional[int] = None
    supplier_id: Optional[int] = None
    order_id: Optional[int] = None
    purchase_invoice_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SupplierPaymentResult(BaseModel):
    payment: Optional[Payment] = None  # None when settled entirely from advance
    transaction_id: int
    cash_amount: Decimal
    advance_used: Decimal
