from pydantic import BaseModel, field_validator, model_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from models.order_returns import (
    RefundMethod,
    ReturnStatus,
    ReturnType,
    ShippingChargeHandling,
    SupplierReturnHandling,
)


class ReturnItemCreate(BaseModel):
    order_item_id: int
    quantity: int

    @field_validator('quantity')
    @classmethod
    def validate_quantity(cls, v):
        if v <= 0:
            raise ValueError("Returned quantity must be at least 1")
        return v


class OrderReturnCreate(BaseModel):
    order_id: int
    return_type: ReturnType
    return_date: date
    reason: Optional[str] = None
    shipping_charge_handling: Optional[ShippingChargeHandling] = None
    items: List[ReturnItemCreate] = []  # partial returns only; a full return takes every item

    @field_validator('return_type')
    @classmethod
    def validate_return_type(cls, v):
        if v == ReturnType.SUPPLIER:
            raise ValueError("Supplier returns are recorded against a purchase invoice")
        return v


class ReturnRefund(BaseModel):
    refund_method: RefundMethod
    amount: Optional[Decimal] = None  # defaults to the return's full value
    account_id: Optional[int] = None
    on_date: Optional[date] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        if v is not None and v <= 0:
            raise ValueError("Refund amount must be greater than zero")
        return v


class ReturnRejection(BaseModel):
    reason: Optional[str] = None


class SupplierReturnCreate(BaseModel):
    purchase_invoice_id: int
    return_date: date
    amount: Decimal
    handling_method: SupplierReturnHandling
    refund_account_id: Optional[int] = None
    reason: Optional[str] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        if v <= 0:
            raise ValueError("Return amount must be greater than zero")
        return v

    @model_validator(mode='after')
    def check_refund_account(self):
        if self.handling_method == SupplierReturnHandling.REFUND and self.refund_account_id is None:
            raise ValueError("A refund account is required when the supplier refunds the return")
        return self


class OrderReturnItem(BaseModel):
    id: int
    order_item_id: int
    quantity: int
    price: Decimal

    class Config:
        from_attributes = True


class OrderReturn(BaseModel):
    id: int
    tenant_id: str
    return_number: str
    return_type: ReturnType
    status: ReturnStatus
    return_date: date
    reason: Optional[str] = None
    total_amount: Decimal
    order_id: Optional[int] = None
    shipping_charge_handling: Optional[ShippingChargeHandling] = None
    shipping_charge_amount: Decimal = Decimal("0")
    refund_method: Optional[RefundMethod] = None
    refunded_amount: Decimal = Decimal("0")
    purchase_invoice_id: Optional[int] = None
    supplier_id: Optional[int] = None
    handling_method: Optional[SupplierReturnHandling] = None
    refund_account_id: Optional[int] = None
    items: List[OrderReturnItem] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
