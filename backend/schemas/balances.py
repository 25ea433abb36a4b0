from pydantic import BaseModel
from typing import Dict, List, Optional
from decimal import Decimal


class OrderBalance(BaseModel):
    order_id: int
    order_number: str
    order_total: Decimal
    paid: Decimal
    refunded: Decimal
    pending: Decimal


class CustomerBalance(BaseModel):
    customer_id: int
    customer_name: str
    opening_balance: Decimal
    advance_balance: Decimal
    total_ordered: Decimal
    total_paid: Decimal
    total_pending: Decimal
    pending: Decimal
    orders: List[OrderBalance] = []


class InvoiceBalance(BaseModel):
    invoice_id: int
    invoice_number: str
    total_amount: Decimal
    paid: Decimal
    returned: Decimal = Decimal("0")
    pending: Decimal
    is_return_only: bool = False


class SupplierBalance(BaseModel):
    supplier_id: int
    supplier_name: str
    opening_balance: Decimal
    total_invoiced: Decimal
    total_paid: Decimal
    total_returned: Decimal = Decimal("0")
    pending: Decimal
    invoices: List[InvoiceBalance] = []


class BalanceSummary(BaseModel):
    total_receivables: Decimal
    total_payables: Decimal
    cash_position: Decimal
    net_balance: Decimal
    expenses_by_category: Dict[str, Decimal] = {}
    customer_count: int
    supplier_count: int
    as_of: Optional[str] = None
