"""
Receivable and payable balances per customer and supplier.

Party balances are derived from orders, purchase invoices and payments rather
than read from the ledger, so they can itemize what is still open. A positive
``pending`` means money is owed (the customer owes us, or we owe the
supplier); a negative one is an advance.
"""
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload
from collections import defaultdict
from decimal import Decimal
from typing import List
import logging

from models.chart_of_accounts import Account, AccountType
from models.customers import Customer
from models.suppliers import Supplier
from models.orders import Order, OrderStatus, CodFeePaidBy
from models.purchase_invoices import PurchaseInvoice
from models.payments import Payment, PaymentType
from models.expenses import Expense
from models.order_returns import OrderReturn, ReturnStatus, ReturnType, SupplierReturnHandling
from utils import to_decimal
from models.audit_mixin import now_local

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def order_products_total(order: Order) -> Decimal:
    return sum((to_decimal(item.price) * item.quantity for item in order.items), ZERO)


def order_total(order: Order) -> Decimal:
    """Products plus shipping, plus the COD fee when the customer carries it."""
    total = order_products_total(order) + to_decimal(order.shipping_charges)
    if order.cod_fee_paid_by == CodFeePaidBy.CUSTOMER:
        total += to_decimal(order.cod_fee)
    return total


def calculate_customer_balance(db: Session, customer_id: int, tenant_id: str) -> dict:
    customer = db.query(Customer).filter(
        Customer.id == customer_id,
        Customer.tenant_id == tenant_id
    ).first()
    if not customer:
        raise ValueError(f"Customer {customer_id} not found")

    orders = db.query(Order).options(joinedload(Order.items)).filter(
        Order.customer_id == customer_id,
        Order.tenant_id == tenant_id,
        Order.status == OrderStatus.CONFIRMED
    ).order_by(Order.id).all()

    # Only verified payments (posted to the ledger) count against an order
    verified_by_order = dict(
        db.query(Payment.order_id, func.sum(Payment.amount)).filter(
            Payment.tenant_id == tenant_id,
            Payment.customer_id == customer_id,
            Payment.type == PaymentType.CUSTOMER_PAYMENT,
            Payment.transaction_id.isnot(None),
            Payment.order_id.isnot(None)
        ).group_by(Payment.order_id).all()
    )

    total_ordered = ZERO
    total_paid = ZERO
    total_pending = ZERO
    order_breakdown = []
    for order in orders:
        total = order_total(order)
        if order.id in verified_by_order:
            # Advance applied to the order has no Payment row of its own
            paid = to_decimal(verified_by_order[order.id]) + to_decimal(order.advance_applied)
        else:
            paid = to_decimal(order.payment_amount)
        refunded = to_decimal(order.refund_amount)
        pending = max(ZERO, total - paid - refunded)

        total_ordered += total
        total_paid += paid
        total_pending += pending
        if pending > 0:
            order_breakdown.append({
                "order_id": order.id,
                "order_number": order.order_number,
                "order_total": total,
                "paid": paid,
                "refunded": refunded,
                "pending": pending,
            })

    opening_balance = to_decimal(customer.balance)
    advance_balance = to_decimal(customer.advance_balance)

    return {
        "customer_id": customer.id,
        "customer_name": customer.name,
        "opening_balance": opening_balance,
        "advance_balance": advance_balance,
        "total_ordered": total_ordered,
        "total_paid": total_paid,
        "total_pending": total_pending,
        "pending": opening_balance + total_pending - advance_balance,
        "orders": order_breakdown,
    }


def calculate_supplier_balance(db: Session, supplier_id: int, tenant_id: str) -> dict:
    supplier = db.query(Supplier).filter(
        Supplier.id == supplier_id,
        Supplier.tenant_id == tenant_id
    ).first()
    if not supplier:
        raise ValueError(f"Supplier {supplier_id} not found")

    # Soft-deleted invoices are filtered out by the session
    invoices = db.query(PurchaseInvoice).filter(
        PurchaseInvoice.supplier_id == supplier_id,
        PurchaseInvoice.tenant_id == tenant_id
    ).order_by(PurchaseInvoice.invoice_date, PurchaseInvoice.id).all()
    invoice_ids = {invoice.id for invoice in invoices}

    payments = db.query(Payment).filter(
        Payment.tenant_id == tenant_id,
        Payment.supplier_id == supplier_id,
        Payment.type == PaymentType.SUPPLIER_PAYMENT
    ).all()

    paid_by_invoice = defaultdict(lambda: ZERO)
    unlinked_paid = ZERO
    for payment in payments:
        if payment.purchase_invoice_id is None:
            unlinked_paid += to_decimal(payment.amount)
        elif payment.purchase_invoice_id in invoice_ids:
            paid_by_invoice[payment.purchase_invoice_id] += to_decimal(payment.amount)
        # Payments against a deleted invoice no longer count

    # Returns refunded in cash settle themselves; only credited ones reduce what we owe
    returned_by_invoice = defaultdict(lambda: ZERO)
    if invoice_ids:
        credited_returns = db.query(OrderReturn.purchase_invoice_id, OrderReturn.total_amount).filter(
            OrderReturn.tenant_id == tenant_id,
            OrderReturn.purchase_invoice_id.in_(invoice_ids),
            OrderReturn.return_type == ReturnType.SUPPLIER,
            OrderReturn.handling_method == SupplierReturnHandling.REDUCE_AP,
            OrderReturn.status != ReturnStatus.REJECTED
        ).all()
        for invoice_id, amount in credited_returns:
            returned_by_invoice[invoice_id] += to_decimal(amount)

    total_invoiced = ZERO
    total_paid = unlinked_paid
    total_returned = ZERO
    invoice_breakdown = []
    for invoice in invoices:
        amount = to_decimal(invoice.total_amount)
        if invoice.is_return_only:
            # The invoice records goods sent back; its total is owed to us
            total_returned += amount
            invoice_breakdown.append({
                "invoice_id": invoice.id,
                "invoice_number": invoice.invoice_number,
                "total_amount": amount,
                "paid": ZERO,
                "returned": amount,
                "pending": -amount,
                "is_return_only": True,
            })
            continue

        if invoice.id in paid_by_invoice:
            paid = paid_by_invoice[invoice.id]
        else:
            # Invoices from before Payment rows carried their payment inline
            paid = to_decimal(invoice.payment_amount)
        returned = returned_by_invoice[invoice.id]
        total_invoiced += amount
        total_paid += paid
        total_returned += returned
        invoice_breakdown.append({
            "invoice_id": invoice.id,
            "invoice_number": invoice.invoice_number,
            "total_amount": amount,
            "paid": paid,
            "returned": returned,
            "pending": amount - paid - returned,
            "is_return_only": False,
        })

    opening_balance = to_decimal(supplier.balance)

    return {
        "supplier_id": supplier.id,
        "supplier_name": supplier.name,
        "opening_balance": opening_balance,
        "total_invoiced": total_invoiced,
        "total_paid": total_paid,
        "total_returned": total_returned,
        "pending": opening_balance + total_invoiced - total_paid - total_returned,
        "invoices": invoice_breakdown,
    }


def get_all_customer_balances(db: Session, tenant_id: str) -> List[dict]:
    """Balances of every customer; a customer that fails to compute is logged and left out."""
    balances = []
    customer_ids = [row.id for row in db.query(Customer.id).filter(Customer.tenant_id == tenant_id).order_by(Customer.id)]
    for customer_id in customer_ids:
        try:
            balances.append(calculate_customer_balance(db, customer_id, tenant_id))
        except Exception:
            logger.exception(f"Failed to calculate balance for customer {customer_id} (tenant {tenant_id})")
    return balances


def get_all_supplier_balances(db: Session, tenant_id: str) -> List[dict]:
    """Balances of every supplier; a supplier that fails to compute is logged and left out."""
    balances = []
    supplier_ids = [row.id for row in db.query(Supplier.id).filter(Supplier.tenant_id == tenant_id).order_by(Supplier.id)]
    for supplier_id in supplier_ids:
        try:
            balances.append(calculate_supplier_balance(db, supplier_id, tenant_id))
        except Exception:
            logger.exception(f"Failed to calculate balance for supplier {supplier_id} (tenant {tenant_id})")
    return balances


def get_cash_position(db: Session, tenant_id: str) -> Decimal:
    accounts = db.query(Account).filter(
        Account.tenant_id == tenant_id,
        Account.type == AccountType.ASSET,
        Account.is_active == True
    ).all()
    return sum(
        (to_decimal(account.balance) for account in accounts
         if "cash" in account.name.lower() or "bank" in account.name.lower()),
        ZERO
    )


def get_expenses_by_category(db: Session, tenant_id: str) -> dict:
    rows = db.query(Expense.category, func.sum(Expense.amount)).filter(
        Expense.tenant_id == tenant_id
    ).group_by(Expense.category).all()
    return {category: to_decimal(total) for category, total in rows}


def get_balance_summary(db: Session, tenant_id: str) -> dict:
    customer_balances = get_all_customer_balances(db, tenant_id)
    supplier_balances = get_all_supplier_balances(db, tenant_id)

    total_receivables = sum((max(ZERO, b["pending"]) for b in customer_balances), ZERO)
    total_payables = sum((max(ZERO, b["pending"]) for b in supplier_balances), ZERO)

    return {
        "total_receivables": total_receivables,
        "total_payables": total_payables,
        "cash_position": get_cash_position(db, tenant_id),
        "net_balance": total_receivables - total_payables,
        "expenses_by_category": get_expenses_by_category(db, tenant_id),
        "customer_count": len(customer_balances),
        "supplier_count": len(supplier_balances),
        "as_of": now_local().isoformat(),
    }
