"""
Customer and supplier returns.

A customer return is drafted as PENDING and only reaches the ledger when it
is approved: Dr Sales Returns, Cr Accounts Receivable for the return value,
and the order's ``refund_amount`` grows in the same unit so reconciliation
and receivables move together. Paying the money back is a separate step.

Supplier returns post as soon as they are recorded. The goods leave
inventory and either reduce what we owe the supplier or come back as cash.
"""
from sqlalchemy.orm import Session, joinedload
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import List, Optional
import logging

from models.customers import Customer
from models.orders import OrderStatus
from models.order_returns import (
    OrderReturn,
    OrderReturnItem,
    RefundMethod,
    ReturnStatus,
    ReturnType,
    ShippingChargeHandling,
    SupplierReturnHandling,
)
from models.purchase_invoices import PurchaseInvoice
from models.transactions import Transaction
from schemas.returns import OrderReturnCreate, ReturnRefund, SupplierReturnCreate
from schemas.transactions import TransactionCreate, TransactionLineCreate
from crud import chart_of_accounts as chart_of_accounts_crud
from crud.balances import order_total
from crud.ledger import create_transaction, reverse_transaction
from crud.orders import get_order
from utils import to_decimal
from utils.numbering import add_numbered

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
ACTIVE_STATUSES = (ReturnStatus.PENDING, ReturnStatus.APPROVED, ReturnStatus.REFUNDED)
RETURNABLE_ORDER_STATUSES = (OrderStatus.CONFIRMED, OrderStatus.DISPATCHED, OrderStatus.COMPLETED)


def get_return(db: Session, return_id: int, tenant_id: str) -> OrderReturn:
    order_return = db.query(OrderReturn).options(joinedload(OrderReturn.items)).filter(
        OrderReturn.id == return_id,
        OrderReturn.tenant_id == tenant_id
    ).first()
    if not order_return:
        raise ValueError(f"Return {return_id} not found")
    return order_return


def get_returns(
    db: Session,
    tenant_id: str,
    return_type: ReturnType = None,
    status: ReturnStatus = None,
    order_id: int = None
) -> List[OrderReturn]:
    query = db.query(OrderReturn).options(joinedload(OrderReturn.items)).filter(OrderReturn.tenant_id == tenant_id)
    if return_type:
        query = query.filter(OrderReturn.return_type == return_type)
    if status:
        query = query.filter(OrderReturn.status == status)
    if order_id:
        query = query.filter(OrderReturn.order_id == order_id)
    return query.order_by(OrderReturn.return_date.desc(), OrderReturn.id.desc()).all()


def _active_order_returns(db: Session, order_id: int, tenant_id: str) -> List[OrderReturn]:
    return db.query(OrderReturn).options(joinedload(OrderReturn.items)).filter(
        OrderReturn.order_id == order_id,
        OrderReturn.tenant_id == tenant_id,
        OrderReturn.status.in_(ACTIVE_STATUSES)
    ).all()


def _returned_quantities(active_returns: List[OrderReturn]) -> dict:
    returned = defaultdict(int)
    for order_return in active_returns:
        for item in order_return.items:
            returned[item.order_item_id] += item.quantity
    return returned


def create_order_return(db: Session, data: OrderReturnCreate, tenant_id: str, user_id: str = None) -> OrderReturn:
    """
    Draft a customer return for some or all of an order's items.

    Quantities are checked against what earlier active returns already took
    back. Shipping is refunded on top of the products (FULL_REFUND), kept
    out of the refund (CUSTOMER_PAYS), or left alone when no handling is given.
    """
    order = get_order(db, data.order_id, tenant_id)
    if order.status not in RETURNABLE_ORDER_STATUSES:
        raise ValueError(f"Order {order.order_number} is {order.status.value} and cannot be returned")

    active_returns = _active_order_returns(db, order.id, tenant_id)
    returned = _returned_quantities(active_returns)
    items_by_id = {item.id: item for item in order.items}

    if data.return_type == ReturnType.CUSTOMER_FULL:
        if any(r.return_type == ReturnType.CUSTOMER_FULL for r in active_returns):
            raise ValueError(f"A full return already exists for order {order.order_number}")
        wanted = [
            (item, item.quantity - returned[item.id])
            for item in order.items
            if item.quantity - returned[item.id] > 0
        ]
        if not wanted:
            raise ValueError(f"Order {order.order_number} has already been fully returned")
    else:
        wanted = []
        for requested in data.items:
            item = items_by_id.get(requested.order_item_id)
            if item is None:
                raise ValueError(f"Item {requested.order_item_id} is not part of order {order.order_number}")
            remaining = item.quantity - returned[item.id]
            if requested.quantity > remaining:
                raise ValueError(
                    f"Return quantity for item {item.id} ({requested.quantity}) exceeds available quantity ({remaining})"
                )
            wanted.append((item, requested.quantity))
        if not wanted:
            raise ValueError("No products selected for return")

    products_value = sum((to_decimal(item.price) * quantity for item, quantity in wanted), ZERO)
    shipping = to_decimal(order.shipping_charges)
    refund = products_value
    if data.shipping_charge_handling == ShippingChargeHandling.FULL_REFUND:
        refund += shipping
    elif data.shipping_charge_handling == ShippingChargeHandling.CUSTOMER_PAYS:
        refund -= shipping
    if refund <= 0:
        raise ValueError(f"Nothing to refund: products {products_value}, shipping {shipping}")

    already_returned = sum((to_decimal(r.total_amount) for r in active_returns), ZERO)
    if already_returned + refund > order_total(order):
        raise ValueError(
            f"This return would exceed the order value. Remaining: {order_total(order) - already_returned}, Return amount: {refund}"
        )

    try:
        db_return = OrderReturn(
            tenant_id=tenant_id,
            return_type=data.return_type,
            status=ReturnStatus.PENDING,
            return_date=data.return_date,
            reason=data.reason,
            total_amount=refund,
            order_id=order.id,
            shipping_charge_handling=data.shipping_charge_handling,
            shipping_charge_amount=shipping if data.shipping_charge_handling else ZERO,
            created_by=user_id
        )
        db_return.items = [
            OrderReturnItem(order_item_id=item.id, quantity=quantity, price=item.price)
            for item, quantity in wanted
        ]
        add_numbered(db, db_return, OrderReturn.return_number, tenant_id, "RET", data.return_date)
        db.commit()
        db.refresh(db_return)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Return {db_return.return_number} ({data.return_type.value}, {refund}) drafted for order {order.order_number} (tenant {tenant_id})")
    return db_return


def _customer_return(db: Session, return_id: int, tenant_id: str) -> OrderReturn:
    order_return = get_return(db, return_id, tenant_id)
    if order_return.return_type == ReturnType.SUPPLIER:
        raise ValueError(f"Return {order_return.return_number} is a supplier return")
    return order_return


def approve_return(db: Session, return_id: int, tenant_id: str, on_date: date = None, user_id: str = None) -> OrderReturn:
    """Post an approved customer return: Dr Sales Returns, Cr Accounts Receivable."""
    order_return = _customer_return(db, return_id, tenant_id)
    if order_return.status != ReturnStatus.PENDING:
        raise ValueError("Only pending returns can be approved")

    order = get_order(db, order_return.order_id, tenant_id)
    amount = to_decimal(order_return.total_amount)
    try:
        sales_returns = chart_of_accounts_crud.get_standard_account(
            db, chart_of_accounts_crud.SALES_RETURNS_CODE, tenant_id, commit=False
        )
        receivables = chart_of_accounts_crud.get_standard_account(
            db, chart_of_accounts_crud.ACCOUNTS_RECEIVABLE_CODE, tenant_id, commit=False
        )
        create_transaction(
            db,
            TransactionCreate(
                date=on_date or date.today(),
                description=f"Return Approved: {order_return.return_number} - {order_return.reason or 'Customer return'}",
                order_id=order.id,
                order_return_id=order_return.id
            ),
            [
                TransactionLineCreate(account_id=sales_returns.id, debit_amount=amount),
                TransactionLineCreate(account_id=receivables.id, credit_amount=amount),
            ],
            tenant_id,
            commit=False
        )
        order.refund_amount = to_decimal(order.refund_amount) + amount
        order_return.status = ReturnStatus.APPROVED
        order_return.updated_by = user_id
        db.commit()
        db.refresh(order_return)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Return {order_return.return_number} approved for tenant {tenant_id}")
    return order_return


def process_refund(db: Session, return_id: int, refund: ReturnRefund, tenant_id: str, user_id: str = None) -> OrderReturn:
    """
    Pay an approved return back to the customer.

    Cash and bank refunds post Dr Accounts Receivable, Cr the account the
    money leaves from. Credit to account posts nothing: the approval already
    left the value as a credit in receivables, so it only becomes usable
    advance on the customer.
    """
    order_return = _customer_return(db, return_id, tenant_id)
    if order_return.status != ReturnStatus.APPROVED:
        raise ValueError("Return must be approved before processing refund")

    amount = to_decimal(refund.amount) if refund.amount is not None else to_decimal(order_return.total_amount)
    if amount > to_decimal(order_return.total_amount):
        raise ValueError(f"Refund {amount} exceeds the return value {order_return.total_amount}")

    order = get_order(db, order_return.order_id, tenant_id)
    try:
        if refund.refund_method == RefundMethod.CREDIT_TO_ACCOUNT:
            customer = db.query(Customer).filter(Customer.id == order.customer_id, Customer.tenant_id == tenant_id).first()
            if not customer:
                raise ValueError(f"Order {order.order_number} has no customer to credit")
            customer.advance_balance = to_decimal(customer.advance_balance) + amount
        else:
            payment_account = chart_of_accounts_crud.resolve_payment_account(
                db, tenant_id, account_id=refund.account_id, payment_method=refund.refund_method.value, commit=False
            )
            receivables = chart_of_accounts_crud.get_standard_account(
                db, chart_of_accounts_crud.ACCOUNTS_RECEIVABLE_CODE, tenant_id, commit=False
            )
            create_transaction(
                db,
                TransactionCreate(
                    date=refund.on_date or date.today(),
                    description=f"Refund: {order_return.return_number} - {refund.refund_method.value}",
                    order_id=order.id,
                    order_return_id=order_return.id
                ),
                [
                    TransactionLineCreate(account_id=receivables.id, debit_amount=amount),
                    TransactionLineCreate(account_id=payment_account.id, credit_amount=amount),
                ],
                tenant_id,
                commit=False
            )

        order_return.status = ReturnStatus.REFUNDED
        order_return.refund_method = refund.refund_method
        order_return.refunded_amount = amount
        order_return.updated_by = user_id
        db.commit()
        db.refresh(order_return)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Return {order_return.return_number} refunded {amount} by {refund.refund_method.value} (tenant {tenant_id})")
    return order_return


def reject_return(db: Session, return_id: int, tenant_id: str, reason: Optional[str] = None, user_id: str = None) -> OrderReturn:
    """Reject a customer return; an approved one has its posting reversed."""
    order_return = _customer_return(db, return_id, tenant_id)
    if order_return.status in (ReturnStatus.REFUNDED, ReturnStatus.REJECTED):
        raise ValueError(f"Return {order_return.return_number} is {order_return.status.value} and cannot be rejected")

    try:
        if order_return.status == ReturnStatus.APPROVED:
            postings = db.query(Transaction).filter(
                Transaction.order_return_id == order_return.id,
                Transaction.tenant_id == tenant_id
            ).all()
            for posting in postings:
                reverse_transaction(
                    db, posting.id, tenant_id,
                    description=f"Return Rejected: {order_return.return_number}",
                    commit=False
                )
            order = get_order(db, order_return.order_id, tenant_id)
            order.refund_amount = to_decimal(order.refund_amount) - to_decimal(order_return.total_amount)

        order_return.status = ReturnStatus.REJECTED
        if reason:
            order_return.reason = f"{order_return.reason or ''}\nRejected: {reason}".strip()
        order_return.updated_by = user_id
        db.commit()
        db.refresh(order_return)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Return {order_return.return_number} rejected for tenant {tenant_id}")
    return order_return


def create_supplier_return(db: Session, data: SupplierReturnCreate, tenant_id: str, user_id: str = None) -> OrderReturn:
    """
    Send goods from a purchase invoice back to the supplier.

    Cr Inventory for the returned value, and Dr Accounts Payable when the
    supplier reduces what we owe (REDUCE_AP) or Dr the cash/bank account the
    supplier pays back into (REFUND).
    """
    invoice = db.query(PurchaseInvoice).filter(
        PurchaseInvoice.id == data.purchase_invoice_id,
        PurchaseInvoice.tenant_id == tenant_id
    ).first()
    if not invoice:
        raise ValueError(f"Purchase invoice {data.purchase_invoice_id} not found")
    if invoice.is_return_only:
        raise ValueError(f"Invoice {invoice.invoice_number} already records a return")

    already_returned = sum(
        (to_decimal(amount) for (amount,) in db.query(OrderReturn.total_amount).filter(
            OrderReturn.purchase_invoice_id == invoice.id,
            OrderReturn.tenant_id == tenant_id,
            OrderReturn.status != ReturnStatus.REJECTED
        )),
        ZERO
    )
    available = to_decimal(invoice.total_amount) - already_returned
    if data.amount > available:
        raise ValueError(f"Return amount {data.amount} exceeds what is left on invoice {invoice.invoice_number} ({available})")

    try:
        inventory = chart_of_accounts_crud.get_standard_account(
            db, chart_of_accounts_crud.INVENTORY_CODE, tenant_id, commit=False
        )
        if data.handling_method == SupplierReturnHandling.REDUCE_AP:
            receiving = chart_of_accounts_crud.get_standard_account(
                db, chart_of_accounts_crud.ACCOUNTS_PAYABLE_CODE, tenant_id, commit=False
            )
        else:
            receiving = chart_of_accounts_crud.resolve_payment_account(
                db, tenant_id, account_id=data.refund_account_id, commit=False
            )

        db_return = add_numbered(
            db,
            OrderReturn(
                tenant_id=tenant_id,
                return_type=ReturnType.SUPPLIER,
                status=ReturnStatus.PROCESSED,
                return_date=data.return_date,
                reason=data.reason,
                total_amount=data.amount,
                purchase_invoice_id=invoice.id,
                supplier_id=invoice.supplier_id,
                handling_method=data.handling_method,
                refund_account_id=receiving.id if data.handling_method == SupplierReturnHandling.REFUND else None,
                created_by=user_id
            ),
            OrderReturn.return_number,
            tenant_id,
            "RET",
            data.return_date
        )
        create_transaction(
            db,
            TransactionCreate(
                date=data.return_date,
                description=f"Supplier Return: {db_return.return_number} (Invoice: {invoice.invoice_number})",
                purchase_invoice_id=invoice.id,
                order_return_id=db_return.id
            ),
            [
                TransactionLineCreate(account_id=receiving.id, debit_amount=data.amount),
                TransactionLineCreate(account_id=inventory.id, credit_amount=data.amount),
            ],
            tenant_id,
            commit=False
        )
        db.commit()
        db.refresh(db_return)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Supplier return {db_return.return_number} of {data.amount} ({data.handling_method.value}) on invoice {invoice.invoice_number} (tenant {tenant_id})")
    return db_return
