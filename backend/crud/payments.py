from sqlalchemy.orm import Session
from decimal import Decimal
from typing import Optional
import logging

from models.customers import Customer
from models.suppliers import Supplier
from models.orders import Order
from models.purchase_invoices import PurchaseInvoice
from models.payments import Payment, PaymentType
from schemas.payments import AdvanceApplication, CustomerPaymentCreate, SupplierPaymentCreate
from schemas.transactions import TransactionCreate, TransactionLineCreate
from exceptions import InsufficientBalanceError
from crud import chart_of_accounts as chart_of_accounts_crud
from crud.ledger import create_transaction
from crud.balances import calculate_supplier_balance
from utils import to_decimal
from utils.numbering import add_numbered

logger = logging.getLogger(__name__)


def _get_customer(db: Session, customer_id: int, tenant_id: str) -> Customer:
    customer = db.query(Customer).filter(Customer.id == customer_id, Customer.tenant_id == tenant_id).first()
    if not customer:
        raise ValueError(f"Customer {customer_id} not found")
    return customer


def _get_customer_order(db: Session, order_id: Optional[int], customer: Customer, tenant_id: str) -> Optional[Order]:
    if order_id is None:
        return None
    order = db.query(Order).filter(Order.id == order_id, Order.tenant_id == tenant_id).first()
    if not order:
        raise ValueError(f"Order {order_id} not found")
    if order.customer_id != customer.id:
        raise ValueError(f"Order {order.order_number} does not belong to customer {customer.id}")
    return order


def _add_payment(db: Session, payment: Payment, tenant_id: str) -> Payment:
    return add_numbered(db, payment, Payment.payment_number, tenant_id, "PAY", payment.date)


def get_payment(db: Session, payment_id: int, tenant_id: str) -> Optional[Payment]:
    return db.query(Payment).filter(Payment.id == payment_id, Payment.tenant_id == tenant_id).first()


def _post_customer_receipt(db: Session, payment: Payment, customer: Customer, order: Optional[Order], tenant_id: str, description: str = None):
    """Dr cash/bank, Cr receivables for a customer payment; caller commits."""
    payment_account = chart_of_accounts_crud.resolve_payment_account(
        db, tenant_id, account_id=payment.account_id, payment_method=payment.payment_method, commit=False
    )
    receivables = chart_of_accounts_crud.get_standard_account(
        db, chart_of_accounts_crud.ACCOUNTS_RECEIVABLE_CODE, tenant_id, commit=False
    )
    if not description:
        target = f"order {order.order_number}" if order else "advance"
        description = f"Customer payment from {customer.name} ({target})"

    transaction = create_transaction(
        db,
        TransactionCreate(date=payment.date, description=description, order_id=order.id if order else None),
        [
            TransactionLineCreate(account_id=payment_account.id, debit_amount=payment.amount),
            TransactionLineCreate(account_id=receivables.id, credit_amount=payment.amount),
        ],
        tenant_id,
        commit=False
    )
    payment.account_id = payment_account.id
    payment.transaction_id = transaction.id

    amount = to_decimal(payment.amount)
    if order:
        order.payment_amount = to_decimal(order.payment_amount) + amount
    else:
        # Money received without an order sits on the customer as an advance
        customer.advance_balance = to_decimal(customer.advance_balance) + amount
    return transaction


def record_customer_payment(db: Session, payment: CustomerPaymentCreate, tenant_id: str, user_id: str = None) -> Payment:
    customer = _get_customer(db, payment.customer_id, tenant_id)
    order = _get_customer_order(db, payment.order_id, customer, tenant_id)

    try:
        db_payment = Payment(
            tenant_id=tenant_id,
            date=payment.date,
            type=PaymentType.CUSTOMER_PAYMENT,
            amount=payment.amount,
            payment_method=payment.payment_method,
            account_id=payment.account_id,
            customer_id=customer.id,
            order_id=order.id if order else None,
            created_by=user_id
        )
        _post_customer_receipt(db, db_payment, customer, order, tenant_id, payment.description)
        _add_payment(db, db_payment, tenant_id)
        db.commit()
        db.refresh(db_payment)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Customer payment {db_payment.payment_number} of {payment.amount} recorded for customer {customer.id} (tenant {tenant_id})")
    return db_payment


def create_unverified_payment(db: Session, payment: CustomerPaymentCreate, tenant_id: str, user_id: str = None) -> Payment:
    """Record a payment the customer claims to have made. Nothing is posted until it is verified."""
    customer = _get_customer(db, payment.customer_id, tenant_id)
    order = _get_customer_order(db, payment.order_id, customer, tenant_id)

    db_payment = Payment(
        tenant_id=tenant_id,
        date=payment.date,
        type=PaymentType.CUSTOMER_PAYMENT,
        amount=payment.amount,
        payment_method=payment.payment_method,
        account_id=payment.account_id,
        customer_id=customer.id,
        order_id=order.id if order else None,
        created_by=user_id
    )
    try:
        _add_payment(db, db_payment, tenant_id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_payment)
    logger.info(f"Unverified payment {db_payment.payment_number} of {payment.amount} recorded for customer {customer.id} (tenant {tenant_id})")
    return db_payment


def verify_payment(db: Session, payment_id: int, tenant_id: str, user_id: str = None) -> Payment:
    db_payment = get_payment(db, payment_id, tenant_id)
    if not db_payment:
        raise ValueError(f"Payment {payment_id} not found")
    if db_payment.transaction_id is not None:
        raise ValueError(f"Payment {db_payment.payment_number} is already verified")
    if db_payment.type != PaymentType.CUSTOMER_PAYMENT:
        raise ValueError("Only customer payments need verification")

    customer = _get_customer(db, db_payment.customer_id, tenant_id)
    order = _get_customer_order(db, db_payment.order_id, customer, tenant_id)

    try:
        _post_customer_receipt(db, db_payment, customer, order, tenant_id)
        db_payment.updated_by = user_id
        db.commit()
        db.refresh(db_payment)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Payment {db_payment.payment_number} verified for tenant {tenant_id}")
    return db_payment


def apply_customer_advance(db: Session, application: AdvanceApplication, tenant_id: str) -> Order:
    """
    Settle part of an order from the customer's advance.

    Both the advance and the order already sit in receivables, so this only
    moves the amount between them; nothing is posted to the ledger.
    """
    customer = _get_customer(db, application.customer_id, tenant_id)
    order = _get_customer_order(db, application.order_id, customer, tenant_id)

    available = to_decimal(customer.advance_balance)
    if application.amount > available:
        raise InsufficientBalanceError(available, application.amount, "customer advance")

    customer.advance_balance = available - application.amount
    order.payment_amount = to_decimal(order.payment_amount) + application.amount
    order.advance_applied = to_decimal(order.advance_applied) + application.amount
    db.commit()
    db.refresh(order)
    logger.info(f"Applied {application.amount} of advance from customer {customer.id} to order {order.order_number}")
    return order


def record_supplier_payment(db: Session, payment: SupplierPaymentCreate, tenant_id: str, user_id: str = None) -> dict:
    """
    Pay a supplier in cash, from the advance already held with them, or both.

    Lines: Dr Accounts Payable for the full amount settled, Cr the cash/bank
    account for the cash part and Cr Advance to Suppliers for the advance
    part. Only the cash part becomes a Payment row; using the advance moves
    no new money.
    """
    supplier = db.query(Supplier).filter(Supplier.id == payment.supplier_id, Supplier.tenant_id == tenant_id).first()
    if not supplier:
        raise ValueError(f"Supplier {payment.supplier_id} not found")

    invoice = None
    if payment.purchase_invoice_id is not None:
        invoice = db.query(PurchaseInvoice).filter(
            PurchaseInvoice.id == payment.purchase_invoice_id,
            PurchaseInvoice.tenant_id == tenant_id,
            PurchaseInvoice.supplier_id == supplier.id
        ).first()
        if not invoice:
            raise ValueError(f"Purchase invoice {payment.purchase_invoice_id} not found")

    cash_amount = to_decimal(payment.amount)
    advance_used = to_decimal(payment.use_advance_amount)
    if cash_amount + advance_used <= 0:
        raise ValueError("Nothing to pay: amount and advance used are both zero")

    if advance_used > 0:
        pending = calculate_supplier_balance(db, supplier.id, tenant_id)["pending"]
        available = -pending if pending < 0 else Decimal("0")
        if advance_used > available:
            raise InsufficientBalanceError(available, advance_used, "supplier advance")

    try:
        payables = chart_of_accounts_crud.get_standard_account(
            db, chart_of_accounts_crud.ACCOUNTS_PAYABLE_CODE, tenant_id, commit=False
        )
        lines = [TransactionLineCreate(account_id=payables.id, debit_amount=cash_amount + advance_used)]

        payment_account = None
        if cash_amount > 0:
            payment_account = chart_of_accounts_crud.resolve_payment_account(
                db, tenant_id, account_id=payment.account_id, payment_method=payment.payment_method, commit=False
            )
            lines.append(TransactionLineCreate(account_id=payment_account.id, credit_amount=cash_amount))
        if advance_used > 0:
            advances = chart_of_accounts_crud.get_standard_account(
                db, chart_of_accounts_crud.ADVANCE_TO_SUPPLIERS_CODE, tenant_id, commit=False
            )
            lines.append(TransactionLineCreate(account_id=advances.id, credit_amount=advance_used))

        reference = f"invoice {invoice.invoice_number}" if invoice else "account"
        transaction = create_transaction(
            db,
            TransactionCreate(
                date=payment.date,
                description=payment.description or f"Supplier payment to {supplier.name} ({reference})",
                purchase_invoice_id=invoice.id if invoice else None
            ),
            lines,
            tenant_id,
            commit=False
        )

        db_payment = None
        if cash_amount > 0:
            db_payment = Payment(
                tenant_id=tenant_id,
                    date=payment.date,
                type=PaymentType.SUPPLIER_PAYMENT,
                amount=cash_amount,
                payment_method=payment.payment_method,
                account_id=payment_account.id,
                transaction_id=transaction.id,
                supplier_id=supplier.id,
                purchase_invoice_id=invoice.id if invoice else None,
                created_by=user_id
            )
            _add_payment(db, db_payment, tenant_id)

        db.commit()
        if db_payment is not None:
            db.refresh(db_payment)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Supplier payment to {supplier.id}: cash {cash_amount}, advance {advance_used} (tenant {tenant_id})")
    return {
        "payment": db_payment,
        "transaction_id": transaction.id,
        "cash_amount": cash_amount,
        "advance_used": advance_used,
    }
