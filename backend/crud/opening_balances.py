"""
Opening balances: money that existed before the business started using the
ledger. Each one is posted against the Opening Balance equity account (3001)
so the books stay balanced from day one.
"""
from sqlalchemy.orm import Session
from datetime import date
from decimal import Decimal
from typing import Optional
import logging

from models.chart_of_accounts import AccountType
from models.customers import Customer
from models.suppliers import Supplier
from models.transactions import Transaction
from schemas.transactions import TransactionCreate, TransactionLineCreate
from crud import chart_of_accounts as chart_of_accounts_crud
from crud.ledger import create_transaction
from utils import to_decimal

logger = logging.getLogger(__name__)


def _opening_lines(target_id: int, opening_id: int, amount: Decimal, debit_target: bool):
    if debit_target:
        return [
            TransactionLineCreate(account_id=target_id, debit_amount=amount),
            TransactionLineCreate(account_id=opening_id, credit_amount=amount),
        ]
    return [
        TransactionLineCreate(account_id=target_id, credit_amount=amount),
        TransactionLineCreate(account_id=opening_id, debit_amount=amount),
    ]


def set_account_opening_balance(db: Session, account_id: int, amount, tenant_id: str, on_date: date = None, description: str = None) -> Transaction:
    """
    Give a cash, bank or other asset/liability account its starting balance.

    Assets are debited and liabilities credited, with Opening Balance on the
    other side. A negative amount posts the opposite way (an overdrawn bank).
    """
    account = chart_of_accounts_crud.require_account(db, account_id, tenant_id)
    if account.type not in (AccountType.ASSET, AccountType.LIABILITY):
        raise ValueError(f"Opening balances can only be set on asset or liability accounts, not {account.type.value}")

    amount = to_decimal(amount)
    if amount == 0:
        raise ValueError("Opening balance amount cannot be zero")

    try:
        opening = chart_of_accounts_crud.get_standard_account(
            db, chart_of_accounts_crud.OPENING_BALANCE_CODE, tenant_id, commit=False
        )
        debit_target = (account.type == AccountType.ASSET) == (amount > 0)
        transaction = create_transaction(
            db,
            TransactionCreate(
                date=on_date or date.today(),
                description=description or f"Opening balance - {account.name}"
            ),
            _opening_lines(account.id, opening.id, abs(amount), debit_target),
            tenant_id,
            commit=False
        )
        db.commit()
        db.refresh(transaction)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Opening balance {amount} posted to account {account.code} for tenant {tenant_id}")
    return transaction


def post_supplier_opening_balance(db: Session, supplier_id: int, tenant_id: str, on_date: date = None) -> Optional[Transaction]:
    """
    Post a supplier's stored opening balance.

    Positive: we owe them (Cr Accounts Payable). Negative: we paid them in
    advance (Dr Advance to Suppliers). Zero posts nothing.
    """
    supplier = db.query(Supplier).filter(Supplier.id == supplier_id, Supplier.tenant_id == tenant_id).first()
    if not supplier:
        raise ValueError(f"Supplier {supplier_id} not found")

    amount = to_decimal(supplier.balance)
    if amount == 0:
        return None

    try:
        opening = chart_of_accounts_crud.get_standard_account(
            db, chart_of_accounts_crud.OPENING_BALANCE_CODE, tenant_id, commit=False
        )
        if amount > 0:
            target = chart_of_accounts_crud.get_standard_account(
                db, chart_of_accounts_crud.ACCOUNTS_PAYABLE_CODE, tenant_id, commit=False
            )
            lines = _opening_lines(target.id, opening.id, amount, debit_target=False)
        else:
            target = chart_of_accounts_crud.get_standard_account(
                db, chart_of_accounts_crud.ADVANCE_TO_SUPPLIERS_CODE, tenant_id, commit=False
            )
            lines = _opening_lines(target.id, opening.id, -amount, debit_target=True)

        transaction = create_transaction(
            db,
            TransactionCreate(date=on_date or date.today(), description=f"Supplier Opening Balance - {supplier.name}"),
            lines,
            tenant_id,
            commit=False
        )
        db.commit()
        db.refresh(transaction)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Opening balance {amount} posted for supplier {supplier.id} (tenant {tenant_id})")
    return transaction


def post_customer_opening_balance(db: Session, customer_id: int, tenant_id: str, on_date: date = None) -> Optional[Transaction]:
    """Post what a customer already owed: Dr Accounts Receivable, Cr Opening Balance."""
    customer = db.query(Customer).filter(Customer.id == customer_id, Customer.tenant_id == tenant_id).first()
    if not customer:
        raise ValueError(f"Customer {customer_id} not found")

    amount = to_decimal(customer.balance)
    if amount == 0:
        return None
    if amount < 0:
        raise ValueError("Customer opening balance cannot be negative; record an advance payment instead")

    try:
        opening = chart_of_accounts_crud.get_standard_account(
            db, chart_of_accounts_crud.OPENING_BALANCE_CODE, tenant_id, commit=False
        )
        receivables = chart_of_accounts_crud.get_standard_account(
            db, chart_of_accounts_crud.ACCOUNTS_RECEIVABLE_CODE, tenant_id, commit=False
        )
        transaction = create_transaction(
            db,
            TransactionCreate(
                date=on_date or date.today(),
                description=f"Customer Opening Balance - {customer.name or customer.phone_number}"
            ),
            _opening_lines(receivables.id, opening.id, amount, debit_target=True),
            tenant_id,
            commit=False
        )
        db.commit()
        db.refresh(transaction)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Opening balance {amount} posted for customer {customer.id} (tenant {tenant_id})")
    return transaction
