"""
Double-entry ledger.

Every posting is one ``Transaction`` with at least two ``TransactionLine``
rows whose debits and credits agree. Posting also moves the running
``Account.balance`` of every account it touches, using relative
``balance = balance + delta`` updates so concurrent postings never overwrite
each other. Posted transactions are never edited; corrections are new
postings (see ``reverse_transaction``).
"""
from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional
from datetime import date
from decimal import Decimal
import logging
import math

from models.chart_of_accounts import Account, AccountType
from models.transactions import Transaction, TransactionLine
from schemas.transactions import BalanceSide, TransactionCreate, TransactionFilters, TransactionLineCreate
from exceptions import AccountNotFoundError, UnbalancedTransactionError
from crud.chart_of_accounts import require_account
from utils import BALANCE_TOLERANCE, to_decimal
from utils.numbering import add_numbered

logger = logging.getLogger(__name__)

# Which side increases each account type. EQUITY grows on the debit side in
# this ledger, unlike textbook bookkeeping; balances already posted rely on it.
INCREASES_ON = {
    AccountType.ASSET: BalanceSide.DEBIT,
    AccountType.EXPENSE: BalanceSide.DEBIT,
    AccountType.EQUITY: BalanceSide.DEBIT,
    AccountType.LIABILITY: BalanceSide.CREDIT,
    AccountType.INCOME: BalanceSide.CREDIT,
}

SORTABLE_COLUMNS = {
    "date": Transaction.date,
    "transaction_number": Transaction.transaction_number,
    "created_at": Transaction.created_at,
    "id": Transaction.id,
}


def sign_of(account_type: AccountType) -> BalanceSide:
    return INCREASES_ON[AccountType(account_type)]


def balance_delta(account_type: AccountType, debit, credit) -> Decimal:
    """Change to an account's balance caused by one line."""
    debit, credit = to_decimal(debit), to_decimal(credit)
    if sign_of(account_type) == BalanceSide.DEBIT:
        return debit - credit
    return credit - debit


def _apply_balance_delta(db: Session, account_id: int, delta: Decimal):
    db.query(Account).filter(Account.id == account_id).update(
        {Account.balance: Account.balance + delta},
        synchronize_session=False
    )


def _check_balanced(lines: List[TransactionLineCreate]):
    total_debits = sum((to_decimal(line.debit_amount) for line in lines), Decimal("0"))
    total_credits = sum((to_decimal(line.credit_amount) for line in lines), Decimal("0"))
    if len(lines) < 2:
        raise UnbalancedTransactionError(
            total_debits, total_credits, "A transaction needs at least two lines"
        )
    if abs(total_debits - total_credits) > BALANCE_TOLERANCE:
        raise UnbalancedTransactionError(total_debits, total_credits)


def create_transaction(
    db: Session,
    header: TransactionCreate,
    lines: List[TransactionLineCreate],
    tenant_id: str,
    commit: bool = True
) -> Transaction:
    """
    Post a balanced transaction and move the balances of its accounts.

    Balance and account checks run before anything is written. Header, lines
    and balance updates then land in the same database transaction: any
    failure rolls all of them back. Pass ``commit=False`` to leave the commit
    to a caller that is composing a larger unit of work.
    """
    _check_balanced(lines)

    account_ids = {line.account_id for line in lines}
    accounts = db.query(Account).filter(
        Account.id.in_(account_ids),
        Account.tenant_id == tenant_id
    ).all()
    accounts_by_id = {account.id: account for account in accounts}
    for line in lines:
        if line.account_id not in accounts_by_id:
            raise AccountNotFoundError(line.account_id, tenant_id)

    try:
        # Flushed here: the lines need its id
        db_transaction = add_numbered(
            db,
            Transaction(**header.model_dump(), tenant_id=tenant_id),
            Transaction.transaction_number,
            tenant_id,
            "TXN",
            header.date
        )
        transaction_number = db_transaction.transaction_number

        for line in lines:
            debit, credit = to_decimal(line.debit_amount), to_decimal(line.credit_amount)
            db.add(TransactionLine(
                transaction_id=db_transaction.id,
                account_id=line.account_id,
                debit_amount=debit,
                credit_amount=credit
            ))
            account_type = accounts_by_id[line.account_id].type
            _apply_balance_delta(db, line.account_id, balance_delta(account_type, debit, credit))
        db.flush()

        # Loaded accounts still hold their pre-posting balance
        for account in accounts:
            db.expire(account, ["balance"])

        if commit:
            db.commit()
            db.refresh(db_transaction)
    except Exception:
        db.rollback()
        logger.exception(f"Failed to post transaction for tenant {tenant_id}")
        raise

    logger.info(f"Posted transaction {transaction_number} for tenant {tenant_id}")
    return db_transaction


def get_transaction(db: Session, transaction_id: int, tenant_id: str) -> Optional[Transaction]:
    return db.query(Transaction).options(
        joinedload(Transaction.lines).joinedload(TransactionLine.account)
    ).filter(
        Transaction.id == transaction_id,
        Transaction.tenant_id == tenant_id
    ).first()


def reverse_transaction(
    db: Session,
    transaction_id: int,
    tenant_id: str,
    on_date: date = None,
    description: str = None,
    commit: bool = True
) -> Transaction:
    """Post a new transaction that mirrors ``transaction_id`` with sides swapped."""
    original = get_transaction(db, transaction_id, tenant_id)
    if original is None:
        raise ValueError(f"Transaction {transaction_id} not found")

    header = TransactionCreate(
        date=on_date or date.today(),
        description=description or f"Reversal of {original.transaction_number}",
        order_id=original.order_id,
        purchase_invoice_id=original.purchase_invoice_id,
        order_return_id=original.order_return_id,
    )
    lines = [
        TransactionLineCreate(
            account_id=line.account_id,
            debit_amount=line.credit_amount,
            credit_amount=line.debit_amount
        )
        for line in original.lines
    ]
    return create_transaction(db, header, lines, tenant_id, commit=commit)


def _signed_line_total(db: Session, account: Account, tenant_id: str, before: date = None, on_or_before: date = None) -> Decimal:
    query = db.query(
        func.coalesce(func.sum(TransactionLine.debit_amount), 0),
        func.coalesce(func.sum(TransactionLine.credit_amount), 0)
    ).join(Transaction, Transaction.id == TransactionLine.transaction_id).filter(
        TransactionLine.account_id == account.id,
        Transaction.tenant_id == tenant_id
    )
    if before is not None:
        query = query.filter(Transaction.date < before)
    if on_or_before is not None:
        query = query.filter(Transaction.date <= on_or_before)

    total_debit, total_credit = query.one()
    return balance_delta(account.type, total_debit, total_credit)


def get_account_balance_as_of(db: Session, account_id: int, tenant_id: str, as_of: date) -> Decimal:
    """Balance of an account at the end of ``as_of``, rebuilt from its lines."""
    account = require_account(db, account_id, tenant_id)
    return _signed_line_total(db, account, tenant_id, on_or_before=as_of)


def get_transactions(
    db: Session,
    tenant_id: str,
    filters: TransactionFilters = None,
    page: int = 1,
    limit: int = 50,
    sort: str = "date",
    order: str = "desc"
) -> dict:
    """
    Page through a tenant's transactions.

    When both ``account_id`` and ``from_date`` are filtered on, the result also
    carries ``opening_balance``: the account's signed total of every line dated
    before ``from_date``. It is rebuilt from the lines so it stays correct for
    any past date no matter what was posted since.
    """
    filters = filters or TransactionFilters()
    page = max(page, 1)
    limit = max(limit, 1)

    query = db.query(Transaction).filter(Transaction.tenant_id == tenant_id)
    if filters.from_date:
        query = query.filter(Transaction.date >= filters.from_date)
    if filters.to_date:
        query = query.filter(Transaction.date <= filters.to_date)
    if filters.order_id:
        query = query.filter(Transaction.order_id == filters.order_id)
    if filters.account_id:
        query = query.filter(Transaction.id.in_(
            select(TransactionLine.transaction_id).where(TransactionLine.account_id == filters.account_id)
        ))

    total = query.count()

    sort_column = SORTABLE_COLUMNS.get(sort, Transaction.date)
    if order == "asc":
        query = query.order_by(sort_column.asc(), Transaction.id.asc())
    else:
        query = query.order_by(sort_column.desc(), Transaction.id.desc())

    transactions = query.options(
        joinedload(Transaction.lines).joinedload(TransactionLine.account)
    ).offset((page - 1) * limit).limit(limit).all()

    opening_balance = None
    if filters.account_id and filters.from_date:
        account = require_account(db, filters.account_id, tenant_id)
        opening_balance = _signed_line_total(db, account, tenant_id, before=filters.from_date)

    return {
        "data": transactions,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit) if total else 0,
        },
        "opening_balance": opening_balance,
    }
