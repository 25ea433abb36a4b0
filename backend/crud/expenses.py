from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional
import logging

from models.expenses import Expense
from schemas.expenses import ExpenseCreate
from schemas.transactions import TransactionCreate, TransactionLineCreate
from crud import chart_of_accounts as chart_of_accounts_crud
from crud.ledger import create_transaction
from utils.numbering import add_numbered

logger = logging.getLogger(__name__)

EXPENSE_CATEGORY_ACCOUNTS = {
    "PETROL": "5300",
    "UTILITY": "5400",
    "INTERNET": "5500",
    "PHONE": "5600",
    "RENT": "5700",
}


def expense_account_code(category: str) -> str:
    return EXPENSE_CATEGORY_ACCOUNTS.get(category.upper(), chart_of_accounts_crud.OTHER_EXPENSES_CODE)


def create_expense(db: Session, expense: ExpenseCreate, tenant_id: str, user_id: str = None) -> Expense:
    """Book an expense: Dr the category's expense account, Cr cash or bank."""
    try:
        expense_account = chart_of_accounts_crud.get_standard_account(
            db, expense_account_code(expense.category), tenant_id, commit=False
        )
        payment_account = chart_of_accounts_crud.resolve_payment_account(
            db, tenant_id, account_id=expense.account_id, payment_method=expense.payment_method, commit=False
        )

        transaction = create_transaction(
            db,
            TransactionCreate(date=expense.date, description=f"Expense: {expense.description or expense.category}"),
            [
                TransactionLineCreate(account_id=expense_account.id, debit_amount=expense.amount),
                TransactionLineCreate(account_id=payment_account.id, credit_amount=expense.amount),
            ],
            tenant_id,
            commit=False
        )

        db_expense = Expense(
            tenant_id=tenant_id,
            date=expense.date,
            category=expense.category,
            amount=expense.amount,
            description=expense.description,
            account_id=expense_account.id,
            transaction_id=transaction.id,
            created_by=user_id
        )
        add_numbered(db, db_expense, Expense.expense_number, tenant_id, "EXP", expense.date)
        db.commit()
        db.refresh(db_expense)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Expense {db_expense.expense_number} ({expense.category}, {expense.amount}) recorded for tenant {tenant_id}")
    return db_expense


def get_expenses(
    db: Session,
    tenant_id: str,
    category: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100
) -> List[Expense]:
    query = db.query(Expense).filter(Expense.tenant_id == tenant_id)
    if category:
        query = query.filter(Expense.category == category.upper())
    if start_date:
        query = query.filter(Expense.date >= start_date)
    if end_date:
        query = query.filter(Expense.date <= end_date)
    return query.order_by(Expense.date.desc(), Expense.id.desc()).offset(skip).limit(limit).all()
