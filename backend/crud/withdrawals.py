from sqlalchemy.orm import Session
import logging

from models.tenants import Tenant
from models.withdrawals import Withdrawal, WithdrawalType
from schemas.withdrawals import WithdrawalCreate
from schemas.transactions import TransactionCreate, TransactionLineCreate
from exceptions import InsufficientBalanceError
from crud import chart_of_accounts as chart_of_accounts_crud
from crud.ledger import create_transaction
from utils import to_decimal
from utils.numbering import add_numbered

logger = logging.getLogger(__name__)


def create_withdrawal(db: Session, withdrawal: WithdrawalCreate, tenant_id: str, user_id: str = None) -> Withdrawal:
    """Owner takes money out: Dr Owner Drawings, Cr the cash/bank account it leaves from."""
    if withdrawal.type != WithdrawalType.OWNER_PERSONAL:
        raise ValueError(f"Unsupported withdrawal type: {withdrawal.type}")

    try:
        drawings = chart_of_accounts_crud.get_standard_account(
            db, chart_of_accounts_crud.OWNER_DRAWINGS_CODE, tenant_id, commit=False
        )
        payment_account = chart_of_accounts_crud.resolve_payment_account(
            db, tenant_id, account_id=withdrawal.account_id, payment_method=withdrawal.payment_method, commit=False
        )

        available = to_decimal(payment_account.balance)
        if withdrawal.amount > available:
            raise InsufficientBalanceError(available, withdrawal.amount, f"{payment_account.name} balance")

        transaction = create_transaction(
            db,
            TransactionCreate(date=withdrawal.date, description=f"Owner withdrawal: {withdrawal.description or 'personal use'}"),
            [
                TransactionLineCreate(account_id=drawings.id, debit_amount=withdrawal.amount),
                TransactionLineCreate(account_id=payment_account.id, credit_amount=withdrawal.amount),
            ],
            tenant_id,
            commit=False
        )

        db_withdrawal = Withdrawal(
            tenant_id=tenant_id,
            date=withdrawal.date,
            amount=withdrawal.amount,
            type=withdrawal.type,
            description=withdrawal.description,
            transaction_id=transaction.id,
            created_by=user_id
        )
        add_numbered(db, db_withdrawal, Withdrawal.withdrawal_number, tenant_id, "WD", withdrawal.date)

        tenant = db.query(Tenant).filter(Tenant.id == tenant_id).first()
        if tenant:
            tenant.owner_withdrawals = to_decimal(tenant.owner_withdrawals) + withdrawal.amount

        db.commit()
        db.refresh(db_withdrawal)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Withdrawal {db_withdrawal.withdrawal_number} of {withdrawal.amount} recorded for tenant {tenant_id}")
    return db_withdrawal
