from sqlalchemy.orm import Session
from datetime import date
from typing import List
import logging

from models.profit_distributions import DistributionStatus, ProfitDistribution
from schemas.profit_distributions import ProfitDistributionCreate, ProfitPayout
from schemas.transactions import TransactionCreate, TransactionLineCreate
from exceptions import InsufficientBalanceError
from crud import chart_of_accounts as chart_of_accounts_crud
from crud.ledger import create_transaction
from utils import to_decimal
from utils.numbering import add_numbered

logger = logging.getLogger(__name__)


def get_profit_distribution(db: Session, distribution_id: int, tenant_id: str) -> ProfitDistribution:
    distribution = db.query(ProfitDistribution).filter(
        ProfitDistribution.id == distribution_id,
        ProfitDistribution.tenant_id == tenant_id
    ).first()
    if not distribution:
        raise ValueError(f"Profit distribution {distribution_id} not found")
    return distribution


def get_profit_distributions(db: Session, tenant_id: str, status: DistributionStatus = None) -> List[ProfitDistribution]:
    query = db.query(ProfitDistribution).filter(ProfitDistribution.tenant_id == tenant_id)
    if status:
        query = query.filter(ProfitDistribution.status == status)
    return query.order_by(ProfitDistribution.date.desc(), ProfitDistribution.id.desc()).all()


def create_profit_distribution(db: Session, distribution: ProfitDistributionCreate, tenant_id: str, user_id: str = None) -> ProfitDistribution:
    try:
        db_distribution = add_numbered(
            db,
            ProfitDistribution(**distribution.model_dump(), tenant_id=tenant_id, status=DistributionStatus.PENDING, created_by=user_id),
            ProfitDistribution.distribution_number,
            tenant_id,
            "PD",
            distribution.date
        )
        db.commit()
        db.refresh(db_distribution)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Profit distribution {db_distribution.distribution_number} of {distribution.total_profit_amount} created for tenant {tenant_id}")
    return db_distribution


def approve_profit_distribution(db: Session, distribution_id: int, tenant_id: str, user_id: str = None) -> ProfitDistribution:
    distribution = get_profit_distribution(db, distribution_id, tenant_id)
    if distribution.status != DistributionStatus.PENDING:
        raise ValueError("Only pending distributions can be approved")
    distribution.status = DistributionStatus.APPROVED
    distribution.updated_by = user_id
    db.commit()
    db.refresh(distribution)
    logger.info(f"Profit distribution {distribution.distribution_number} approved for tenant {tenant_id}")
    return distribution


def distribute_profit(db: Session, distribution_id: int, payout: ProfitPayout, tenant_id: str, user_id: str = None) -> ProfitDistribution:
    """Pay out an approved distribution: Dr Retained Earnings, Cr the cash/bank account it leaves from."""
    distribution = get_profit_distribution(db, distribution_id, tenant_id)
    if distribution.status != DistributionStatus.APPROVED:
        raise ValueError("Only approved distributions can be distributed")

    amount = to_decimal(distribution.total_profit_amount)
    try:
        retained_earnings = chart_of_accounts_crud.get_standard_account(
            db, chart_of_accounts_crud.RETAINED_EARNINGS_CODE, tenant_id, commit=False
        )
        payment_account = chart_of_accounts_crud.resolve_payment_account(
            db, tenant_id, account_id=payout.account_id, payment_method=payout.payment_method, commit=False
        )

        available = to_decimal(payment_account.balance)
        if amount > available:
            raise InsufficientBalanceError(available, amount, f"{payment_account.name} balance")

        transaction = create_transaction(
            db,
            TransactionCreate(
                date=payout.on_date or date.today(),
                description=f"Profit distribution {distribution.distribution_number} ({distribution.from_date} to {distribution.to_date})"
            ),
            [
                TransactionLineCreate(account_id=retained_earnings.id, debit_amount=amount),
                TransactionLineCreate(account_id=payment_account.id, credit_amount=amount),
            ],
            tenant_id,
            commit=False
        )

        distribution.status = DistributionStatus.DISTRIBUTED
        distribution.account_id = payment_account.id
        distribution.transaction_id = transaction.id
        distribution.updated_by = user_id
        db.commit()
        db.refresh(distribution)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Profit distribution {distribution.distribution_number} paid out of {payment_account.code} for tenant {tenant_id}")
    return distribution
