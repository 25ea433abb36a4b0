from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from models import chart_of_accounts as chart_of_accounts_model
from models.chart_of_accounts import Account, AccountType, AccountSubType
from models.transactions import TransactionLine
from schemas.chart_of_accounts import AccountCreate, AccountUpdate
from exceptions import AccountNotFoundError

logger = logging.getLogger(__name__)

CASH_ACCOUNT_CODE = "1000"
BANK_ACCOUNT_CODE = "1100"
ACCOUNTS_RECEIVABLE_CODE = "1200"
ADVANCE_TO_SUPPLIERS_CODE = "1230"
INVENTORY_CODE = "1300"
ACCOUNTS_PAYABLE_CODE = "2000"
COD_FEE_PAYABLE_CODE = "2200"
OPENING_BALANCE_CODE = "3001"
OWNER_DRAWINGS_CODE = "3100"
RETAINED_EARNINGS_CODE = "3200"
SALES_REVENUE_CODE = "4000"
SALES_RETURNS_CODE = "4100"
SHIPPING_REVENUE_CODE = "4200"
COD_FEE_EXPENSE_CODE = "5200"
OTHER_EXPENSES_CODE = "5800"

# Payment methods that settle through the bank instead of the cash drawer
BANK_PAYMENT_METHODS = {"bank transfer", "cheque"}

STANDARD_ACCOUNTS = [
    # Assets
    {"code": "1000", "name": "Cash", "type": AccountType.ASSET, "account_sub_type": AccountSubType.CASH},
    {"code": "1100", "name": "Bank Account", "type": AccountType.ASSET, "account_sub_type": AccountSubType.BANK},
    {"code": "1200", "name": "Accounts Receivable", "type": AccountType.ASSET},
    {"code": "1210", "name": "Customer Advance Balance", "type": AccountType.ASSET},
    {"code": "1220", "name": "Supplier Advance Balance", "type": AccountType.LIABILITY},
    {"code": "1230", "name": "Advance to Suppliers", "type": AccountType.ASSET},
    {"code": "1300", "name": "Inventory", "type": AccountType.ASSET},
    # Liabilities
    {"code": "2000", "name": "Accounts Payable", "type": AccountType.LIABILITY},
    {"code": "2100", "name": "Accrued Expenses", "type": AccountType.LIABILITY},
    {"code": "2200", "name": "COD Fee Payable", "type": AccountType.LIABILITY},
    # Equity
    {"code": "3000", "name": "Owner Capital", "type": AccountType.EQUITY},
    {"code": "3001", "name": "Opening Balance", "type": AccountType.EQUITY},
    {"code": "3100", "name": "Owner Drawings", "type": AccountType.EQUITY},
    {"code": "3200", "name": "Retained Earnings", "type": AccountType.EQUITY},
    # Income
    {"code": "4000", "name": "Sales Revenue", "type": AccountType.INCOME},
    {"code": "4100", "name": "Sales Returns", "type": AccountType.INCOME},
    {"code": "4200", "name": "Shipping Revenue", "type": AccountType.INCOME},
    {"code": "4300", "name": "Shipping Variance Income", "type": AccountType.INCOME},
    {"code": "4400", "name": "Other Income", "type": AccountType.INCOME},
    # Expenses
    {"code": "5000", "name": "Cost of Goods Sold", "type": AccountType.EXPENSE},
    {"code": "5100", "name": "Shipping Expense", "type": AccountType.EXPENSE},
    {"code": "5110", "name": "Shipping Variance Expense", "type": AccountType.EXPENSE},
    {"code": "5200", "name": "COD Fee Expense", "type": AccountType.EXPENSE},
    {"code": "5300", "name": "Petrol Expense", "type": AccountType.EXPENSE},
    {"code": "5400", "name": "Utility Expense", "type": AccountType.EXPENSE},
    {"code": "5500", "name": "Internet Expense", "type": AccountType.EXPENSE},
    {"code": "5600", "name": "Phone Expense", "type": AccountType.EXPENSE},
    {"code": "5700", "name": "Rent Expense", "type": AccountType.EXPENSE},
    {"code": "5800", "name": "Other Expenses", "type": AccountType.EXPENSE},
]

STANDARD_ACCOUNTS_BY_CODE = {definition["code"]: definition for definition in STANDARD_ACCOUNTS}


def get_account_by_code(db: Session, code: str, tenant_id: str) -> Optional[Account]:
    return db.query(chart_of_accounts_model.Account).filter(
        chart_of_accounts_model.Account.code == code,
        chart_of_accounts_model.Account.tenant_id == tenant_id
    ).first()


def get_account(db: Session, account_id: int, tenant_id: str) -> Optional[Account]:
    return db.query(Account).filter(Account.id == account_id, Account.tenant_id == tenant_id).first()


def require_account(db: Session, account_id: int, tenant_id: str) -> Account:
    account = get_account(db, account_id, tenant_id)
    if not account:
        raise AccountNotFoundError(account_id, tenant_id)
    return account


def get_accounts(db: Session, tenant_id: str, account_type: AccountType = None, include_inactive: bool = False) -> List[Account]:
    query = db.query(Account).filter(Account.tenant_id == tenant_id)
    if not include_inactive:
        query = query.filter(Account.is_active == True)
    if account_type:
        query = query.filter(Account.type == account_type)
    return query.order_by(Account.code).all()


def get_payment_accounts(db: Session, tenant_id: str, sub_type: AccountSubType = None) -> List[Account]:
    """Active cash and bank accounts that can pay or receive money."""
    query = db.query(Account).filter(
        Account.tenant_id == tenant_id,
        Account.type == AccountType.ASSET,
        Account.is_active == True,
    )
    if sub_type:
        query = query.filter(Account.account_sub_type == sub_type)
    else:
        query = query.filter(Account.account_sub_type.in_([AccountSubType.CASH, AccountSubType.BANK]))
    return query.order_by(Account.code).all()


def get_or_create_account(db: Session, account: AccountCreate, tenant_id: str, commit: bool = True) -> Account:
    """
    Return the tenant's account with ``account.code``, creating it on first use.

    An existing account is returned untouched, including its balance. When two
    requests race to create the same code, the loser's insert fails on the
    ``(tenant_id, code)`` constraint inside a savepoint and the winner's row is
    read back instead.
    """
    existing = get_account_by_code(db, account.code, tenant_id)
    if existing:
        return existing

    data = account.model_dump(exclude={"balance"})
    db_account = Account(**data, balance=account.balance or 0, tenant_id=tenant_id)
    try:
        with db.begin_nested():
            db.add(db_account)
    except IntegrityError:
        logger.info(f"Account {account.code} was created concurrently for tenant {tenant_id}, reusing it")
        existing = get_account_by_code(db, account.code, tenant_id)
        if existing is None:
            raise
        return existing

    logger.info(f"Created account {account.code} ({account.name}) for tenant {tenant_id}")
    if commit:
        db.commit()
        db.refresh(db_account)
    return db_account


def get_standard_account(db: Session, code: str, tenant_id: str, commit: bool = True) -> Account:
    """Existing account for ``code``, else one created from the standard chart."""
    existing = get_account_by_code(db, code, tenant_id)
    if existing:
        return existing
    definition = STANDARD_ACCOUNTS_BY_CODE.get(code)
    if definition is None:
        raise AccountNotFoundError(code, tenant_id)
    return get_or_create_account(db, AccountCreate(**definition), tenant_id, commit=commit)


def initialize_chart_of_accounts(db: Session, tenant_id: str) -> List[Account]:
    """Seed the standard chart for a tenant. Safe to run again at any time."""
    accounts = [
        get_or_create_account(db, AccountCreate(**definition), tenant_id, commit=False)
        for definition in STANDARD_ACCOUNTS
    ]
    db.commit()
    logger.info(f"Chart of accounts initialized for tenant {tenant_id} ({len(accounts)} accounts)")
    return accounts


def resolve_payment_account(db: Session, tenant_id: str, account_id: int = None, payment_method: str = None, commit: bool = True) -> Account:
    """
    Pick the cash or bank account money moves through.

    An explicit ``account_id`` must be an ASSET account flagged CASH or BANK.
    Without one, bank transfers and cheques go to the Bank account and
    everything else to Cash.
    """
    if account_id is not None:
        account = require_account(db, account_id, tenant_id)
        if account.type != AccountType.ASSET or account.account_sub_type not in (AccountSubType.CASH, AccountSubType.BANK):
            raise ValueError(f"Account {account.code} is not a cash or bank account")
        return account

    method = (payment_method or "").strip().lower()
    code = BANK_ACCOUNT_CODE if method in BANK_PAYMENT_METHODS else CASH_ACCOUNT_CODE
    return get_standard_account(db, code, tenant_id, commit=commit)


def _has_transaction_lines(db: Session, account_id: int) -> bool:
    return db.query(TransactionLine.id).filter(TransactionLine.account_id == account_id).first() is not None


def update_account(db: Session, account_id: int, account_update: AccountUpdate, tenant_id: str) -> Account:
    db_account = require_account(db, account_id, tenant_id)

    update_data = account_update.model_dump(exclude_unset=True)
    if "type" in update_data and update_data["type"] != db_account.type and _has_transaction_lines(db, db_account.id):
        raise ValueError(f"Cannot change the type of account {db_account.code}: it has posted transactions")
    if update_data.get("is_active") is False and _has_transaction_lines(db, db_account.id):
        raise ValueError(f"Cannot deactivate account {db_account.code}: it has posted transactions")

    for key, value in update_data.items():
        setattr(db_account, key, value)

    db.commit()
    db.refresh(db_account)
    return db_account


def deactivate_account(db: Session, account_id: int, tenant_id: str) -> Account:
    return update_account(db, account_id, AccountUpdate(is_active=False), tenant_id)
