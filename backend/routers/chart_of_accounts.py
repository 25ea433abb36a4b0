from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from models.chart_of_accounts import AccountType, AccountSubType
from schemas.chart_of_accounts import Account, AccountCreate, AccountUpdate, OpeningBalanceCreate
from schemas.transactions import Transaction
from crud import chart_of_accounts as chart_of_accounts_crud
from crud import opening_balances as opening_balances_crud
from exceptions import AccountNotFoundError
from utils.tenancy import get_tenant_id

router = APIRouter(
    prefix="/accounts",
    tags=["Chart of Accounts"],
)

@router.get("/", response_model=List[Account])
def get_accounts(
    account_type: Optional[AccountType] = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return chart_of_accounts_crud.get_accounts(db, tenant_id, account_type=account_type, include_inactive=include_inactive)

@router.post("/", response_model=Account, status_code=status.HTTP_201_CREATED)
def create_account(
    account: AccountCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """Create an account, or return the existing one with the same code."""
    return chart_of_accounts_crud.get_or_create_account(db, account, tenant_id)

@router.post("/initialize", response_model=List[Account])
def initialize_chart_of_accounts(
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """Seed the standard chart of accounts. Existing accounts are left as they are."""
    return chart_of_accounts_crud.initialize_chart_of_accounts(db, tenant_id)

@router.get("/payment-accounts", response_model=List[Account])
def get_payment_accounts(
    sub_type: Optional[AccountSubType] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return chart_of_accounts_crud.get_payment_accounts(db, tenant_id, sub_type=sub_type)

@router.patch("/{account_id}", response_model=Account)
def update_account(
    account_id: int,
    account_update: AccountUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    try:
        return chart_of_accounts_crud.update_account(db, account_id, account_update, tenant_id)
    except AccountNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/{account_id}/opening-balance", response_model=Transaction, status_code=status.HTTP_201_CREATED)
def set_opening_balance(
    account_id: int,
    opening_balance: OpeningBalanceCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    try:
        return opening_balances_crud.set_account_opening_balance(
            db,
            account_id,
            opening_balance.amount,
            tenant_id,
            on_date=opening_balance.entry_date,
            description=opening_balance.description
        )
    except AccountNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
