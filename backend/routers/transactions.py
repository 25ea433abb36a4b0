from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
from database import get_db
from schemas.transactions import Transaction, TransactionCreate, TransactionFilters, TransactionPage, TransactionPost
from crud import ledger as ledger_crud
from exceptions import AccountNotFoundError
from utils.tenancy import get_tenant_id

router = APIRouter(
    prefix="/transactions",
    tags=["Transactions"],
)

@router.post("/", response_model=Transaction, status_code=status.HTTP_201_CREATED)
def create_transaction(
    transaction: TransactionPost,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """
    Post a manual journal entry.
    Debits must equal credits and every account must belong to the tenant.
    """
    header = transaction.model_dump(exclude={"lines"})
    try:
        db_transaction = ledger_crud.create_transaction(
            db, TransactionCreate(**header), transaction.lines, tenant_id
        )
    except AccountNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ledger_crud.get_transaction(db, db_transaction.id, tenant_id)

@router.get("/", response_model=TransactionPage)
def get_transactions(
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    account_id: Optional[int] = None,
    order_id: Optional[int] = None,
    page: int = 1,
    limit: int = 50,
    sort: str = "date",
    order: str = "desc",
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    filters = TransactionFilters(from_date=from_date, to_date=to_date, account_id=account_id, order_id=order_id)
    try:
        return ledger_crud.get_transactions(db, tenant_id, filters, page=page, limit=limit, sort=sort, order=order)
    except AccountNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

@router.get("/{transaction_id}", response_model=Transaction)
def get_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    db_transaction = ledger_crud.get_transaction(db, transaction_id, tenant_id)
    if db_transaction is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return db_transaction
