from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from database import get_db
from schemas.balances import BalanceSummary, CustomerBalance, SupplierBalance
from crud import balances as balances_crud
from utils.tenancy import get_tenant_id

router = APIRouter(
    prefix="/balances",
    tags=["Balances"],
)

@router.get("/summary", response_model=BalanceSummary)
def get_balance_summary(db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    """Receivables, payables and cash position for the dashboard."""
    return balances_crud.get_balance_summary(db, tenant_id)

@router.get("/customers", response_model=List[CustomerBalance])
def get_customer_balances(db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return balances_crud.get_all_customer_balances(db, tenant_id)

@router.get("/customers/{customer_id}", response_model=CustomerBalance)
def get_customer_balance(customer_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    try:
        return balances_crud.calculate_customer_balance(db, customer_id, tenant_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

@router.get("/suppliers", response_model=List[SupplierBalance])
def get_supplier_balances(db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return balances_crud.get_all_supplier_balances(db, tenant_id)

@router.get("/suppliers/{supplier_id}", response_model=SupplierBalance)
def get_supplier_balance(supplier_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    try:
        return balances_crud.calculate_supplier_balance(db, supplier_id, tenant_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
