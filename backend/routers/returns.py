from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from database import get_db
from models.order_returns import ReturnStatus, ReturnType
from schemas.returns import OrderReturn, OrderReturnCreate, ReturnRefund, ReturnRejection, SupplierReturnCreate
from crud import returns as returns_crud
from exceptions import AccountNotFoundError
from utils.tenancy import get_tenant_id, get_user_id

router = APIRouter(
    prefix="/returns",
    tags=["Returns"],
)

@router.post("/orders", response_model=OrderReturn, status_code=status.HTTP_201_CREATED)
def create_order_return(
    order_return: OrderReturnCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: Optional[str] = Depends(get_user_id)
):
    try:
        return returns_crud.create_order_return(db, order_return, tenant_id, user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/supplier", response_model=OrderReturn, status_code=status.HTTP_201_CREATED)
def create_supplier_return(
    supplier_return: SupplierReturnCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: Optional[str] = Depends(get_user_id)
):
    try:
        return returns_crud.create_supplier_return(db, supplier_return, tenant_id, user_id)
    except AccountNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/", response_model=List[OrderReturn])
def get_returns(
    return_type: Optional[ReturnType] = None,
    return_status: Optional[ReturnStatus] = None,
    order_id: Optional[int] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return returns_crud.get_returns(db, tenant_id, return_type, return_status, order_id)

@router.post("/{return_id}/approve", response_model=OrderReturn)
def approve_return(
    return_id: int,
    on_date: Optional[date] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: Optional[str] = Depends(get_user_id)
):
    """Approve a pending customer return and post it to the ledger."""
    try:
        return returns_crud.approve_return(db, return_id, tenant_id, on_date=on_date, user_id=user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/{return_id}/refund", response_model=OrderReturn)
def process_refund(
    return_id: int,
    refund: ReturnRefund,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: Optional[str] = Depends(get_user_id)
):
    try:
        return returns_crud.process_refund(db, return_id, refund, tenant_id, user_id)
    except AccountNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/{return_id}/reject", response_model=OrderReturn)
def reject_return(
    return_id: int,
    rejection: ReturnRejection,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: Optional[str] = Depends(get_user_id)
):
    try:
        return returns_crud.reject_return(db, return_id, tenant_id, reason=rejection.reason, user_id=user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
