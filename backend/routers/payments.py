from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from database import get_db
from schemas.payments import AdvanceApplication, CustomerPaymentCreate, Payment, SupplierPaymentCreate, SupplierPaymentResult
from crud import payments as payments_crud
from exceptions import AccountNotFoundError
from utils.tenancy import get_tenant_id, get_user_id

router = APIRouter(prefix="/payments", tags=["Payments"])
logger = logging.getLogger("payments")

@router.post("/customer", response_model=Payment, status_code=status.HTTP_201_CREATED)
def record_customer_payment(
    payment: CustomerPaymentCreate,
    verified: bool = True,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: Optional[str] = Depends(get_user_id)
):
    """
    Record money received from a customer.
    With ``verified=false`` the payment is only a claim and nothing is posted until it is verified.
    """
    try:
        if verified:
            return payments_crud.record_customer_payment(db, payment, tenant_id, user_id)
        return payments_crud.create_unverified_payment(db, payment, tenant_id, user_id)
    except AccountNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/supplier", response_model=SupplierPaymentResult, status_code=status.HTTP_201_CREATED)
def record_supplier_payment(
    payment: SupplierPaymentCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: Optional[str] = Depends(get_user_id)
):
    try:
        return payments_crud.record_supplier_payment(db, payment, tenant_id, user_id)
    except AccountNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/{payment_id}/verify", response_model=Payment)
def verify_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: Optional[str] = Depends(get_user_id)
):
    try:
        return payments_crud.verify_payment(db, payment_id, tenant_id, user_id)
    except AccountNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/apply-advance")
def apply_customer_advance(
    application: AdvanceApplication,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    try:
        order = payments_crud.apply_customer_advance(db, application, tenant_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    logger.info(f"Advance applied to order {order.id} for tenant {tenant_id}")
    return {"order_id": order.id, "payment_amount": order.payment_amount}
