from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
from database import get_db
from crud import orders as orders_crud
from utils.tenancy import get_tenant_id, get_user_id

router = APIRouter(
    prefix="/orders",
    tags=["Orders"],
)

@router.post("/{order_id}/confirm")
def confirm_order(
    order_id: int,
    on_date: Optional[date] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: Optional[str] = Depends(get_user_id)
):
    """Confirm a pending order and post its sale to the ledger."""
    try:
        order = orders_crud.confirm_order(db, order_id, tenant_id, on_date=on_date, user_id=user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    totals = orders_crud.calculate_order_total(order)
    return {
        "order_id": order.id,
        "order_number": order.order_number,
        "status": order.status.value,
        "cod_fee": order.cod_fee,
        "total": totals["total"],
    }
