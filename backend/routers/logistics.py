from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime
from database import get_db
from schemas.logistics import CodFeeConfigUpdate, CodFeePeriodSummary, CodFeeRequest, CodFeeResult, LogisticsCompany
from crud import cod_fee as cod_fee_crud
from utils.tenancy import get_tenant_id, get_user_id

router = APIRouter(
    prefix="/logistics",
    tags=["Logistics"],
)

@router.get("/cod-fees", response_model=CodFeePeriodSummary)
def get_cod_fees(
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
    logistics_company_id: Optional[int] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    """COD amounts and fees of orders in a period, totalled per logistics company."""
    return cod_fee_crud.get_cod_fees_by_period(
        db, tenant_id, from_date=from_date, to_date=to_date, logistics_company_id=logistics_company_id
    )

@router.post("/{logistics_company_id}/cod-fee", response_model=CodFeeResult)
def calculate_cod_fee(
    logistics_company_id: int,
    request: CodFeeRequest,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    try:
        return cod_fee_crud.calculate_cod_fee(db, logistics_company_id, request.cod_amount, tenant_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.put("/{logistics_company_id}/cod-fee-config", response_model=LogisticsCompany)
def set_cod_fee_config(
    logistics_company_id: int,
    config_update: CodFeeConfigUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: Optional[str] = Depends(get_user_id)
):
    try:
        return cod_fee_crud.set_cod_fee_config(db, logistics_company_id, config_update.config, tenant_id, user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
