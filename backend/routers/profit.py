from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from database import get_db
from models.profit_distributions import DistributionStatus
from schemas.profit_distributions import ProfitDistribution, ProfitDistributionCreate, ProfitPayout
from crud import profit_distributions as profit_distributions_crud
from exceptions import AccountNotFoundError
from utils.tenancy import get_tenant_id, get_user_id

router = APIRouter(
    prefix="/profit",
    tags=["Profit"],
)

@router.get("/distributions", response_model=List[ProfitDistribution])
def get_profit_distributions(
    distribution_status: Optional[DistributionStatus] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return profit_distributions_crud.get_profit_distributions(db, tenant_id, distribution_status)

@router.post("/distributions", response_model=ProfitDistribution, status_code=status.HTTP_201_CREATED)
def create_profit_distribution(
    distribution: ProfitDistributionCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: Optional[str] = Depends(get_user_id)
):
    try:
        return profit_distributions_crud.create_profit_distribution(db, distribution, tenant_id, user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.put("/distributions/{distribution_id}/approve", response_model=ProfitDistribution)
def approve_profit_distribution(
    distribution_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: Optional[str] = Depends(get_user_id)
):
    try:
        return profit_distributions_crud.approve_profit_distribution(db, distribution_id, tenant_id, user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/distributions/{distribution_id}/distribute", response_model=ProfitDistribution)
def distribute_profit(
    distribution_id: int,
    payout: ProfitPayout,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: Optional[str] = Depends(get_user_id)
):
    """Pay an approved distribution out of cash or bank."""
    try:
        return profit_distributions_crud.distribute_profit(db, distribution_id, payout, tenant_id, user_id)
    except AccountNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
