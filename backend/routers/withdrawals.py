from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
from database import get_db
from schemas.withdrawals import Withdrawal, WithdrawalCreate
from crud import withdrawals as withdrawals_crud
from exceptions import AccountNotFoundError
from utils.tenancy import get_tenant_id, get_user_id

router = APIRouter(
    prefix="/withdrawals",
    tags=["Withdrawals"],
)

@router.post("/", response_model=Withdrawal, status_code=status.HTTP_201_CREATED)
def create_withdrawal(
    withdrawal: WithdrawalCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: Optional[str] = Depends(get_user_id)
):
    try:
        return withdrawals_crud.create_withdrawal(db, withdrawal, tenant_id, user_id)
    except AccountNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
