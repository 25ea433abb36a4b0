from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from models.chart_of_accounts import AccountType, AccountSubType


class AccountBase(BaseModel):
    code: str
    name: str
    type: AccountType
    account_sub_type: Optional[AccountSubType] = None
    parent_id: Optional[int] = None
    description: Optional[str] = None
    is_active: bool = True


class AccountCreate(AccountBase):
    # Starting balance for a brand new account; ignored when the code already exists
    balance: Optional[Decimal] = None


class AccountUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[AccountType] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class Account(AccountBase):
    id: int
    tenant_id: str
    balance: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OpeningBalanceCreate(BaseModel):
    amount: Decimal
    entry_date: Optional[date] = None
    description: Optional[str] = None
