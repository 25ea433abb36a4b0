from pydantic import BaseModel, Field, field_validator
from typing import Annotated, List, Optional, Union, Literal
from decimal import Decimal
import enum


class FeeType(str, enum.Enum):
    FIXED = "FIXED"
    PERCENTAGE = "PERCENTAGE"


class ShippingRange(BaseModel):
    min: Decimal = Decimal("1")
    max: Optional[Decimal] = None  # None means no upper bound
    charge: Decimal


class CodFeeRange(BaseModel):
    min: Decimal
    max: Optional[Decimal] = None
    type: FeeType = FeeType.FIXED
    fee: Decimal


class FixedCodFee(BaseModel):
    calculation_type: Literal["FIXED"] = "FIXED"
    fixed_fee: Decimal

    @field_validator('fixed_fee')
    @classmethod
    def validate_fee(cls, v):
        if v < 0:
            raise ValueError("fixed_fee cannot be negative")
        return v


class PercentageCodFee(BaseModel):
    calculation_type: Literal["PERCENTAGE"] = "PERCENTAGE"
    percentage: Decimal

    @field_validator('percentage')
    @classmethod
    def validate_percentage(cls, v):
        if v < 0:
            raise ValueError("percentage cannot be negative")
        return v


class RangeCodFee(BaseModel):
    calculation_type: Literal["RANGE_BASED"] = "RANGE_BASED"
    ranges: List[CodFeeRange] = []
    # Charged when the amount sits below the first range
    default_fee: Decimal = Decimal("0")

    @field_validator('default_fee')
    @classmethod
    def validate_default_fee(cls, v):
        if v < 0:
            raise ValueError("default_fee cannot be negative")
        return v


CodFeeConfig = Annotated[
    Union[FixedCodFee, PercentageCodFee, RangeCodFee],
    Field(discriminator="calculation_type"),
]
