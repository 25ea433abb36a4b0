from pydantic import BaseModel, field_validator
from typing import Dict, List, Optional
from decimal import Decimal
from .fee_rules import ShippingRange


class ShippingConfig(BaseModel):
    city_charges: Dict[str, Decimal] = {}
    default_city_charge: Decimal
    quantity_rules: List[ShippingRange] = []
    default_quantity_charge: Decimal


class ShippingConfigUpdate(BaseModel):
    city_charges: Dict[str, Decimal] = {}
    default_city_charge: Optional[Decimal] = None
    quantity_rules: List[ShippingRange] = []
    default_quantity_charge: Optional[Decimal] = None

    @field_validator('city_charges')
    @classmethod
    def validate_city_charges(cls, v):
        for city, charge in v.items():
            if charge < 0:
                raise ValueError(f"Charge for {city} cannot be negative")
        return v


class ProductShippingRulesUpdate(BaseModel):
    use_default_shipping: bool = True
    quantity_rules: List[ShippingRange] = []
    default_quantity_charge: Optional[Decimal] = None


class ShippingItem(BaseModel):
    product_id: Optional[int] = None
    quantity: int

    @field_validator('quantity')
    @classmethod
    def validate_quantity(cls, v):
        if v < 1:
            raise ValueError("quantity must be at least 1")
        return v


class ShippingCalculationRequest(BaseModel):
    city: Optional[str] = None
    items: List[ShippingItem] = []


class ProductShippingCharge(BaseModel):
    product_id: Optional[int] = None
    quantity: int
    charge: Decimal


class ShippingCharges(BaseModel):
    city_charge: Decimal
    quantity_charges: Decimal
    total: Decimal
    items: List[ProductShippingCharge] = []
