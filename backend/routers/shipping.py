from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
from database import get_db
from schemas.shipping import ProductShippingRulesUpdate, ShippingCalculationRequest, ShippingCharges, ShippingConfig, ShippingConfigUpdate
from crud import shipping_charges as shipping_crud
from utils.tenancy import get_tenant_id, get_user_id

router = APIRouter(
    prefix="/shipping",
    tags=["Shipping"],
)

@router.post("/calculate", response_model=ShippingCharges)
def calculate_shipping(
    request: ShippingCalculationRequest,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return shipping_crud.calculate_shipping_charges(db, tenant_id, request.city, request.items)

@router.get("/config", response_model=ShippingConfig)
def get_shipping_config(db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return shipping_crud.get_tenant_shipping_config(db, tenant_id)

@router.get("/config/defaults", response_model=ShippingConfig)
def get_default_shipping_config():
    return shipping_crud.get_default_shipping_config()

@router.put("/config", response_model=ShippingConfig)
def update_shipping_config(
    config_update: ShippingConfigUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: Optional[str] = Depends(get_user_id)
):
    try:
        return shipping_crud.update_tenant_shipping_config(db, tenant_id, config_update, user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.put("/products/{product_id}")
def update_product_shipping(
    product_id: int,
    rules_update: ProductShippingRulesUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user_id: Optional[str] = Depends(get_user_id)
):
    try:
        product = shipping_crud.update_product_shipping_rules(db, product_id, tenant_id, rules_update, user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return {
        "product_id": product.id,
        "use_default_shipping": product.use_default_shipping,
        "shipping_quantity_rules": product.shipping_quantity_rules,
        "shipping_default_quantity_charge": product.shipping_default_quantity_charge,
    }
