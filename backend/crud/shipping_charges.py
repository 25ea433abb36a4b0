"""
Shipping charges: a per-city base charge plus per-product quantity charges.

Tenants and products keep their rules as JSON text edited by the admin UI.
Two generations of that JSON are in the wild and both must keep working:

- city charges as a flat ``{"Lahore": 200, "default": 250}`` map, or wrapped
  as ``{"cityCharges": {...}, "defaultCityCharge": 250}``;
- quantity rules as a bare ``[{"min": 1, "max": 5, "charge": 100}]`` list, or
  wrapped as ``{"quantityRules": [...], "defaultQuantityCharge": 150}``.

Unreadable JSON never blocks an order: it is logged and the defaults apply.
"""
from sqlalchemy.orm import Session
from decimal import Decimal
from typing import List
from pydantic import TypeAdapter, ValidationError
import json
import logging
import re

from models.tenants import Tenant
from models.products import Product
from schemas.fee_rules import ShippingRange
from schemas.shipping import ShippingConfig, ShippingConfigUpdate, ShippingItem, ProductShippingRulesUpdate
from utils import to_decimal
from utils.fee_rules import dump_ranges, ordered_ranges, quantity_charge, validate_ranges

logger = logging.getLogger(__name__)

SYSTEM_DEFAULT_CITY_CHARGE = Decimal("200")
SYSTEM_DEFAULT_QUANTITY_CHARGE = Decimal("150")
DEFAULT_CITY_KEY = "default"

_shipping_ranges_adapter = TypeAdapter(List[ShippingRange])


def normalize_city_name(city: str) -> str:
    if not city:
        return ""
    return re.sub(r"\s+", " ", city.strip().lower())


def get_default_shipping_config() -> ShippingConfig:
    return ShippingConfig(
        city_charges={},
        default_city_charge=SYSTEM_DEFAULT_CITY_CHARGE,
        quantity_rules=[ShippingRange(min=1, max=None, charge=SYSTEM_DEFAULT_QUANTITY_CHARGE)],
        default_quantity_charge=SYSTEM_DEFAULT_QUANTITY_CHARGE,
    )


def parse_city_charges(raw: str, owner: str = "tenant"):
    """Return ``(city_charges, default_city_charge)`` from either stored shape."""
    if not raw:
        return {}, SYSTEM_DEFAULT_CITY_CHARGE
    try:
        parsed = json.loads(raw)
        if not isinstance(parsed, dict):
            raise TypeError(f"expected an object, got {type(parsed).__name__}")
        if "cityCharges" in parsed:
            charges = parsed["cityCharges"] or {}
            default = parsed.get("defaultCityCharge")
        else:
            charges = parsed
            default = parsed.get(DEFAULT_CITY_KEY)
        city_charges = {str(city): to_decimal(charge) for city, charge in charges.items()}
        default_charge = to_decimal(default) if default is not None else SYSTEM_DEFAULT_CITY_CHARGE
        return city_charges, default_charge
    except (ValueError, TypeError, ArithmeticError, AttributeError) as e:
        logger.error(f"Invalid shipping city charges for {owner}, using defaults: {e}")
        return {}, SYSTEM_DEFAULT_CITY_CHARGE


def parse_quantity_rules(raw: str, owner: str = "tenant"):
    """Return ``(rules, default_quantity_charge or None)`` from either stored shape."""
    if not raw:
        return [], None
    try:
        parsed = json.loads(raw)
        default = None
        if isinstance(parsed, list):
            rules = parsed
        elif isinstance(parsed, dict):
            rules = parsed.get("quantityRules") or []
            if parsed.get("defaultQuantityCharge") is not None:
                default = to_decimal(parsed["defaultQuantityCharge"])
        else:
            raise TypeError(f"expected a list or object, got {type(parsed).__name__}")
        return ordered_ranges(_shipping_ranges_adapter.validate_python(rules)), default
    except (ValueError, TypeError, ArithmeticError, ValidationError) as e:
        logger.error(f"Invalid shipping quantity rules for {owner}, using defaults: {e}")
        return [], None


def get_tenant_shipping_config(db: Session, tenant_id: str) -> ShippingConfig:
    tenant = db.query(Tenant).filter(Tenant.id == tenant_id).first()
    if not tenant:
        logger.warning(f"Tenant {tenant_id} not found, using system shipping defaults")
        return get_default_shipping_config()

    city_charges, default_city_charge = parse_city_charges(tenant.shipping_city_charges, f"tenant {tenant_id}")
    rules, default_quantity_charge = parse_quantity_rules(tenant.shipping_quantity_rules, f"tenant {tenant_id}")
    return ShippingConfig(
        city_charges=city_charges,
        default_city_charge=default_city_charge,
        quantity_rules=rules,
        default_quantity_charge=default_quantity_charge if default_quantity_charge is not None else SYSTEM_DEFAULT_QUANTITY_CHARGE,
    )


def city_base_charge(config: ShippingConfig, city: str) -> Decimal:
    """Exact match, then a case and whitespace insensitive match, then the default."""
    fallback = config.city_charges.get(DEFAULT_CITY_KEY, config.default_city_charge)
    if not city:
        return fallback

    original = city.strip()
    if original in config.city_charges:
        return config.city_charges[original]

    normalized = normalize_city_name(city)
    for name, charge in config.city_charges.items():
        if name != DEFAULT_CITY_KEY and normalize_city_name(name) == normalized:
            return charge

    logger.info(f"No shipping charge configured for city '{original}', using default {fallback}")
    return fallback


def _product_rules(db: Session, product_id: int, tenant_id: str, config: ShippingConfig):
    """Quantity rules and default per-unit charge that apply to one product."""
    default_charge = config.default_quantity_charge
    rules = config.quantity_rules

    product = None
    if product_id is not None:
        product = db.query(Product).filter(Product.id == product_id, Product.tenant_id == tenant_id).first()

    if product and not product.use_default_shipping:
        if product.shipping_default_quantity_charge is not None:
            default_charge = to_decimal(product.shipping_default_quantity_charge)
        product_rules, _ = parse_quantity_rules(product.shipping_quantity_rules, f"product {product.id}")
        if product_rules:
            rules = product_rules

    if not rules:
        # Nothing configured: every extra unit pays the default charge
        rules = [ShippingRange(min=1, max=None, charge=default_charge)]
    return rules, default_charge


def calculate_shipping_charges(db: Session, tenant_id: str, city: str, items: List[ShippingItem]) -> dict:
    config = get_tenant_shipping_config(db, tenant_id)
    city_charge = to_decimal(city_base_charge(config, city))

    breakdown = []
    total_quantity_charge = Decimal("0")
    for item in items:
        rules, default_charge = _product_rules(db, item.product_id, tenant_id, config)
        charge = quantity_charge(rules, item.quantity, default_charge)
        total_quantity_charge += charge
        breakdown.append({"product_id": item.product_id, "quantity": item.quantity, "charge": charge})

    total = city_charge + total_quantity_charge
    logger.info(f"Shipping for tenant {tenant_id}, city '{city}': base {city_charge} + quantity {total_quantity_charge} = {total}")
    return {
        "city_charge": city_charge,
        "quantity_charges": total_quantity_charge,
        "total": total,
        "items": breakdown,
    }


def update_tenant_shipping_config(db: Session, tenant_id: str, config_update: ShippingConfigUpdate, user_id: str = None) -> ShippingConfig:
    """Validate and store a tenant's shipping config in the wrapped JSON shape."""
    rules = validate_ranges(config_update.quantity_rules, value_field="charge")

    tenant = db.query(Tenant).filter(Tenant.id == tenant_id).first()
    if not tenant:
        raise ValueError(f"Tenant {tenant_id} not found")

    default_city_charge = config_update.default_city_charge
    if default_city_charge is None:
        default_city_charge = SYSTEM_DEFAULT_CITY_CHARGE
    default_quantity_charge = config_update.default_quantity_charge
    if default_quantity_charge is None:
        default_quantity_charge = SYSTEM_DEFAULT_QUANTITY_CHARGE
    if default_city_charge < 0 or default_quantity_charge < 0:
        raise ValueError("Default shipping charges cannot be negative")

    tenant.shipping_city_charges = json.dumps({
        "cityCharges": {city: float(charge) for city, charge in config_update.city_charges.items()},
        "defaultCityCharge": float(default_city_charge),
    })
    tenant.shipping_quantity_rules = json.dumps({
        "quantityRules": dump_ranges(rules),
        "defaultQuantityCharge": float(default_quantity_charge),
    })
    tenant.updated_by = user_id

    db.commit()
    logger.info(f"Shipping config updated for tenant {tenant_id} ({len(rules)} quantity rules)")
    return get_tenant_shipping_config(db, tenant_id)


def update_product_shipping_rules(db: Session, product_id: int, tenant_id: str, rules_update: ProductShippingRulesUpdate, user_id: str = None) -> Product:
    rules = validate_ranges(rules_update.quantity_rules, value_field="charge")
    if rules_update.default_quantity_charge is not None and rules_update.default_quantity_charge < 0:
        raise ValueError("Default quantity charge cannot be negative")

    product = db.query(Product).filter(Product.id == product_id, Product.tenant_id == tenant_id).first()
    if not product:
        raise ValueError(f"Product {product_id} not found")

    product.use_default_shipping = rules_update.use_default_shipping
    product.shipping_quantity_rules = json.dumps(dump_ranges(rules)) if rules else None
    product.shipping_default_quantity_charge = rules_update.default_quantity_charge
    product.updated_by = user_id

    db.commit()
    db.refresh(product)
    return product
