from sqlalchemy.orm import Session, joinedload
from datetime import datetime
from decimal import Decimal
from typing import List
from pydantic import TypeAdapter, ValidationError
import json
import logging

from models.logistics_companies import LogisticsCompany, CompanyStatus, CodFeeCalculationType
from models.orders import Order
from schemas.fee_rules import CodFeeConfig, CodFeeRange, FixedCodFee, PercentageCodFee, RangeCodFee
from crud.balances import order_total
from utils import to_decimal
from utils.fee_rules import dump_ranges, evaluate_cod_fee, ordered_ranges, validate_ranges

logger = logging.getLogger(__name__)

_cod_ranges_adapter = TypeAdapter(List[CodFeeRange])


def get_logistics_company(db: Session, logistics_company_id: int, tenant_id: str) -> LogisticsCompany:
    company = db.query(LogisticsCompany).filter(
        LogisticsCompany.id == logistics_company_id,
        LogisticsCompany.tenant_id == tenant_id
    ).first()
    if not company:
        raise ValueError("Logistics company not found")
    return company


def _parse_cod_ranges(company: LogisticsCompany):
    """Stored ranges for a company, or None when the JSON cannot be read."""
    if not company.cod_fee_rules:
        return []
    try:
        raw = json.loads(company.cod_fee_rules)
        return ordered_ranges(_cod_ranges_adapter.validate_python(raw))
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        logger.error(f"Invalid COD fee rules for logistics company {company.id}: {e}")
        return None


def load_cod_fee_config(company: LogisticsCompany) -> CodFeeConfig:
    """Build the typed fee config from a company's stored columns."""
    fixed_fee = to_decimal(company.fixed_cod_fee)

    if company.cod_fee_calculation_type == CodFeeCalculationType.PERCENTAGE:
        if company.cod_fee_percentage is None:
            raise ValueError("COD fee percentage not configured")
        return PercentageCodFee(percentage=company.cod_fee_percentage)

    if company.cod_fee_calculation_type == CodFeeCalculationType.RANGE_BASED:
        ranges = _parse_cod_ranges(company)
        if ranges is None:
            # Unreadable rules: charge the company's flat fee (or nothing)
            return FixedCodFee(fixed_fee=fixed_fee)
        return RangeCodFee(ranges=ranges, default_fee=fixed_fee)

    if company.fixed_cod_fee is None:
        raise ValueError("Fixed COD fee not configured")
    return FixedCodFee(fixed_fee=company.fixed_cod_fee)


def calculate_cod_fee(db: Session, logistics_company_id: int, cod_amount, tenant_id: str) -> dict:
    company = get_logistics_company(db, logistics_company_id, tenant_id)
    if company.status != CompanyStatus.ACTIVE:
        raise ValueError("Logistics company is not active")

    config = load_cod_fee_config(company)
    cod_fee = evaluate_cod_fee(config, cod_amount)

    return {
        "cod_fee": cod_fee,
        "cod_amount": to_decimal(cod_amount),
        "calculation_type": company.cod_fee_calculation_type.value,
        "logistics_company_id": company.id,
        "logistics_company_name": company.name,
    }


def set_cod_fee_config(db: Session, logistics_company_id: int, config: CodFeeConfig, tenant_id: str, user_id: str = None) -> LogisticsCompany:
    """Store a company's COD fee rules. Range sets are checked here, once."""
    company = get_logistics_company(db, logistics_company_id, tenant_id)

    company.cod_fee_calculation_type = CodFeeCalculationType(config.calculation_type)
    if isinstance(config, FixedCodFee):
        company.fixed_cod_fee = config.fixed_fee
    elif isinstance(config, PercentageCodFee):
        company.cod_fee_percentage = config.percentage
    else:
        ranges = validate_ranges(config.ranges, value_field="fee")
        company.cod_fee_rules = json.dumps(dump_ranges(ranges))
        if config.default_fee:
            company.fixed_cod_fee = config.default_fee
    company.updated_by = user_id

    db.commit()
    db.refresh(company)
    logger.info(f"COD fee config for logistics company {company.id} set to {config.calculation_type} for tenant {tenant_id}")
    return company


def calculate_order_cod_fee(db: Session, order: Order, tenant_id: str) -> Decimal:
    """COD fee on what is left to collect for ``order`` at delivery."""
    if not order.logistics_company_id:
        raise ValueError("Order has no logistics company")
    cod_amount = order_total(order) - to_decimal(order.payment_amount)
    if cod_amount <= 0:
        raise ValueError("Nothing left to collect on delivery for this order")
    result = calculate_cod_fee(db, order.logistics_company_id, cod_amount, tenant_id)
    return result["cod_fee"]


def get_cod_fees_by_period(
    db: Session,
    tenant_id: str,
    from_date: datetime = None,
    to_date: datetime = None,
    logistics_company_id: int = None
) -> dict:
    query = db.query(Order).options(joinedload(Order.logistics_company)).filter(
        Order.tenant_id == tenant_id,
        Order.cod_amount > 0
    )
    if from_date:
        query = query.filter(Order.created_at >= from_date)
    if to_date:
        query = query.filter(Order.created_at <= to_date)
    if logistics_company_id:
        query = query.filter(Order.logistics_company_id == logistics_company_id)

    orders = query.order_by(Order.created_at.desc(), Order.id.desc()).all()

    summary = {
        "orders": [],
        "total_cod_amount": Decimal("0"),
        "total_cod_fee": Decimal("0"),
        "by_company": {},
    }
    for order in orders:
        cod_amount = to_decimal(order.cod_amount)
        cod_fee = to_decimal(order.cod_fee)
        summary["total_cod_amount"] += cod_amount
        summary["total_cod_fee"] += cod_fee
        summary["orders"].append({
            "order_id": order.id,
            "order_number": order.order_number,
            "cod_amount": cod_amount,
            "cod_fee": cod_fee,
            "logistics_company_id": order.logistics_company_id,
            "created_at": order.created_at,
        })

        if order.logistics_company:
            company = summary["by_company"].setdefault(order.logistics_company.name, {
                "count": 0,
                "total_cod_amount": Decimal("0"),
                "total_cod_fee": Decimal("0"),
            })
            company["count"] += 1
            company["total_cod_amount"] += cod_amount
            company["total_cod_fee"] += cod_fee

    return summary
