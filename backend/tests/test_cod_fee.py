import json
from decimal import Decimal

import pytest

from crud import cod_fee as cod_fee_crud
from exceptions import InvalidRuleSetError
from models.logistics_companies import CodFeeCalculationType, CompanyStatus
from models.orders import CodFeePaidBy
from schemas.fee_rules import CodFeeRange, FeeType, FixedCodFee, PercentageCodFee, RangeCodFee
from conftest import TENANT_ID, OTHER_TENANT_ID

RANGE_RULES = json.dumps([
    {"min": 0, "max": 5000, "type": "FIXED", "fee": 100},
    {"min": 5000, "max": None, "type": "PERCENTAGE", "fee": 2},
])


class TestCalculateCodFee:
    def test_fixed_fee(self, db, make_logistics_company):
        company = make_logistics_company(fixed_cod_fee=Decimal("120"))
        result = cod_fee_crud.calculate_cod_fee(db, company.id, 4000, TENANT_ID)
        assert result["cod_fee"] == Decimal("120.00")
        assert result["calculation_type"] == "FIXED"
        assert result["logistics_company_name"] == "FastCourier"

    def test_percentage_fee(self, db, make_logistics_company):
        company = make_logistics_company(CodFeeCalculationType.PERCENTAGE, cod_fee_percentage=Decimal("1.5"))
        assert cod_fee_crud.calculate_cod_fee(db, company.id, 2000, TENANT_ID)["cod_fee"] == Decimal("30.00")

    def test_range_based_fee(self, db, make_logistics_company):
        company = make_logistics_company(CodFeeCalculationType.RANGE_BASED, cod_fee_rules=RANGE_RULES)
        assert cod_fee_crud.calculate_cod_fee(db, company.id, 8000, TENANT_ID)["cod_fee"] == Decimal("160.00")
        assert cod_fee_crud.calculate_cod_fee(db, company.id, 2500, TENANT_ID)["cod_fee"] == Decimal("100.00")

    def test_malformed_rules_fall_back_to_fixed_fee(self, db, make_logistics_company):
        company = make_logistics_company(
            CodFeeCalculationType.RANGE_BASED, cod_fee_rules="{not json", fixed_cod_fee=Decimal("75")
        )
        assert cod_fee_crud.calculate_cod_fee(db, company.id, 8000, TENANT_ID)["cod_fee"] == Decimal("75.00")

    def test_malformed_rules_without_fixed_fee_charge_nothing(self, db, make_logistics_company):
        company = make_logistics_company(CodFeeCalculationType.RANGE_BASED, cod_fee_rules="[{\"min\": \"x\"}]")
        assert cod_fee_crud.calculate_cod_fee(db, company.id, 8000, TENANT_ID)["cod_fee"] == Decimal("0.00")

    def test_missing_percentage_is_an_error(self, db, make_logistics_company):
        company = make_logistics_company(CodFeeCalculationType.PERCENTAGE)
        with pytest.raises(ValueError, match="percentage not configured"):
            cod_fee_crud.calculate_cod_fee(db, company.id, 1000, TENANT_ID)

    def test_missing_fixed_fee_is_an_error(self, db, make_logistics_company):
        company = make_logistics_company()
        with pytest.raises(ValueError, match="Fixed COD fee not configured"):
            cod_fee_crud.calculate_cod_fee(db, company.id, 1000, TENANT_ID)

    def test_inactive_company(self, db, make_logistics_company):
        company = make_logistics_company(status=CompanyStatus.INACTIVE, fixed_cod_fee=Decimal("50"))
        with pytest.raises(ValueError, match="not active"):
            cod_fee_crud.calculate_cod_fee(db, company.id, 1000, TENANT_ID)

    def test_company_of_another_tenant_is_not_found(self, db, make_logistics_company):
        company = make_logistics_company(fixed_cod_fee=Decimal("50"), tenant_id=OTHER_TENANT_ID)
        with pytest.raises(ValueError, match="not found"):
            cod_fee_crud.calculate_cod_fee(db, company.id, 1000, TENANT_ID)


class TestSetCodFeeConfig:
    def test_range_config_is_validated_and_stored(self, db, make_logistics_company):
        company = make_logistics_company(fixed_cod_fee=Decimal("50"))
        config = RangeCodFee(ranges=[
            CodFeeRange(min=5000, max=None, type=FeeType.PERCENTAGE, fee=2),
            CodFeeRange(min=0, max=5000, fee=100),
        ])
        updated = cod_fee_crud.set_cod_fee_config(db, company.id, config, TENANT_ID)

        assert updated.cod_fee_calculation_type == CodFeeCalculationType.RANGE_BASED
        stored = json.loads(updated.cod_fee_rules)
        assert [rule["min"] for rule in stored] == [0.0, 5000.0]
        assert cod_fee_crud.calculate_cod_fee(db, company.id, 8000, TENANT_ID)["cod_fee"] == Decimal("160.00")

    def test_overlapping_ranges_are_rejected(self, db, make_logistics_company):
        company = make_logistics_company(fixed_cod_fee=Decimal("50"))
        config = RangeCodFee(ranges=[
            CodFeeRange(min=0, max=5000, fee=100),
            CodFeeRange(min=4000, max=None, fee=150),
        ])
        with pytest.raises(InvalidRuleSetError):
            cod_fee_crud.set_cod_fee_config(db, company.id, config, TENANT_ID)

    def test_switch_to_percentage(self, db, make_logistics_company):
        company = make_logistics_company(fixed_cod_fee=Decimal("50"))
        cod_fee_crud.set_cod_fee_config(db, company.id, PercentageCodFee(percentage=3), TENANT_ID)
        assert cod_fee_crud.calculate_cod_fee(db, company.id, 1000, TENANT_ID)["cod_fee"] == Decimal("30.00")

    def test_switch_back_to_fixed(self, db, make_logistics_company):
        company = make_logistics_company(CodFeeCalculationType.PERCENTAGE, cod_fee_percentage=Decimal("1"))
        cod_fee_crud.set_cod_fee_config(db, company.id, FixedCodFee(fixed_fee=90), TENANT_ID)
        assert cod_fee_crud.calculate_cod_fee(db, company.id, 1000, TENANT_ID)["cod_fee"] == Decimal("90.00")


class TestOrderCodFees:
    def test_order_cod_fee_uses_amount_left_to_collect(self, db, make_customer, make_order, make_logistics_company):
        company = make_logistics_company(CodFeeCalculationType.RANGE_BASED, cod_fee_rules=RANGE_RULES)
        order = make_order(
            make_customer(), [(4000, 2)], logistics_company_id=company.id, payment_amount=Decimal("2000")
        )
        # 8000 ordered, 2000 already paid: 6000 collected at the door
        assert cod_fee_crud.calculate_order_cod_fee(db, order, TENANT_ID) == Decimal("120.00")

    def test_fully_paid_order_has_nothing_to_collect(self, db, make_customer, make_order, make_logistics_company):
        company = make_logistics_company(fixed_cod_fee=Decimal("50"))
        order = make_order(make_customer(), [(1000, 1)], logistics_company_id=company.id, payment_amount=Decimal("1000"))
        with pytest.raises(ValueError, match="Nothing left to collect"):
            cod_fee_crud.calculate_order_cod_fee(db, order, TENANT_ID)

    def test_period_summary_groups_by_company(self, db, make_customer, make_order, make_logistics_company):
        fast = make_logistics_company(fixed_cod_fee=Decimal("50"))
        slow = make_logistics_company(fixed_cod_fee=Decimal("80"), name="SlowPost")
        customer = make_customer()
        make_order(customer, [(1000, 1)], logistics_company_id=fast.id, cod_amount=Decimal("1000"),
                   cod_fee=Decimal("50"), cod_fee_paid_by=CodFeePaidBy.BUSINESS)
        make_order(customer, [(3000, 1)], logistics_company_id=fast.id, cod_amount=Decimal("3000"),
                   cod_fee=Decimal("50"), cod_fee_paid_by=CodFeePaidBy.BUSINESS)
        make_order(customer, [(2000, 1)], logistics_company_id=slow.id, cod_amount=Decimal("2000"),
                   cod_fee=Decimal("80"), cod_fee_paid_by=CodFeePaidBy.CUSTOMER)
        make_order(customer, [(500, 1)])

        summary = cod_fee_crud.get_cod_fees_by_period(db, TENANT_ID)
        assert len(summary["orders"]) == 3
        assert summary["total_cod_amount"] == Decimal("6000")
        assert summary["total_cod_fee"] == Decimal("180")
        assert summary["by_company"]["FastCourier"]["count"] == 2
        assert summary["by_company"]["SlowPost"]["total_cod_fee"] == Decimal("80")

        only_slow = cod_fee_crud.get_cod_fees_by_period(db, TENANT_ID, logistics_company_id=slow.id)
        assert only_slow["total_cod_amount"] == Decimal("2000")
