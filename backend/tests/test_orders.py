import json
from decimal import Decimal

import pytest

from crud import orders as orders_crud
from models.chart_of_accounts import Account
from models.logistics_companies import CodFeeCalculationType
from models.orders import CodFeePaidBy, OrderStatus
from models.transactions import Transaction, TransactionLine
from conftest import TENANT_ID, OTHER_TENANT_ID, TODAY


def balance_of(db, code):
    db.expire_all()
    return db.query(Account).filter(Account.code == code, Account.tenant_id == TENANT_ID).one().balance


class TestCalculateOrderTotal:
    def test_business_paid_cod_fee_is_not_billed(self, db, make_customer, make_order):
        order = make_order(
            make_customer(), [(1000, 2), (250, 4)], shipping_charges=Decimal("200"),
            cod_fee=Decimal("45"), cod_fee_paid_by=CodFeePaidBy.BUSINESS,
        )
        totals = orders_crud.calculate_order_total(order)
        assert totals["products"] == Decimal("3000")
        assert totals["customer_cod_fee"] == 0
        assert totals["total"] == Decimal("3200")

    def test_customer_paid_cod_fee_is_billed(self, db, make_customer, make_order):
        order = make_order(
            make_customer(), [(1000, 1)], cod_fee=Decimal("45"), cod_fee_paid_by=CodFeePaidBy.CUSTOMER,
        )
        assert orders_crud.calculate_order_total(order)["total"] == Decimal("1045")


class TestConfirmOrder:
    def test_sale_is_booked(self, db, accounts, make_customer, make_order):
        order = make_order(make_customer(), [(1500, 2)], status=OrderStatus.PENDING, shipping_charges=Decimal("250"))

        confirmed = orders_crud.confirm_order(db, order.id, TENANT_ID, on_date=TODAY, user_id="clerk")

        assert confirmed.status == OrderStatus.CONFIRMED
        assert confirmed.updated_by == "clerk"
        assert balance_of(db, "1200") == Decimal("3250")
        assert balance_of(db, "4000") == Decimal("3000")
        assert balance_of(db, "4200") == Decimal("250")
        txn = db.query(Transaction).filter(Transaction.order_id == order.id).one()
        assert txn.description == "Sale - order ORD-1"

    def test_business_absorbs_cod_fee(self, db, accounts, make_customer, make_order, make_logistics_company):
        company = make_logistics_company(
            CodFeeCalculationType.RANGE_BASED,
            cod_fee_rules=json.dumps([
                {"min": 0, "max": 5000, "type": "FIXED", "fee": 100},
                {"min": 5000, "max": None, "type": "PERCENTAGE", "fee": 2},
            ]),
        )
        order = make_order(make_customer(), [(4000, 2)], status=OrderStatus.PENDING, logistics_company_id=company.id)

        confirmed = orders_crud.confirm_order(db, order.id, TENANT_ID, on_date=TODAY)

        assert confirmed.cod_fee_paid_by == CodFeePaidBy.BUSINESS
        assert confirmed.cod_amount == Decimal("8000")
        assert confirmed.cod_fee == Decimal("160")
        assert balance_of(db, "1200") == Decimal("8000")
        assert balance_of(db, "5200") == Decimal("160")
        assert balance_of(db, "2200") == Decimal("160")

    def test_customer_pays_cod_fee(self, db, accounts, make_customer, make_order):
        order = make_order(
            make_customer(), [(1000, 1)], status=OrderStatus.PENDING,
            cod_fee=Decimal("50"), cod_fee_paid_by=CodFeePaidBy.CUSTOMER,
        )
        orders_crud.confirm_order(db, order.id, TENANT_ID, on_date=TODAY)

        assert balance_of(db, "1200") == Decimal("1050")
        assert balance_of(db, "2200") == Decimal("50")
        assert balance_of(db, "5200") == 0

    def test_lines_balance(self, db, accounts, make_customer, make_order):
        order = make_order(
            make_customer(), [(999, 3)], status=OrderStatus.PENDING, shipping_charges=Decimal("180"),
            cod_fee=Decimal("30"), cod_fee_paid_by=CodFeePaidBy.BUSINESS,
        )
        orders_crud.confirm_order(db, order.id, TENANT_ID, on_date=TODAY)
        lines = db.query(TransactionLine).all()
        assert sum(line.debit_amount for line in lines) == sum(line.credit_amount for line in lines)

    def test_only_pending_orders(self, db, accounts, make_customer, make_order):
        order = make_order(make_customer(), [(100, 1)])
        with pytest.raises(ValueError, match="only pending orders"):
            orders_crud.confirm_order(db, order.id, TENANT_ID)

    def test_empty_order(self, db, accounts, make_customer, make_order):
        order = make_order(make_customer(), [], status=OrderStatus.PENDING)
        with pytest.raises(ValueError, match="nothing to invoice"):
            orders_crud.confirm_order(db, order.id, TENANT_ID)
        db.refresh(order)
        assert order.status == OrderStatus.PENDING

    def test_order_of_another_tenant(self, db, accounts, make_customer, make_order):
        order = make_order(make_customer(tenant_id=OTHER_TENANT_ID), [(100, 1)],
                           status=OrderStatus.PENDING, tenant_id=OTHER_TENANT_ID)
        with pytest.raises(ValueError, match="not found"):
            orders_crud.confirm_order(db, order.id, TENANT_ID)
