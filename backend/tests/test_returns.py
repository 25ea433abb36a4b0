from decimal import Decimal

import pytest
from pydantic import ValidationError

from crud import balances as balances_crud
from crud import returns as returns_crud
from models.chart_of_accounts import Account
from models.order_returns import (
    RefundMethod,
    ReturnStatus,
    ReturnType,
    ShippingChargeHandling,
    SupplierReturnHandling,
)
from models.orders import OrderStatus
from models.transactions import Transaction
from schemas.returns import OrderReturnCreate, ReturnItemCreate, ReturnRefund, SupplierReturnCreate
from conftest import TENANT_ID, OTHER_TENANT_ID, TODAY


def balance_of(db, code):
    db.expire_all()
    return db.query(Account).filter(Account.code == code, Account.tenant_id == TENANT_ID).one().balance


def full_return(order, handling=None):
    return OrderReturnCreate(
        order_id=order.id, return_type=ReturnType.CUSTOMER_FULL, return_date=TODAY,
        reason="Wrong size", shipping_charge_handling=handling,
    )


def partial_return(order, *quantities):
    """``quantities`` pairs with ``order.items`` by position."""
    return OrderReturnCreate(
        order_id=order.id, return_type=ReturnType.CUSTOMER_PARTIAL, return_date=TODAY,
        items=[ReturnItemCreate(order_item_id=item.id, quantity=q) for item, q in zip(order.items, quantities) if q],
    )


class TestCreateOrderReturn:
    def test_full_return_takes_every_item(self, db, accounts, make_customer, make_order):
        order = make_order(make_customer(), [(500, 2), (300, 1)], shipping_charges=Decimal("200"))

        created = returns_crud.create_order_return(db, full_return(order, ShippingChargeHandling.FULL_REFUND), TENANT_ID)

        assert created.return_number == "RET-2024-1"
        assert created.status == ReturnStatus.PENDING
        assert created.total_amount == Decimal("1500")
        assert created.shipping_charge_amount == Decimal("200")
        assert sorted(item.quantity for item in created.items) == [1, 2]
        # Nothing moves until the return is approved
        db.refresh(order)
        assert order.refund_amount == 0
        assert db.query(Transaction).count() == 0

    def test_customer_paid_shipping_is_kept_out_of_the_refund(self, db, accounts, make_customer, make_order):
        order = make_order(make_customer(), [(1000, 1)], shipping_charges=Decimal("150"))
        created = returns_crud.create_order_return(db, full_return(order, ShippingChargeHandling.CUSTOMER_PAYS), TENANT_ID)
        assert created.total_amount == Decimal("850")

    def test_partial_returns_are_limited_to_remaining_quantity(self, db, accounts, make_customer, make_order):
        order = make_order(make_customer(), [(500, 3)])
        first = returns_crud.create_order_return(db, partial_return(order, 2), TENANT_ID)
        assert first.total_amount == Decimal("1000")

        with pytest.raises(ValueError, match=r"exceeds available quantity \(1\)"):
            returns_crud.create_order_return(db, partial_return(order, 2), TENANT_ID)

    def test_empty_partial_return_is_refused(self, db, accounts, make_customer, make_order):
        order = make_order(make_customer(), [(500, 1)])
        with pytest.raises(ValueError, match="No products selected"):
            returns_crud.create_order_return(db, partial_return(order, 0), TENANT_ID)

    def test_item_of_another_order_is_refused(self, db, accounts, make_customer, make_order):
        customer = make_customer()
        order = make_order(customer, [(500, 1)])
        other = make_order(customer, [(700, 1)])
        request = OrderReturnCreate(
            order_id=order.id, return_type=ReturnType.CUSTOMER_PARTIAL, return_date=TODAY,
            items=[ReturnItemCreate(order_item_id=other.items[0].id, quantity=1)],
        )
        with pytest.raises(ValueError, match="is not part of order"):
            returns_crud.create_order_return(db, request, TENANT_ID)

    def test_second_full_return_is_refused(self, db, accounts, make_customer, make_order):
        order = make_order(make_customer(), [(500, 1)])
        returns_crud.create_order_return(db, full_return(order), TENANT_ID)
        with pytest.raises(ValueError, match="full return already exists"):
            returns_crud.create_order_return(db, full_return(order), TENANT_ID)

    def test_pending_order_cannot_be_returned(self, db, accounts, make_customer, make_order):
        order = make_order(make_customer(), [(500, 1)], status=OrderStatus.PENDING)
        with pytest.raises(ValueError, match="cannot be returned"):
            returns_crud.create_order_return(db, full_return(order), TENANT_ID)

    def test_order_of_another_tenant_is_not_found(self, db, accounts, make_customer, make_order):
        order = make_order(make_customer(tenant_id=OTHER_TENANT_ID), [(500, 1)], tenant_id=OTHER_TENANT_ID)
        with pytest.raises(ValueError, match="not found"):
            returns_crud.create_order_return(db, full_return(order), TENANT_ID)

    def test_supplier_type_is_not_an_order_return(self):
        with pytest.raises(ValidationError):
            OrderReturnCreate(order_id=1, return_type=ReturnType.SUPPLIER, return_date=TODAY)


class TestApproveReturn:
    def test_approval_books_sales_return_against_receivable(self, db, accounts, make_customer, make_order):
        customer = make_customer()
        order = make_order(customer, [(1000, 1)])
        created = returns_crud.create_order_return(db, full_return(order), TENANT_ID)

        approved = returns_crud.approve_return(db, created.id, TENANT_ID, on_date=TODAY, user_id="manager-1")

        assert approved.status == ReturnStatus.APPROVED
        assert approved.updated_by == "manager-1"
        posting = db.query(Transaction).one()
        assert posting.order_return_id == created.id
        assert posting.order_id == order.id
        assert balance_of(db, "4100") == Decimal("-1000")
        assert balance_of(db, "1200") == Decimal("-1000")
        db.refresh(order)
        assert order.refund_amount == Decimal("1000")
        assert balances_crud.calculate_customer_balance(db, customer.id, TENANT_ID)["total_pending"] == 0

    def test_only_pending_returns_are_approved(self, db, accounts, make_customer, make_order):
        order = make_order(make_customer(), [(1000, 1)])
        created = returns_crud.create_order_return(db, full_return(order), TENANT_ID)
        returns_crud.approve_return(db, created.id, TENANT_ID)
        with pytest.raises(ValueError, match="Only pending"):
            returns_crud.approve_return(db, created.id, TENANT_ID)
        assert db.query(Transaction).count() == 1

    def test_unknown_return(self, db, accounts):
        with pytest.raises(ValueError, match="not found"):
            returns_crud.approve_return(db, 404, TENANT_ID)


class TestProcessRefund:
    def _approved(self, db, make_customer, make_order, price=1000, customer=None):
        order = make_order(customer or make_customer(), [(price, 1)])
        created = returns_crud.create_order_return(db, full_return(order), TENANT_ID)
        return returns_crud.approve_return(db, created.id, TENANT_ID)

    def test_cash_refund_pays_out_of_cash(self, db, accounts, make_customer, make_order):
        approved = self._approved(db, make_customer, make_order)

        refunded = returns_crud.process_refund(db, approved.id, ReturnRefund(refund_method=RefundMethod.CASH), TENANT_ID)

        assert refunded.status == ReturnStatus.REFUNDED
        assert refunded.refunded_amount == Decimal("1000")
        assert refunded.refund_method == RefundMethod.CASH
        assert balance_of(db, "1200") == 0
        assert balance_of(db, "1000") == Decimal("-1000")
        assert db.query(Transaction).filter(Transaction.order_return_id == approved.id).count() == 2

    def test_bank_transfer_uses_bank_account(self, db, accounts, make_customer, make_order):
        approved = self._approved(db, make_customer, make_order, price=400)
        returns_crud.process_refund(db, approved.id, ReturnRefund(refund_method=RefundMethod.BANK_TRANSFER), TENANT_ID)
        assert balance_of(db, "1100") == Decimal("-400")
        assert balance_of(db, "1000") == 0

    def test_credit_to_account_becomes_advance(self, db, accounts, make_customer, make_order):
        customer = make_customer(advance_balance=50)
        approved = self._approved(db, make_customer, make_order, price=600, customer=customer)

        returns_crud.process_refund(db, approved.id, ReturnRefund(refund_method=RefundMethod.CREDIT_TO_ACCOUNT), TENANT_ID)

        db.refresh(customer)
        assert customer.advance_balance == Decimal("650")
        assert db.query(Transaction).count() == 1

    def test_refund_needs_approval(self, db, accounts, make_customer, make_order):
        order = make_order(make_customer(), [(1000, 1)])
        created = returns_crud.create_order_return(db, full_return(order), TENANT_ID)
        with pytest.raises(ValueError, match="must be approved"):
            returns_crud.process_refund(db, created.id, ReturnRefund(refund_method=RefundMethod.CASH), TENANT_ID)

    def test_refund_above_return_value_is_refused(self, db, accounts, make_customer, make_order):
        approved = self._approved(db, make_customer, make_order)
        with pytest.raises(ValueError, match="exceeds the return value"):
            returns_crud.process_refund(
                db, approved.id, ReturnRefund(refund_method=RefundMethod.CASH, amount=Decimal("1000.01")), TENANT_ID
            )
        db.refresh(approved)
        assert approved.status == ReturnStatus.APPROVED


class TestRejectReturn:
    def test_pending_return_is_rejected_without_posting(self, db, accounts, make_customer, make_order):
        order = make_order(make_customer(), [(1000, 1)])
        created = returns_crud.create_order_return(db, full_return(order), TENANT_ID)

        rejected = returns_crud.reject_return(db, created.id, TENANT_ID, reason="Item was used")

        assert rejected.status == ReturnStatus.REJECTED
        assert "Rejected: Item was used" in rejected.reason
        assert db.query(Transaction).count() == 0

    def test_rejecting_an_approved_return_reverses_it(self, db, accounts, make_customer, make_order):
        order = make_order(make_customer(), [(1000, 1)])
        created = returns_crud.create_order_return(db, full_return(order), TENANT_ID)
        returns_crud.approve_return(db, created.id, TENANT_ID)

        returns_crud.reject_return(db, created.id, TENANT_ID)

        assert db.query(Transaction).count() == 2
        assert balance_of(db, "4100") == 0
        assert balance_of(db, "1200") == 0
        db.refresh(order)
        assert order.refund_amount == 0

    def test_refunded_return_cannot_be_rejected(self, db, accounts, make_customer, make_order):
        order = make_order(make_customer(), [(1000, 1)])
        created = returns_crud.create_order_return(db, full_return(order), TENANT_ID)
        returns_crud.approve_return(db, created.id, TENANT_ID)
        returns_crud.process_refund(db, created.id, ReturnRefund(refund_method=RefundMethod.CASH), TENANT_ID)
        with pytest.raises(ValueError, match="cannot be rejected"):
            returns_crud.reject_return(db, created.id, TENANT_ID)

    def test_rejected_return_frees_the_items(self, db, accounts, make_customer, make_order):
        order = make_order(make_customer(), [(1000, 1)])
        created = returns_crud.create_order_return(db, full_return(order), TENANT_ID)
        returns_crud.reject_return(db, created.id, TENANT_ID)

        again = returns_crud.create_order_return(db, full_return(order), TENANT_ID)
        assert again.return_number == "RET-2024-2"
        assert again.total_amount == Decimal("1000")


class TestSupplierReturns:
    def test_reduce_payable_credits_inventory(self, db, accounts, make_supplier, make_invoice):
        supplier = make_supplier()
        invoice = make_invoice(supplier, 5000)

        created = returns_crud.create_supplier_return(db, SupplierReturnCreate(
            purchase_invoice_id=invoice.id, return_date=TODAY, amount=Decimal("1200"),
            handling_method=SupplierReturnHandling.REDUCE_AP, reason="Damaged stock"
        ), TENANT_ID)

        assert created.return_type == ReturnType.SUPPLIER
        assert created.status == ReturnStatus.PROCESSED
        assert created.supplier_id == supplier.id
        assert created.refund_account_id is None
        posting = db.query(Transaction).one()
        assert posting.purchase_invoice_id == invoice.id
        assert posting.order_return_id == created.id
        assert balance_of(db, "2000") == Decimal("-1200")
        assert balance_of(db, "1300") == Decimal("-1200")

    def test_refund_lands_in_chosen_account(self, db, accounts, make_supplier, make_invoice):
        invoice = make_invoice(make_supplier(), 5000)
        created = returns_crud.create_supplier_return(db, SupplierReturnCreate(
            purchase_invoice_id=invoice.id, return_date=TODAY, amount=Decimal("500"),
            handling_method=SupplierReturnHandling.REFUND, refund_account_id=accounts["1100"].id
        ), TENANT_ID)

        assert created.refund_account_id == accounts["1100"].id
        assert balance_of(db, "1100") == Decimal("500")
        assert balance_of(db, "2000") == 0

    def test_returns_cannot_exceed_the_invoice(self, db, accounts, make_supplier, make_invoice):
        invoice = make_invoice(make_supplier(), 5000)
        request = dict(purchase_invoice_id=invoice.id, return_date=TODAY, handling_method=SupplierReturnHandling.REDUCE_AP)
        returns_crud.create_supplier_return(db, SupplierReturnCreate(amount=Decimal("4000"), **request), TENANT_ID)
        with pytest.raises(ValueError, match=r"exceeds what is left on invoice .* \(1000"):
            returns_crud.create_supplier_return(db, SupplierReturnCreate(amount=Decimal("1500"), **request), TENANT_ID)
        assert db.query(Transaction).count() == 1

    def test_return_only_invoice_is_refused(self, db, accounts, make_supplier, make_invoice):
        invoice = make_invoice(make_supplier(), 800)
        invoice.is_return_only = True
        db.commit()
        with pytest.raises(ValueError, match="already records a return"):
            returns_crud.create_supplier_return(db, SupplierReturnCreate(
                purchase_invoice_id=invoice.id, return_date=TODAY, amount=Decimal("100"),
                handling_method=SupplierReturnHandling.REDUCE_AP
            ), TENANT_ID)

    def test_refund_account_must_hold_money(self, db, accounts, make_supplier, make_invoice):
        invoice = make_invoice(make_supplier(), 5000)
        with pytest.raises(ValueError, match="not a cash or bank account"):
            returns_crud.create_supplier_return(db, SupplierReturnCreate(
                purchase_invoice_id=invoice.id, return_date=TODAY, amount=Decimal("100"),
                handling_method=SupplierReturnHandling.REFUND, refund_account_id=accounts["4000"].id
            ), TENANT_ID)
        assert db.query(Transaction).count() == 0

    def test_refund_requires_an_account(self):
        with pytest.raises(ValidationError, match="refund account is required"):
            SupplierReturnCreate(
                purchase_invoice_id=1, return_date=TODAY, amount=Decimal("100"),
                handling_method=SupplierReturnHandling.REFUND
            )


def test_returns_are_listed_by_type(db, accounts, make_customer, make_order, make_supplier, make_invoice):
    order = make_order(make_customer(), [(1000, 1)])
    returns_crud.create_order_return(db, full_return(order), TENANT_ID)
    invoice = make_invoice(make_supplier(), 5000)
    returns_crud.create_supplier_return(db, SupplierReturnCreate(
        purchase_invoice_id=invoice.id, return_date=TODAY, amount=Decimal("100"),
        handling_method=SupplierReturnHandling.REDUCE_AP
    ), TENANT_ID)

    assert len(returns_crud.get_returns(db, TENANT_ID)) == 2
    assert [r.return_type for r in returns_crud.get_returns(db, TENANT_ID, return_type=ReturnType.SUPPLIER)] == [ReturnType.SUPPLIER]
    assert returns_crud.get_returns(db, TENANT_ID, order_id=order.id)[0].order_id == order.id
    assert returns_crud.get_returns(db, OTHER_TENANT_ID) == []
