from datetime import date
from decimal import Decimal

import pytest

from crud import expenses as expenses_crud
from crud import withdrawals as withdrawals_crud
from crud.opening_balances import set_account_opening_balance
from exceptions import InsufficientBalanceError
from models.chart_of_accounts import Account
from models.tenants import Tenant
from models.transactions import Transaction
from schemas.expenses import ExpenseCreate
from schemas.withdrawals import WithdrawalCreate
from conftest import TENANT_ID, TODAY


def balance_of(db, code):
    db.expire_all()
    return db.query(Account).filter(Account.code == code, Account.tenant_id == TENANT_ID).one().balance


class TestExpenses:
    @pytest.mark.parametrize("category,code", [
        ("petrol", "5300"),
        ("Utility", "5400"),
        ("RENT", "5700"),
        ("stationery", "5800"),
    ])
    def test_category_maps_to_expense_account(self, category, code):
        assert expenses_crud.expense_account_code(category) == code

    def test_expense_posts_to_category_account(self, db, accounts):
        expense = expenses_crud.create_expense(db, ExpenseCreate(
            date=TODAY, category=" internet ", amount=Decimal("2500"), description="Fibre bill",
            payment_method="Bank Transfer",
        ), TENANT_ID, user_id="owner")

        assert expense.expense_number == "EXP-2024-1"
        assert expense.category == "INTERNET"
        assert expense.account_id == accounts["5500"].id
        assert expense.created_by == "owner"
        assert balance_of(db, "5500") == Decimal("2500")
        assert balance_of(db, "1100") == Decimal("-2500")

    def test_listing_filters(self, db, accounts):
        expenses_crud.create_expense(db, ExpenseCreate(date=date(2024, 3, 1), category="petrol", amount=Decimal("100")), TENANT_ID)
        expenses_crud.create_expense(db, ExpenseCreate(date=date(2024, 3, 9), category="petrol", amount=Decimal("120")), TENANT_ID)
        expenses_crud.create_expense(db, ExpenseCreate(date=date(2024, 3, 9), category="rent", amount=Decimal("9000")), TENANT_ID)

        assert len(expenses_crud.get_expenses(db, TENANT_ID)) == 3
        assert len(expenses_crud.get_expenses(db, TENANT_ID, category="Petrol")) == 2
        assert len(expenses_crud.get_expenses(db, TENANT_ID, start_date=date(2024, 3, 5))) == 2

    def test_zero_amount_is_rejected(self):
        with pytest.raises(ValueError):
            ExpenseCreate(date=TODAY, category="petrol", amount=Decimal("0"))


class TestWithdrawals:
    def test_withdrawal_from_cash(self, db, accounts, make_tenant):
        make_tenant()
        set_account_opening_balance(db, accounts["1000"].id, Decimal("5000"), TENANT_ID, on_date=date(2024, 1, 1))

        withdrawal = withdrawals_crud.create_withdrawal(db, WithdrawalCreate(
            date=TODAY, amount=Decimal("1500"), description="School fees"
        ), TENANT_ID)

        assert withdrawal.withdrawal_number == "WD-2024-1"
        assert balance_of(db, "1000") == Decimal("3500")
        assert balance_of(db, "3100") == Decimal("1500")
        assert db.query(Tenant).filter(Tenant.id == TENANT_ID).one().owner_withdrawals == Decimal("1500")

    def test_more_than_available_is_refused(self, db, accounts):
        set_account_opening_balance(db, accounts["1000"].id, Decimal("1000"), TENANT_ID)
        with pytest.raises(InsufficientBalanceError, match="Cash balance"):
            withdrawals_crud.create_withdrawal(db, WithdrawalCreate(date=TODAY, amount=Decimal("1000.01")), TENANT_ID)
        assert db.query(Transaction).count() == 1
        assert balance_of(db, "1000") == Decimal("1000")

    def test_withdrawal_from_bank(self, db, accounts):
        set_account_opening_balance(db, accounts["1100"].id, Decimal("20000"), TENANT_ID)
        withdrawals_crud.create_withdrawal(db, WithdrawalCreate(
            date=TODAY, amount=Decimal("20000"), payment_method="Cheque"
        ), TENANT_ID)
        assert balance_of(db, "1100") == 0
