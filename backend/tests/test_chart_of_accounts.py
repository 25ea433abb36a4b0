from datetime import date
from decimal import Decimal

import pytest

from crud import chart_of_accounts as chart_of_accounts_crud
from crud.ledger import create_transaction
from exceptions import AccountNotFoundError
from models.chart_of_accounts import Account, AccountSubType, AccountType
from schemas.chart_of_accounts import AccountCreate, AccountUpdate
from schemas.transactions import TransactionCreate, TransactionLineCreate
from conftest import TENANT_ID, OTHER_TENANT_ID


class TestInitializeChartOfAccounts:
    def test_seeds_standard_chart(self, db, accounts):
        assert len(accounts) == len(chart_of_accounts_crud.STANDARD_ACCOUNTS)
        assert accounts["1000"].account_sub_type == AccountSubType.CASH
        assert accounts["2000"].type == AccountType.LIABILITY
        assert accounts["4000"].name == "Sales Revenue"

    def test_running_twice_creates_nothing_new(self, db, accounts):
        accounts["1000"].balance = Decimal("500")
        db.commit()

        chart_of_accounts_crud.initialize_chart_of_accounts(db, TENANT_ID)

        assert db.query(Account).filter(Account.tenant_id == TENANT_ID).count() == len(accounts)
        assert chart_of_accounts_crud.get_account_by_code(db, "1000", TENANT_ID).balance == Decimal("500")

    def test_each_tenant_gets_its_own_chart(self, db, accounts):
        chart_of_accounts_crud.initialize_chart_of_accounts(db, OTHER_TENANT_ID)
        mine = chart_of_accounts_crud.get_account_by_code(db, "1000", TENANT_ID)
        theirs = chart_of_accounts_crud.get_account_by_code(db, "1000", OTHER_TENANT_ID)
        assert mine.id != theirs.id


class TestGetOrCreateAccount:
    def test_creates_once(self, db):
        definition = AccountCreate(code="1150", name="Mobile Wallet", type=AccountType.ASSET,
                             account_sub_type=AccountSubType.BANK, balance=Decimal("250"))
        first = chart_of_accounts_crud.get_or_create_account(db, definition, TENANT_ID)
        second = chart_of_accounts_crud.get_or_create_account(db, definition, TENANT_ID)
        assert first.id == second.id
        assert first.balance == Decimal("250")
        assert db.query(Account).count() == 1

    def test_existing_account_is_returned_untouched(self, db, accounts):
        renamed = AccountCreate(code="1000", name="Petty Cash", type=AccountType.ASSET)
        account = chart_of_accounts_crud.get_or_create_account(db, renamed, TENANT_ID)
        assert account.name == "Cash"

    def test_concurrent_insert_reuses_winner(self, db, session_factory, monkeypatch):
        definition = AccountCreate(code="1150", name="Mobile Wallet", type=AccountType.ASSET)
        winner_session = session_factory()
        winner = chart_of_accounts_crud.get_or_create_account(winner_session, definition, TENANT_ID)
        winner_id = winner.id
        winner_session.close()

        # Simulate losing the race: the lookup misses, the insert hits the unique constraint
        real_lookup = chart_of_accounts_crud.get_account_by_code
        calls = {"n": 0}

        def stale_lookup(session, code, tenant_id):
            calls["n"] += 1
            if calls["n"] == 1:
                return None
            return real_lookup(session, code, tenant_id)

        monkeypatch.setattr(chart_of_accounts_crud, "get_account_by_code", stale_lookup)
        account = chart_of_accounts_crud.get_or_create_account(db, definition, TENANT_ID)

        assert account.id == winner_id
        assert db.query(Account).filter(Account.code == "1150").count() == 1

    def test_standard_account_created_on_demand(self, db):
        account = chart_of_accounts_crud.get_standard_account(db, "2200", TENANT_ID)
        assert account.name == "COD Fee Payable"

    def test_unknown_standard_code(self, db):
        with pytest.raises(AccountNotFoundError):
            chart_of_accounts_crud.get_standard_account(db, "9999", TENANT_ID)


class TestResolvePaymentAccount:
    def test_method_picks_cash_or_bank(self, db, accounts):
        assert chart_of_accounts_crud.resolve_payment_account(db, TENANT_ID, payment_method="Cash").code == "1000"
        assert chart_of_accounts_crud.resolve_payment_account(db, TENANT_ID, payment_method="Bank Transfer").code == "1100"
        assert chart_of_accounts_crud.resolve_payment_account(db, TENANT_ID, payment_method=" cheque ").code == "1100"
        assert chart_of_accounts_crud.resolve_payment_account(db, TENANT_ID).code == "1000"

    def test_explicit_account_must_hold_money(self, db, accounts):
        bank = chart_of_accounts_crud.resolve_payment_account(db, TENANT_ID, account_id=accounts["1100"].id)
        assert bank.code == "1100"
        with pytest.raises(ValueError, match="not a cash or bank account"):
            chart_of_accounts_crud.resolve_payment_account(db, TENANT_ID, account_id=accounts["1200"].id)

    def test_explicit_account_of_other_tenant(self, db, accounts):
        with pytest.raises(AccountNotFoundError):
            chart_of_accounts_crud.resolve_payment_account(db, OTHER_TENANT_ID, account_id=accounts["1000"].id)

    def test_payment_accounts_listing(self, db, accounts):
        codes = [a.code for a in chart_of_accounts_crud.get_payment_accounts(db, TENANT_ID)]
        assert codes == ["1000", "1100"]


class TestUpdateAccount:
    def _post_sale(self, db, accounts):
        create_transaction(
            db,
            TransactionCreate(date=date(2024, 3, 1), description="sale"),
            [
                TransactionLineCreate(account_id=accounts["1000"].id, debit_amount=Decimal("100")),
                TransactionLineCreate(account_id=accounts["4000"].id, credit_amount=Decimal("100")),
            ],
            TENANT_ID,
        )

    def test_rename(self, db, accounts):
        updated = chart_of_accounts_crud.update_account(db, accounts["1000"].id, AccountUpdate(name="Till"), TENANT_ID)
        assert updated.name == "Till"

    def test_type_change_refused_once_posted(self, db, accounts):
        self._post_sale(db, accounts)
        with pytest.raises(ValueError, match="Cannot change the type"):
            chart_of_accounts_crud.update_account(
                db, accounts["4000"].id, AccountUpdate(type=AccountType.LIABILITY), TENANT_ID
            )

    def test_deactivate_refused_once_posted(self, db, accounts):
        self._post_sale(db, accounts)
        with pytest.raises(ValueError, match="Cannot deactivate"):
            chart_of_accounts_crud.deactivate_account(db, accounts["1000"].id, TENANT_ID)

    def test_deactivate_unused_account(self, db, accounts):
        chart_of_accounts_crud.deactivate_account(db, accounts["5700"].id, TENANT_ID)
        active = chart_of_accounts_crud.get_accounts(db, TENANT_ID, account_type=AccountType.EXPENSE)
        everything = chart_of_accounts_crud.get_accounts(db, TENANT_ID, AccountType.EXPENSE, include_inactive=True)
        assert "5700" not in [a.code for a in active]
        assert len(everything) == len(active) + 1
