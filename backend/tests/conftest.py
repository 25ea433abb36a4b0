import os
import tempfile

# Point the application at a throwaway database before anything imports it
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "retail-ledger-test-logs"))

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from models import (
    Customer,
    LogisticsCompany,
    Order,
    OrderItem,
    OrderStatus,
    Product,
    PurchaseInvoice,
    Supplier,
    Tenant,
)
from models.logistics_companies import CodFeeCalculationType, CompanyStatus
from crud import chart_of_accounts as chart_of_accounts_crud

TENANT_ID = "tenant-a"
OTHER_TENANT_ID = "tenant-b"
TODAY = date(2024, 3, 15)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite needs these two hooks for SAVEPOINT to work
    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def accounts(db):
    """Standard chart for TENANT_ID, keyed by account code."""
    seeded = chart_of_accounts_crud.initialize_chart_of_accounts(db, TENANT_ID)
    return {account.code: account for account in seeded}


@pytest.fixture
def make_tenant(db):
    def _make(tenant_id=TENANT_ID, **fields):
        tenant = Tenant(id=tenant_id, name=fields.pop("name", "Test Store"), **fields)
        db.add(tenant)
        db.commit()
        return tenant
    return _make


@pytest.fixture
def make_customer(db):
    def _make(name="Ayesha", balance=0, advance_balance=0, tenant_id=TENANT_ID):
        customer = Customer(
            tenant_id=tenant_id, name=name, balance=Decimal(str(balance)),
            advance_balance=Decimal(str(advance_balance))
        )
        db.add(customer)
        db.commit()
        return customer
    return _make


@pytest.fixture
def make_supplier(db):
    def _make(name="Wholesale Co", balance=0, tenant_id=TENANT_ID):
        supplier = Supplier(tenant_id=tenant_id, name=name, balance=Decimal(str(balance)))
        db.add(supplier)
        db.commit()
        return supplier
    return _make


@pytest.fixture
def make_invoice(db):
    counter = {"n": 0}

    def _make(supplier, total_amount, payment_amount=0, tenant_id=TENANT_ID):
        counter["n"] += 1
        invoice = PurchaseInvoice(
            tenant_id=tenant_id,
            invoice_number=f"PI-{counter['n']}",
            invoice_date=TODAY,
            supplier_id=supplier.id,
            total_amount=Decimal(str(total_amount)),
            payment_amount=Decimal(str(payment_amount)),
        )
        db.add(invoice)
        db.commit()
        return invoice
    return _make


@pytest.fixture
def make_product(db):
    def _make(name="Kurta", price=1000, tenant_id=TENANT_ID, **shipping):
        product = Product(tenant_id=tenant_id, name=name, price=Decimal(str(price)), **shipping)
        db.add(product)
        db.commit()
        return product
    return _make


@pytest.fixture
def make_order(db):
    counter = {"n": 0}

    def _make(customer, items, status=OrderStatus.CONFIRMED, tenant_id=TENANT_ID, **fields):
        """``items`` is a list of ``(price, quantity)`` pairs."""
        counter["n"] += 1
        order = Order(
            tenant_id=tenant_id,
            order_number=f"ORD-{counter['n']}",
            customer_id=customer.id if customer else None,
            status=status,
            **fields
        )
        order.items = [OrderItem(price=Decimal(str(price)), quantity=quantity) for price, quantity in items]
        db.add(order)
        db.commit()
        return order
    return _make


@pytest.fixture
def make_logistics_company(db):
    def _make(calculation_type=CodFeeCalculationType.FIXED, status=CompanyStatus.ACTIVE, tenant_id=TENANT_ID, **fields):
        company = LogisticsCompany(
            tenant_id=tenant_id,
            name=fields.pop("name", "FastCourier"),
            status=status,
            cod_fee_calculation_type=calculation_type,
            **fields
        )
        db.add(company)
        db.commit()
        return company
    return _make


@pytest.fixture
def client(engine, session_factory):
    from fastapi.testclient import TestClient
    from main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, headers={"X-Tenant-ID": TENANT_ID}) as test_client:
        yield test_client
    app.dependency_overrides.clear()
