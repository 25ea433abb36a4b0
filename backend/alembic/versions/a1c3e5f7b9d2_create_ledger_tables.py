"""create ledger, party and fee rule tables

Revision ID: a1c3e5f7b9d2
Revises:
Create Date: 2026-10-18 10:04:12.518230

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c3e5f7b9d2'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'tenants',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('shipping_city_charges', sa.Text(), nullable=True),
        sa.Column('shipping_quantity_rules', sa.Text(), nullable=True),
        sa.Column('owner_withdrawals', sa.Numeric(14, 2), nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_index('ix_tenants_id', 'tenants', ['id'])

    op.create_table(
        'accounts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=False),
        sa.Column('code', sa.String(20), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('type', sa.Enum('ASSET', 'LIABILITY', 'EQUITY', 'INCOME', 'EXPENSE', name='accounttype'), nullable=False),
        sa.Column('account_sub_type', sa.Enum('CASH', 'BANK', name='accountsubtype'), nullable=True),
        sa.Column('parent_id', sa.Integer(), sa.ForeignKey('accounts.id'), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('balance', sa.Numeric(14, 2), nullable=False, server_default='0'),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'code', name='_tenant_account_code_uc'),
    )
    op.create_index('ix_accounts_tenant_id', 'accounts', ['tenant_id'])
    op.create_index('ix_accounts_code', 'accounts', ['code'])

    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('phone_number', sa.String(), nullable=True),
        sa.Column('city', sa.String(), nullable=True),
        sa.Column('balance', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('advance_balance', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_customers_tenant_id', 'customers', ['tenant_id'])

    op.create_table(
        'suppliers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('phone_number', sa.String(), nullable=True),
        sa.Column('balance', sa.Numeric(14, 2), nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_index('ix_suppliers_tenant_id', 'suppliers', ['tenant_id'])

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('price', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('shipping_quantity_rules', sa.Text(), nullable=True),
        sa.Column('shipping_default_quantity_charge', sa.Numeric(14, 2), nullable=True),
        sa.Column('use_default_shipping', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_products_tenant_id', 'products', ['tenant_id'])

    op.create_table(
        'logistics_companies',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('status', sa.Enum('ACTIVE', 'INACTIVE', name='companystatus'), nullable=False),
        sa.Column('cod_fee_calculation_type', sa.Enum('FIXED', 'PERCENTAGE', 'RANGE_BASED', name='codfeecalculationtype'), nullable=False),
        sa.Column('cod_fee_percentage', sa.Numeric(6, 3), nullable=True),
        sa.Column('cod_fee_rules', sa.Text(), nullable=True),
        sa.Column('fixed_cod_fee', sa.Numeric(14, 2), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_logistics_companies_tenant_id', 'logistics_companies', ['tenant_id'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=False),
        sa.Column('order_number', sa.String(), nullable=False),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=True),
        sa.Column('status', sa.Enum('PENDING', 'CONFIRMED', 'DISPATCHED', 'COMPLETED', 'CANCELLED', name='orderstatus'), nullable=False),
        sa.Column('city', sa.String(), nullable=True),
        sa.Column('shipping_charges', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('payment_amount', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('refund_amount', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('cod_amount', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('cod_fee', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('cod_fee_paid_by', sa.Enum('CUSTOMER', 'BUSINESS', name='codfeepaidby'), nullable=True),
        sa.Column('logistics_company_id', sa.Integer(), sa.ForeignKey('logistics_companies.id'), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'order_number', name='_tenant_order_number_uc'),
    )
    op.create_index('ix_orders_tenant_id', 'orders', ['tenant_id'])
    op.create_index('ix_orders_customer_id', 'orders', ['customer_id'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(14, 2), nullable=False),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

    op.create_table(
        'purchase_invoices',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=False),
        sa.Column('invoice_number', sa.String(), nullable=False),
        sa.Column('invoice_date', sa.Date(), nullable=False),
        sa.Column('supplier_id', sa.Integer(), sa.ForeignKey('suppliers.id'), nullable=False),
        sa.Column('total_amount', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('payment_amount', sa.Numeric(14, 2), nullable=False, server_default='0'),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_by', sa.String(), nullable=True),
    )
    op.create_index('ix_purchase_invoices_tenant_id', 'purchase_invoices', ['tenant_id'])
    op.create_index('ix_purchase_invoices_supplier_id', 'purchase_invoices', ['supplier_id'])

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=False),
        sa.Column('transaction_number', sa.String(50), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id'), nullable=True),
        sa.Column('purchase_invoice_id', sa.Integer(), sa.ForeignKey('purchase_invoices.id'), nullable=True),
        sa.Column('order_return_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'transaction_number', name='_tenant_transaction_number_uc'),
    )
    op.create_index('ix_transactions_tenant_id', 'transactions', ['tenant_id'])
    op.create_index('ix_transactions_date', 'transactions', ['date'])
    op.create_index('ix_transactions_order_id', 'transactions', ['order_id'])

    op.create_table(
        'transaction_lines',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('transaction_id', sa.Integer(), sa.ForeignKey('transactions.id'), nullable=False),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('accounts.id'), nullable=False),
        sa.Column('debit_amount', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('credit_amount', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.CheckConstraint('debit_amount >= 0'),
        sa.CheckConstraint('credit_amount >= 0'),
    )
    op.create_index('ix_transaction_lines_transaction_id', 'transaction_lines', ['transaction_id'])
    op.create_index('ix_transaction_lines_account_id', 'transaction_lines', ['account_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=False),
        sa.Column('payment_number', sa.String(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('type', sa.Enum('CUSTOMER_PAYMENT', 'SUPPLIER_PAYMENT', 'REFUND', name='paymenttype'), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('payment_method', sa.String(), nullable=True),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('accounts.id'), nullable=True),
        sa.Column('transaction_id', sa.Integer(), sa.ForeignKey('transactions.id'), nullable=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=True),
        sa.Column('supplier_id', sa.Integer(), sa.ForeignKey('suppliers.id'), nullable=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id'), nullable=True),
        sa.Column('purchase_invoice_id', sa.Integer(), sa.ForeignKey('purchase_invoices.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_payments_tenant_id', 'payments', ['tenant_id'])
    op.create_index('ix_payments_customer_id', 'payments', ['customer_id'])
    op.create_index('ix_payments_supplier_id', 'payments', ['supplier_id'])
    op.create_index('ix_payments_order_id', 'payments', ['order_id'])
    op.create_index('ix_payments_purchase_invoice_id', 'payments', ['purchase_invoice_id'])

    op.create_table(
        'expenses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=False),
        sa.Column('expense_number', sa.String(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('accounts.id'), nullable=False),
        sa.Column('transaction_id', sa.Integer(), sa.ForeignKey('transactions.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_expenses_tenant_id', 'expenses', ['tenant_id'])

    op.create_table(
        'withdrawals',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=False),
        sa.Column('withdrawal_number', sa.String(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('type', sa.Enum('OWNER_PERSONAL', name='withdrawaltype'), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('transaction_id', sa.Integer(), sa.ForeignKey('transactions.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_withdrawals_tenant_id', 'withdrawals', ['tenant_id'])


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        'withdrawals', 'expenses', 'payments', 'transaction_lines', 'transactions',
        'purchase_invoices', 'order_items', 'orders', 'logistics_companies',
        'products', 'suppliers', 'customers', 'accounts', 'tenants',
    ):
        op.drop_table(table)
    for enum_name in (
        'withdrawaltype', 'paymenttype', 'codfeepaidby', 'orderstatus',
        'codfeecalculationtype', 'companystatus', 'accountsubtype', 'accounttype',
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
