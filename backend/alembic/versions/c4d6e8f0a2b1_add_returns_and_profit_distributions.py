"""add returns, profit distributions and document number constraints

Revision ID: c4d6e8f0a2b1
Revises: a1c3e5f7b9d2
Create Date: 2026-10-18 15:22:47.903114

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'c4d6e8f0a2b1'
down_revision: Union[str, None] = 'a1c3e5f7b9d2'
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
    op.add_column('orders', sa.Column('advance_applied', sa.Numeric(14, 2), nullable=False, server_default='0'))
    op.add_column('purchase_invoices', sa.Column('is_return_only', sa.Boolean(), nullable=False, server_default=sa.false()))

    op.create_table(
        'order_returns',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=False),
        sa.Column('return_number', sa.String(), nullable=False),
        sa.Column('return_type', sa.Enum('CUSTOMER_FULL', 'CUSTOMER_PARTIAL', 'SUPPLIER', name='returntype'), nullable=False),
        sa.Column('status', sa.Enum('PENDING', 'APPROVED', 'REFUNDED', 'REJECTED', 'PROCESSED', name='returnstatus'), nullable=False),
        sa.Column('return_date', sa.Date(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('total_amount', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id'), nullable=True),
        sa.Column('shipping_charge_handling', sa.Enum('FULL_REFUND', 'CUSTOMER_PAYS', name='shippingchargehandling'), nullable=True),
        sa.Column('shipping_charge_amount', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('refund_method', sa.Enum('CASH', 'BANK_TRANSFER', 'CREDIT_TO_ACCOUNT', name='refundmethod'), nullable=True),
        sa.Column('refunded_amount', sa.Numeric(14, 2), nullable=False, server_default='0'),
        sa.Column('purchase_invoice_id', sa.Integer(), sa.ForeignKey('purchase_invoices.id'), nullable=True),
        sa.Column('supplier_id', sa.Integer(), sa.ForeignKey('suppliers.id'), nullable=True),
        sa.Column('handling_method', sa.Enum('REDUCE_AP', 'REFUND', name='supplierreturnhandling'), nullable=True),
        sa.Column('refund_account_id', sa.Integer(), sa.ForeignKey('accounts.id'), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'return_number', name='_tenant_return_number_uc'),
    )
    op.create_index('ix_order_returns_tenant_id', 'order_returns', ['tenant_id'])
    op.create_index('ix_order_returns_order_id', 'order_returns', ['order_id'])
    op.create_index('ix_order_returns_purchase_invoice_id', 'order_returns', ['purchase_invoice_id'])
    op.create_index('ix_order_returns_supplier_id', 'order_returns', ['supplier_id'])

    op.create_table(
        'order_return_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_return_id', sa.Integer(), sa.ForeignKey('order_returns.id'), nullable=False),
        sa.Column('order_item_id', sa.Integer(), sa.ForeignKey('order_items.id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(14, 2), nullable=False),
    )
    op.create_index('ix_order_return_items_order_return_id', 'order_return_items', ['order_return_id'])

    op.create_foreign_key('fk_transactions_order_return_id', 'transactions', 'order_returns', ['order_return_id'], ['id'])
    op.create_index('ix_transactions_order_return_id', 'transactions', ['order_return_id'])

    op.create_table(
        'profit_distributions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=False),
        sa.Column('distribution_number', sa.String(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('from_date', sa.Date(), nullable=False),
        sa.Column('to_date', sa.Date(), nullable=False),
        sa.Column('total_profit_amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('distribution_method', sa.String(), nullable=False),
        sa.Column('status', sa.Enum('PENDING', 'APPROVED', 'DISTRIBUTED', name='distributionstatus'), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('accounts.id'), nullable=True),
        sa.Column('transaction_id', sa.Integer(), sa.ForeignKey('transactions.id'), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'distribution_number', name='_tenant_distribution_number_uc'),
    )
    op.create_index('ix_profit_distributions_tenant_id', 'profit_distributions', ['tenant_id'])

    op.create_unique_constraint('_tenant_payment_number_uc', 'payments', ['tenant_id', 'payment_number'])
    op.create_unique_constraint('_tenant_expense_number_uc', 'expenses', ['tenant_id', 'expense_number'])
    op.create_unique_constraint('_tenant_withdrawal_number_uc', 'withdrawals', ['tenant_id', 'withdrawal_number'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_constraint('_tenant_withdrawal_number_uc', 'withdrawals', type_='unique')
    op.drop_constraint('_tenant_expense_number_uc', 'expenses', type_='unique')
    op.drop_constraint('_tenant_payment_number_uc', 'payments', type_='unique')

    op.drop_index('ix_transactions_order_return_id', table_name='transactions')
    op.drop_constraint('fk_transactions_order_return_id', 'transactions', type_='foreignkey')

    for table in ('profit_distributions', 'order_return_items', 'order_returns'):
        op.drop_table(table)
    for enum_name in ('distributionstatus', 'supplierreturnhandling', 'refundmethod', 'shippingchargehandling', 'returnstatus', 'returntype'):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)

    op.drop_column('purchase_invoices', 'is_return_only')
    op.drop_column('orders', 'advance_applied')
