from sqlalchemy.orm import Session, joinedload
from datetime import date
from decimal import Decimal
import logging

from models.orders import Order, OrderStatus, CodFeePaidBy
from schemas.transactions import TransactionCreate, TransactionLineCreate
from crud import chart_of_accounts as chart_of_accounts_crud
from crud.balances import order_products_total, order_total
from crud.cod_fee import calculate_order_cod_fee
from crud.ledger import create_transaction
from utils import to_decimal

logger = logging.getLogger(__name__)


def get_order(db: Session, order_id: int, tenant_id: str) -> Order:
    order = db.query(Order).options(joinedload(Order.items)).filter(
        Order.id == order_id,
        Order.tenant_id == tenant_id
    ).first()
    if not order:
        raise ValueError(f"Order {order_id} not found")
    return order


def calculate_order_total(order: Order) -> dict:
    """Split an order's receivable into products, shipping and a customer-paid COD fee."""
    cod_fee = to_decimal(order.cod_fee)
    return {
        "products": order_products_total(order),
        "shipping": to_decimal(order.shipping_charges),
        "cod_fee": cod_fee,
        "customer_cod_fee": cod_fee if order.cod_fee_paid_by == CodFeePaidBy.CUSTOMER else Decimal("0"),
        "total": order_total(order),
    }


def _apply_cod_fee(db: Session, order: Order, tenant_id: str):
    """Work out the COD fee for an order shipped through a logistics company."""
    if not order.logistics_company_id or to_decimal(order.cod_fee) > 0:
        return
    cod_amount = order_total(order) - to_decimal(order.payment_amount)
    if cod_amount <= 0:
        return
    if order.cod_fee_paid_by is None:
        order.cod_fee_paid_by = CodFeePaidBy.BUSINESS
    order.cod_amount = cod_amount
    order.cod_fee = calculate_order_cod_fee(db, order, tenant_id)


def confirm_order(db: Session, order_id: int, tenant_id: str, on_date: date = None, user_id: str = None) -> Order:
    """
    Confirm a pending order and book its sale.

    Dr Accounts Receivable for what the customer owes, Cr Sales Revenue and
    Shipping Revenue. A COD fee the customer pays is owed on to the courier
    (Cr COD Fee Payable); one the business absorbs is also an expense.
    """
    order = get_order(db, order_id, tenant_id)
    if order.status != OrderStatus.PENDING:
        raise ValueError(f"Order {order.order_number} is {order.status.value}, only pending orders can be confirmed")

    try:
        _apply_cod_fee(db, order, tenant_id)
        totals = calculate_order_total(order)
        if totals["total"] <= 0:
            raise ValueError(f"Order {order.order_number} has nothing to invoice")

        def account_id(code):
            return chart_of_accounts_crud.get_standard_account(db, code, tenant_id, commit=False).id

        lines = [TransactionLineCreate(
            account_id=account_id(chart_of_accounts_crud.ACCOUNTS_RECEIVABLE_CODE),
            debit_amount=totals["total"]
        )]
        if totals["products"] > 0:
            lines.append(TransactionLineCreate(
                account_id=account_id(chart_of_accounts_crud.SALES_REVENUE_CODE),
                credit_amount=totals["products"]
            ))
        if totals["shipping"] > 0:
            lines.append(TransactionLineCreate(
                account_id=account_id(chart_of_accounts_crud.SHIPPING_REVENUE_CODE),
                credit_amount=totals["shipping"]
            ))
        if totals["cod_fee"] > 0:
            cod_payable = account_id(chart_of_accounts_crud.COD_FEE_PAYABLE_CODE)
            if totals["customer_cod_fee"] > 0:
                lines.append(TransactionLineCreate(account_id=cod_payable, credit_amount=totals["cod_fee"]))
            else:
                lines.append(TransactionLineCreate(
                    account_id=account_id(chart_of_accounts_crud.COD_FEE_EXPENSE_CODE),
                    debit_amount=totals["cod_fee"]
                ))
                lines.append(TransactionLineCreate(account_id=cod_payable, credit_amount=totals["cod_fee"]))

        create_transaction(
            db,
            TransactionCreate(
                date=on_date or date.today(),
                description=f"Sale - order {order.order_number}",
                order_id=order.id
            ),
            lines,
            tenant_id,
            commit=False
        )
        order.status = OrderStatus.CONFIRMED
        order.updated_by = user_id
        db.commit()
        db.refresh(order)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Order {order.order_number} confirmed for tenant {tenant_id} (total {totals['total']})")
    return order
