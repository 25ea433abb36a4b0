from models.chart_of_accounts import Account, AccountType, AccountSubType
from models.transactions import Transaction, TransactionLine
from models.tenants import Tenant
from models.customers import Customer
from models.suppliers import Supplier
from models.purchase_invoices import PurchaseInvoice
from models.products import Product
from models.logistics_companies import LogisticsCompany, CodFeeCalculationType, CompanyStatus
from models.orders import Order, OrderItem, OrderStatus, CodFeePaidBy
from models.payments import Payment, PaymentType
from models.expenses import Expense
from models.withdrawals import Withdrawal, WithdrawalType
from models.order_returns import OrderReturn, OrderReturnItem, RefundMethod, ReturnStatus, ReturnType, ShippingChargeHandling, SupplierReturnHandling
from models.profit_distributions import DistributionStatus, ProfitDistribution

__all__ = ['Account', 'AccountSubType', 'AccountType', 'CodFeeCalculationType', 'CodFeePaidBy', 'CompanyStatus', 'Customer', 'DistributionStatus', 'Expense', 'LogisticsCompany', 'Order', 'OrderItem', 'OrderReturn', 'OrderReturnItem', 'OrderStatus', 'Payment', 'PaymentType', 'Product', 'ProfitDistribution', 'PurchaseInvoice', 'RefundMethod', 'ReturnStatus', 'ReturnType', 'ShippingChargeHandling', 'Supplier', 'SupplierReturnHandling', 'Tenant', 'Transaction', 'TransactionLine', 'Withdrawal', 'WithdrawalType',]
