"""Domain errors raised by the accounting core.

All of them are validation failures: callers should surface them to the user
rather than retry. They subclass ValueError so routers can keep translating
``ValueError`` into a 400 response.
"""
from decimal import Decimal


class AccountingError(ValueError):
    """Base class for ledger, balance and rule-set validation failures."""


class UnbalancedTransactionError(AccountingError):
    def __init__(self, total_debits: Decimal, total_credits: Decimal, message: str = None):
        self.total_debits = total_debits
        self.total_credits = total_credits
        super().__init__(
            message or f"Transaction is not balanced. Debits: {total_debits}, Credits: {total_credits}"
        )


class AccountNotFoundError(AccountingError):
    def __init__(self, reference, tenant_id: str = None):
        self.reference = reference
        self.tenant_id = tenant_id
        super().__init__(f"Account {reference} not found for tenant {tenant_id}")


class InvalidRuleSetError(AccountingError):
    pass


class InsufficientBalanceError(AccountingError):
    def __init__(self, available: Decimal, requested: Decimal, what: str = "balance"):
        self.available = available
        self.requested = requested
        super().__init__(f"Insufficient {what}. Available: {available}, Requested: {requested}")
