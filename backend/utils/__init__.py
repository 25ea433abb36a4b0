from decimal import Decimal, ROUND_HALF_UP

TWO_PLACES = Decimal("0.01")
# Ledger rounding tolerance when comparing debit and credit totals
BALANCE_TOLERANCE = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Coerce ints, floats, strings and None into a Decimal (None -> 0)."""
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    # str() first so floats keep their printed value instead of binary noise
    return Decimal(str(value))


def round_money(value) -> Decimal:
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)

__all__ = ['BALANCE_TOLERANCE', 'round_money', 'to_decimal']
