"""
Tiered-range matching shared by the COD fee and shipping charge engines.

A rule set is an ordered list of ``{min, max, <value>}`` ranges. Ranges are
contiguous: every range starts where the previous one ended and only the last
one may be open-ended (``max is None``). Rule sets are validated once when
they are written; evaluation trusts the stored order and never raises.
"""
from decimal import Decimal
from typing import Optional, Sequence
import enum

from exceptions import InvalidRuleSetError
from schemas.fee_rules import (
    CodFeeConfig,
    FeeType,
    FixedCodFee,
    PercentageCodFee,
    RangeCodFee,
)
from utils import round_money, to_decimal


def _range_value(rule, value_field: str) -> Decimal:
    return to_decimal(getattr(rule, value_field))


def validate_ranges(ranges: Sequence, value_field: str = "charge") -> list:
    """Return the ranges sorted by ``min`` or raise ``InvalidRuleSetError``."""
    ordered = sorted(ranges, key=lambda r: to_decimal(r.min))

    for index, rule in enumerate(ordered):
        rule_min = to_decimal(rule.min)
        if rule.max is not None and rule_min >= to_decimal(rule.max):
            raise InvalidRuleSetError(f"Range {rule_min}-{rule.max}: min must be less than max")
        if _range_value(rule, value_field) < 0:
            raise InvalidRuleSetError(f"Range {rule_min}-{rule.max}: {value_field} cannot be negative")
        if index == 0:
            continue
        previous = ordered[index - 1]
        if previous.max is None:
            raise InvalidRuleSetError(f"Open-ended range starting at {previous.min} must be the last range")
        if rule_min != to_decimal(previous.max):
            if rule_min < to_decimal(previous.max):
                raise InvalidRuleSetError(f"Range starting at {rule_min} overlaps the range ending at {previous.max}")
            raise InvalidRuleSetError(f"Gap between {previous.max} and {rule_min}")

    return ordered


def find_matching_range(ranges: Sequence, x) -> Optional[object]:
    """First range with ``min <= x <= max``; ranges must already be sorted."""
    x = to_decimal(x)
    for rule in ranges:
        if to_decimal(rule.min) <= x and (rule.max is None or x <= to_decimal(rule.max)):
            return rule
    return None


def is_below_ranges(ranges: Sequence, x) -> bool:
    return not ranges or to_decimal(x) < to_decimal(ranges[0].min)


def _apply_fee(fee_type: FeeType, fee, amount: Decimal) -> Decimal:
    if fee_type == FeeType.PERCENTAGE:
        return amount * to_decimal(fee) / Decimal(100)
    return to_decimal(fee)


def evaluate_cod_fee(config: CodFeeConfig, cod_amount) -> Decimal:
    """COD fee for ``cod_amount`` under ``config``, rounded to 2 decimals."""
    amount = to_decimal(cod_amount)

    if isinstance(config, FixedCodFee):
        fee = to_decimal(config.fixed_fee)
    elif isinstance(config, PercentageCodFee):
        fee = _apply_fee(FeeType.PERCENTAGE, config.percentage, amount)
    elif isinstance(config, RangeCodFee):
        rule = find_matching_range(config.ranges, amount)
        if rule is None:
            if is_below_ranges(config.ranges, amount):
                return round_money(config.default_fee)
            # Above every range: charge what the top range charges
            rule = config.ranges[-1]
        fee = _apply_fee(rule.type, rule.fee, amount)
    else:
        raise TypeError(f"Unsupported COD fee config: {type(config).__name__}")

    return round_money(fee)


def quantity_charge(ranges: Sequence, quantity: int, default_charge) -> Decimal:
    """
    Shipping charge for ``quantity`` units of a single product.

    The first unit rides on the city charge, so quantity 1 is always free.
    Every additional unit is billed at the matched range's per-unit rate.
    Quantities above every range pay the top range's charge once (falling back
    to the default per-unit rate when that charge is zero).
    """
    if quantity <= 1:
        return Decimal("0")

    default_charge = to_decimal(default_charge)
    extra_units = quantity - 1

    rule = find_matching_range(ranges, quantity)
    if rule is not None:
        return to_decimal(rule.charge) * extra_units

    if is_below_ranges(ranges, quantity):
        return default_charge * extra_units

    top_charge = to_decimal(ranges[-1].charge)
    if top_charge:
        return top_charge
    return default_charge * extra_units


def ordered_ranges(ranges: Sequence) -> list:
    return sorted(ranges, key=lambda r: to_decimal(r.min))


def _json_value(value):
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, enum.Enum):
        return value.value
    return value


def dump_ranges(ranges: Sequence) -> list:
    """Ranges as plain JSON-ready dicts with numbers, the shape the admin UI stores."""
    return [
        {key: _json_value(value) for key, value in rule.model_dump().items()}
        for rule in ranges
    ]
