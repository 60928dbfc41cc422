# diary_app/ledger.py
from dataclasses import dataclass
from decimal import Decimal

from .exceptions import ValidationError
from .utils import ZERO, round2, to_decimal


@dataclass
class CustomerLedger:
    total_delivered_liters: Decimal = ZERO
    total_billed: Decimal = ZERO
    total_paid: Decimal = ZERO
    balance: Decimal = ZERO


def summarize_customer(customer_id, entries, payments) -> CustomerLedger:
    """Lifetime totals for one customer, over every date."""
    own_entries = [e for e in entries if e.customer_id == customer_id]
    own_payments = [p for p in payments if p.customer_id == customer_id]

    billed = sum((to_decimal(e.amount) for e in own_entries), ZERO)
    paid = sum((to_decimal(p.amount) for p in own_payments), ZERO)

    return CustomerLedger(
        total_delivered_liters=sum((to_decimal(e.quantity) for e in own_entries), ZERO),
        total_billed=billed,
        total_paid=paid,
        balance=billed - paid,
    )


def derived_unit_price(entry) -> Decimal:
    quantity = to_decimal(entry.quantity)
    if quantity <= 0:
        return ZERO
    return to_decimal(entry.amount) / quantity


def apply_unit_price_correction(entry, new_unit_price) -> Decimal:
    """
    Amount an entry would carry at ``new_unit_price`` per litre.

    The entry itself is left alone; callers persist the returned amount.
    """
    try:
        price = to_decimal(new_unit_price)
    except ValidationError:
        raise ValidationError('Enter a valid price per litre')
    if not price.is_finite() or price <= 0:
        raise ValidationError('Enter a valid price per litre')
    return round2(to_decimal(entry.quantity) * price)
