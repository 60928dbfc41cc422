# diary_app/billing.py
"""
Monthly billing aggregation.

Everything here is a pure function over whole in-memory collections of
customers, diary entries and payments. Records only need the attributes the
functions read (``customer_id``, ``date``, ``quantity``, ``amount``, ...), so
Django model instances and plain objects work the same way.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional

from .exceptions import ValidationError
from .utils import ZERO, date_key, in_month, to_decimal

UNKNOWN_CUSTOMER = 'Unknown'

SORT_BY_AMOUNT = 'amount'
SORT_BY_NAME = 'name'
SORT_BY_BALANCE = 'balance'
SORT_CHOICES = (SORT_BY_AMOUNT, SORT_BY_NAME, SORT_BY_BALANCE)


@dataclass
class CustomerMonthlyData:
    customer_id: object
    customer_name: str
    total_quantity: Decimal = ZERO
    total_amount: Decimal = ZERO
    delivery_count: int = 0


@dataclass
class MonthlySummary:
    month: str
    total_quantity: Decimal
    total_revenue: Decimal
    delivery_count: int
    customer_breakdown: List[CustomerMonthlyData] = field(default_factory=list)


@dataclass
class DashboardStats:
    total_customers: int
    monthly_revenue: Decimal
    monthly_quantity: Decimal
    monthly_deliveries: int
    today_revenue: Decimal
    today_deliveries: int
    recent_entries: list


def _customer_names(customers) -> Dict[object, str]:
    return {c.id: c.name for c in customers}


def summarize_month(customers, entries, payments, month: str) -> MonthlySummary:
    month_entries = [e for e in entries if in_month(e.date, month)]
    month_payments = [p for p in payments if in_month(p.date, month)]
    names = _customer_names(customers)

    rows: Dict[object, CustomerMonthlyData] = {}
    for entry in month_entries:
        row = rows.get(entry.customer_id)
        if row is None:
            row = rows[entry.customer_id] = CustomerMonthlyData(
                customer_id=entry.customer_id,
                customer_name=names.get(entry.customer_id, UNKNOWN_CUSTOMER),
            )
        row.total_quantity += to_decimal(entry.quantity)
        row.total_amount += to_decimal(entry.amount)
        row.delivery_count += 1

    # payment-only customers still need a row for their balance
    for payment in month_payments:
        if payment.customer_id not in rows:
            rows[payment.customer_id] = CustomerMonthlyData(
                customer_id=payment.customer_id,
                customer_name=names.get(payment.customer_id, UNKNOWN_CUSTOMER),
            )

    breakdown = sorted(rows.values(), key=lambda r: r.total_amount, reverse=True)

    return MonthlySummary(
        month=month,
        total_quantity=sum((to_decimal(e.quantity) for e in month_entries), ZERO),
        total_revenue=sum((to_decimal(e.amount) for e in month_entries), ZERO),
        delivery_count=len(month_entries),
        customer_breakdown=breakdown,
    )


def paid_in_month(customer_id, payments, month: str) -> Decimal:
    return sum(
        (to_decimal(p.amount) for p in payments
         if p.customer_id == customer_id and in_month(p.date, month)),
        ZERO,
    )


def balance_for_row(row: CustomerMonthlyData, payments, month: str) -> Decimal:
    """Billed minus paid for one breakdown row. Negative means overpaid."""
    return row.total_amount - paid_in_month(row.customer_id, payments, month)


def sort_rows(rows, payments, month: str, sort_by: str = SORT_BY_AMOUNT):
    if sort_by == SORT_BY_AMOUNT:
        return sorted(rows, key=lambda r: r.total_amount, reverse=True)
    if sort_by == SORT_BY_NAME:
        return sorted(rows, key=lambda r: r.customer_name.lower())
    if sort_by == SORT_BY_BALANCE:
        return sorted(rows, key=lambda r: balance_for_row(r, payments, month), reverse=True)
    raise ValidationError(f"Unknown sort {sort_by!r}. Use one of: {', '.join(SORT_CHOICES)}")


def search_rows(rows, customers, query: Optional[str]):
    """Keep rows whose customer name, phone or address contains ``query``."""
    needle = (query or '').strip().lower()
    if not needle:
        return list(rows)

    by_id = {c.id: c for c in customers}
    matched = []
    for row in rows:
        customer = by_id.get(row.customer_id)
        haystack = ' '.join([
            row.customer_name,
            getattr(customer, 'phone', None) or '',
            getattr(customer, 'address', None) or '',
        ]).lower()
        if needle in haystack:
            matched.append(row)
    return matched


def month_entries_for_customer(customer_id, entries, month: str):
    return sorted(
        (e for e in entries if e.customer_id == customer_id and in_month(e.date, month)),
        key=lambda e: date_key(e.date),
    )


def month_payments_for_customer(customer_id, payments, month: str):
    return sorted(
        (p for p in payments if p.customer_id == customer_id and in_month(p.date, month)),
        key=lambda p: date_key(p.date),
    )


def summarize_dashboard(customers, entries, today, recent_limit: int = 5) -> DashboardStats:
    today_key = date_key(today)
    month = today_key[:7]

    month_entries = [e for e in entries if in_month(e.date, month)]
    today_entries = [e for e in entries if date_key(e.date) == today_key]
    recent = sorted(entries, key=lambda e: date_key(e.date), reverse=True)[:recent_limit]

    return DashboardStats(
        total_customers=len(customers),
        monthly_revenue=sum((to_decimal(e.amount) for e in month_entries), ZERO),
        monthly_quantity=sum((to_decimal(e.quantity) for e in month_entries), ZERO),
        monthly_deliveries=sum(1 for e in month_entries if e.delivered),
        today_revenue=sum((to_decimal(e.amount) for e in today_entries), ZERO),
        today_deliveries=len(today_entries),
        recent_entries=recent,
    )
