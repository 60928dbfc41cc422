from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from diary_app import exceptions
from diary_app.billing import (
    UNKNOWN_CUSTOMER, balance_for_row, month_entries_for_customer, search_rows, sort_rows,
    summarize_dashboard, summarize_month,
)


def customer(id, name, phone='', address=''):
    return SimpleNamespace(id=id, name=name, phone=phone, address=address)


def entry(customer_id, day, quantity, amount, delivered=True):
    return SimpleNamespace(customer_id=customer_id, date=day, quantity=quantity, amount=amount, delivered=delivered)


def payment(customer_id, day, amount):
    return SimpleNamespace(customer_id=customer_id, date=day, amount=amount)


@pytest.fixture
def book():
    customers = [customer('c1', 'Ramesh', '9876543210', 'Village Road'), customer('c2', 'anita', '', 'Mill Street')]
    entries = [
        entry('c1', '2024-01-31', 2, 120),
        entry('c1', '2024-02-01', 2, 120),
        entry('c2', '2024-02-03', 1.5, 75),
        entry('c1', '2024-02-04', 1, 60),
    ]
    payments = [payment('c1', '2024-02-10', 100), payment('c2', '2024-01-20', 30)]
    return customers, entries, payments


def test_scenario_single_customer():
    customers = [customer('c1', 'Ramesh')]
    entries = [entry('c1', '2024-03-05', 2, 120)]
    payments = [payment('c1', '2024-03-10', 50)]

    summary = summarize_month(customers, entries, payments, '2024-03')

    assert summary.total_revenue == 120
    assert summary.total_quantity == 2
    assert summary.delivery_count == 1
    assert len(summary.customer_breakdown) == 1
    row = summary.customer_breakdown[0]
    assert row.customer_name == 'Ramesh'
    assert row.total_amount == 120
    assert balance_for_row(row, payments, '2024-03') == 70


def test_month_boundary_uses_date_prefix(book):
    customers, entries, payments = book

    january = summarize_month(customers, entries, payments, '2024-01')
    february = summarize_month(customers, entries, payments, '2024-02')

    assert january.delivery_count == 1
    assert january.total_revenue == 120
    assert february.delivery_count == 3
    assert february.total_revenue == 255


def test_date_objects_are_matched_by_iso_prefix():
    entries = [entry('c1', date(2024, 1, 31), 1, 50), entry('c1', date(2024, 2, 1), 1, 50)]

    summary = summarize_month([customer('c1', 'Ramesh')], entries, [], '2024-02')

    assert summary.delivery_count == 1


def test_breakdown_partitions_revenue(book):
    customers, entries, payments = book

    summary = summarize_month(customers, entries, payments, '2024-02')

    assert sum(r.total_amount for r in summary.customer_breakdown) == summary.total_revenue
    assert sum(r.delivery_count for r in summary.customer_breakdown) == summary.delivery_count


def test_breakdown_sorted_by_amount_descending(book):
    customers, entries, payments = book

    summary = summarize_month(customers, entries, payments, '2024-02')

    assert [r.customer_id for r in summary.customer_breakdown] == ['c1', 'c2']
    assert summary.customer_breakdown[0].total_amount == 180
    assert summary.customer_breakdown[0].delivery_count == 2


def test_ties_keep_insertion_order():
    customers = [customer('c1', 'B'), customer('c2', 'A')]
    entries = [entry('c1', '2024-02-01', 1, 50), entry('c2', '2024-02-01', 1, 50)]

    summary = summarize_month(customers, entries, [], '2024-02')

    assert [r.customer_id for r in summary.customer_breakdown] == ['c1', 'c2']


def test_payment_only_customer_gets_zero_row(book):
    customers, entries, payments = book

    summary = summarize_month(customers, entries, payments, '2024-01')

    rows = {r.customer_id: r for r in summary.customer_breakdown}
    assert rows['c2'].total_amount == 0
    assert rows['c2'].total_quantity == 0
    assert rows['c2'].delivery_count == 0
    assert balance_for_row(rows['c2'], payments, '2024-01') == -30
    assert summary.total_revenue == 120


def test_missing_customer_falls_back_to_unknown():
    summary = summarize_month([], [entry('gone', '2024-02-01', 1, 40)], [payment('gone2', '2024-02-02', 5)], '2024-02')

    assert {r.customer_name for r in summary.customer_breakdown} == {UNKNOWN_CUSTOMER}


def test_empty_month_is_all_zero(book):
    customers, entries, payments = book

    summary = summarize_month(customers, entries, payments, '2023-12')

    assert summary.total_quantity == 0
    assert summary.total_revenue == 0
    assert summary.delivery_count == 0
    assert summary.customer_breakdown == []


def test_balance_decreases_by_added_payment(book):
    customers, entries, payments = book
    row = summarize_month(customers, entries, payments, '2024-02').customer_breakdown[0]
    before = balance_for_row(row, payments, '2024-02')

    after = balance_for_row(row, payments + [payment('c1', '2024-02-28', Decimal('12.50'))], '2024-02')

    assert before - after == Decimal('12.50')


def test_balance_ignores_payments_outside_month(book):
    customers, entries, payments = book
    row = summarize_month(customers, entries, payments, '2024-02').customer_breakdown[0]

    assert balance_for_row(row, payments + [payment('c1', '2024-03-01', 500)], '2024-02') == 80


def test_sort_by_name_is_case_insensitive(book):
    customers, entries, payments = book
    rows = summarize_month(customers, entries, payments, '2024-02').customer_breakdown

    assert [r.customer_name for r in sort_rows(rows, payments, '2024-02', 'name')] == ['anita', 'Ramesh']


def test_sort_by_balance_descending(book):
    customers, entries, payments = book
    rows = summarize_month(customers, entries, payments, '2024-02').customer_breakdown

    # c1 owes 180 - 100 = 80, c2 owes 75
    assert [r.customer_id for r in sort_rows(rows, payments, '2024-02', 'balance')] == ['c1', 'c2']
    extra = payments + [payment('c1', '2024-02-15', 10)]
    assert [r.customer_id for r in sort_rows(rows, extra, '2024-02', 'balance')] == ['c2', 'c1']


def test_sort_rejects_unknown_key(book):
    customers, entries, payments = book
    rows = summarize_month(customers, entries, payments, '2024-02').customer_breakdown

    with pytest.raises(exceptions.ValidationError):
        sort_rows(rows, payments, '2024-02', 'phone')


def test_search_matches_name_phone_and_address(book):
    customers, entries, payments = book
    rows = summarize_month(customers, entries, payments, '2024-02').customer_breakdown

    assert [r.customer_id for r in search_rows(rows, customers, 'RAM')] == ['c1']
    assert [r.customer_id for r in search_rows(rows, customers, '98765')] == ['c1']
    assert [r.customer_id for r in search_rows(rows, customers, ' mill ')] == ['c2']
    assert len(search_rows(rows, customers, '')) == 2
    assert search_rows(rows, customers, 'nobody') == []


def test_month_entries_for_customer_sorted_by_date():
    entries = [entry('c1', '2024-02-09', 1, 50), entry('c1', '2024-02-02', 1, 50), entry('c2', '2024-02-01', 1, 50)]

    found = month_entries_for_customer('c1', entries, '2024-02')

    assert [e.date for e in found] == ['2024-02-02', '2024-02-09']


def test_dashboard_counts_only_delivered_for_month():
    entries = [
        entry('c1', '2024-02-01', 2, 120),
        entry('c1', '2024-02-14', 1, 60, delivered=False),
        entry('c2', '2024-02-14', 1.5, 90),
        entry('c2', '2024-01-30', 1, 60),
    ]

    stats = summarize_dashboard([customer('c1', 'A'), customer('c2', 'B')], entries, date(2024, 2, 14))

    assert stats.total_customers == 2
    assert stats.monthly_revenue == 270
    assert stats.monthly_quantity == Decimal('4.5')
    assert stats.monthly_deliveries == 2
    assert stats.today_revenue == 150
    assert stats.today_deliveries == 2
    assert [e.date for e in stats.recent_entries][:2] == ['2024-02-14', '2024-02-14']
    assert len(stats.recent_entries) == 4
