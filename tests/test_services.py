from datetime import date
from decimal import Decimal

import pytest

from diary_app import exceptions, feeds, services
from diary_app.models import Customer, DiaryEntry, Payment, Subscription
from diary_app.subscription import DEMO_LIMIT_REASON


def test_record_entry_prices_from_customer(user, customer):
    decision, entry = services.record_entry(user, customer.id, '2024-03-05', Decimal('1.5'))

    assert decision.admitted
    assert entry.amount == Decimal('90.00')
    assert entry.date == date(2024, 3, 5)
    assert entry.delivered is True


def test_record_entry_rejects_bad_input(user, customer):
    with pytest.raises(exceptions.ValidationError):
        services.record_entry(user, customer.id, '2024-03-05', 0)
    with pytest.raises(exceptions.ValidationError):
        services.record_entry(user, None, '2024-03-05', 1)
    with pytest.raises(exceptions.ValidationError):
        services.record_entry(user, customer.id, '05/03/2024', 1)


def test_demo_gate_denies_fourth_entry(user, customer):
    for day in ('2024-03-01', '2024-03-02', '2024-03-03'):
        decision, entry = services.record_entry(user, customer.id, day, 1)
        assert entry is not None

    decision, entry = services.record_entry(user, customer.id, '2024-03-04', 1)

    assert not decision
    assert decision.reason == DEMO_LIMIT_REASON
    assert entry is None
    assert DiaryEntry.objects.filter(owner=user).count() == 3


def test_exempt_account_records_past_limit(user, customer):
    user.exempt_from_limits = True
    user.save()

    for day in range(1, 6):
        _, entry = services.record_entry(user, customer.id, f'2024-03-0{day}', 1)
        assert entry is not None


def test_paid_plan_is_unlimited(user, customer):
    services.change_plan(user.id, 'monthly', date(2024, 3, 1))

    for day in range(1, 6):
        _, entry = services.record_entry(user, customer.id, f'2024-03-0{day}', 1)
        assert entry is not None


def test_other_accounts_customer_is_not_found(other_user, customer):
    with pytest.raises(exceptions.NotFoundError):
        services.record_entry(other_user, customer.id, '2024-03-05', 1)
    with pytest.raises(exceptions.NotFoundError):
        services.get_customer(other_user, 'not-a-uuid')


def test_delete_customer_cascades(user, customer):
    keep = services.create_customer(user, 'Anita', 1, 55)
    services.change_plan(user.id, 'yearly', date(2024, 1, 1))
    services.record_entry(user, customer.id, '2024-03-01', 2)
    services.record_entry(user, customer.id, '2024-03-02', 2)
    services.record_entry(user, keep.id, '2024-03-02', 1)
    services.add_payment(user, customer.id, 100, date='2024-03-03')

    counts = services.delete_customer(user, customer.id)

    assert counts == (2, 1)
    assert not Customer.objects.filter(id=customer.id).exists()
    assert not DiaryEntry.objects.filter(customer_id=customer.id).exists()
    assert not Payment.objects.filter(customer_id=customer.id).exists()
    assert DiaryEntry.objects.filter(customer=keep).count() == 1


def test_update_customer_keeps_existing_amounts(user, customer):
    _, entry = services.record_entry(user, customer.id, '2024-03-01', 2)

    services.update_customer(user, customer.id, {'price_per_unit': Decimal('70.00')})

    entry.refresh_from_db()
    assert entry.amount == Decimal('120.00')
    _, newer = services.record_entry(user, customer.id, '2024-03-02', 2)
    assert newer.amount == Decimal('140.00')


def test_update_customer_rejects_unknown_fields(user, customer):
    with pytest.raises(exceptions.ValidationError):
        services.update_customer(user, customer.id, {'owner': None})
    with pytest.raises(exceptions.ValidationError):
        services.update_customer(user, customer.id, {'name': '  '})


def test_correct_entry_price(user, customer):
    _, entry = services.record_entry(user, customer.id, '2024-03-01', Decimal('1.25'))

    corrected = services.correct_entry_price(user, entry.id, '62.35')

    assert corrected.amount == Decimal('77.94')
    entry.refresh_from_db()
    assert entry.amount == Decimal('77.94')


def test_rejected_price_correction_leaves_entry(user, customer):
    _, entry = services.record_entry(user, customer.id, '2024-03-01', 2)

    with pytest.raises(exceptions.ValidationError):
        services.correct_entry_price(user, entry.id, '-1')

    entry.refresh_from_db()
    assert entry.amount == Decimal('120.00')


def test_correct_price_of_missing_entry(user):
    with pytest.raises(exceptions.NotFoundError):
        services.correct_entry_price(user, '00000000-0000-0000-0000-000000000000', 50)


def test_add_payment_trims_note(user, customer):
    blank = services.add_payment(user, customer.id, 50, note='   ', date='2024-03-10')
    noted = services.add_payment(user, customer.id, '20.5', method='upi', note='  March advance ', date='2024-03-11')

    assert blank.note is None
    assert noted.note == 'March advance'
    assert noted.amount == Decimal('20.50')


def test_add_payment_rejects_bad_input(user, customer):
    with pytest.raises(exceptions.ValidationError):
        services.add_payment(user, customer.id, 0)
    with pytest.raises(exceptions.ValidationError):
        services.add_payment(user, customer.id, 10, method='cheque')


def test_start_demo_is_idempotent(user):
    first = services.start_demo(user)
    second = services.start_demo(user)

    assert first.id == second.id
    assert first.plan == 'demo'
    assert first.entry_limit == 3
    assert first.end_date is None


def test_change_plan_replaces_subscription(user):
    services.start_demo(user)

    subscription = services.change_plan(user.id, 'half_yearly', date(2024, 8, 31))

    assert Subscription.objects.filter(user=user).count() == 1
    assert subscription.plan == 'half_yearly'
    assert subscription.entry_limit is None
    assert subscription.start_date == date(2024, 8, 31)
    assert subscription.end_date == date(2025, 2, 28)


def test_change_plan_errors(user):
    with pytest.raises(exceptions.ValidationError):
        services.change_plan(user.id, 'weekly')
    with pytest.raises(exceptions.NotFoundError):
        services.change_plan('00000000-0000-0000-0000-000000000000', 'monthly')


def test_feed_delivers_snapshot_after_commit(user, customer, django_capture_on_commit_callbacks):
    received = []
    handle = feeds.subscribe(user.id, received.append)
    try:
        with django_capture_on_commit_callbacks(execute=True):
            services.record_entry(user, customer.id, '2024-03-01', 2)
    finally:
        handle.unsubscribe()

    assert len(received) == 1
    snapshot = received[0]
    assert [c.id for c in snapshot.customers] == [customer.id]
    assert len(snapshot.entries) == 1
    assert snapshot.payments == []


def test_unsubscribed_listener_gets_nothing(user, customer, django_capture_on_commit_callbacks):
    received = []
    feeds.subscribe(user.id, received.append).unsubscribe()

    with django_capture_on_commit_callbacks(execute=True):
        services.add_payment(user, customer.id, 10, date='2024-03-01')

    assert received == []


def test_failing_listener_does_not_stop_others(user, customer, django_capture_on_commit_callbacks):
    def broken(snapshot):
        raise RuntimeError('listener down')

    received = []
    handles = [feeds.subscribe(user.id, broken), feeds.subscribe(user.id, received.append)]
    try:
        with django_capture_on_commit_callbacks(execute=True):
            services.record_entry(user, customer.id, '2024-03-01', 2)
    finally:
        for handle in handles:
            handle.unsubscribe()

    assert len(received) == 1
    assert len(received[0].entries) == 1


def test_customer_cascade_publishes_one_snapshot(user, customer, django_capture_on_commit_callbacks):
    services.change_plan(user.id, 'yearly', date(2024, 1, 1))
    for day in ('2024-03-01', '2024-03-02', '2024-03-03'):
        services.record_entry(user, customer.id, day, 2)
    services.add_payment(user, customer.id, 100, date='2024-03-04')

    received = []
    handle = feeds.subscribe(user.id, received.append)
    try:
        with django_capture_on_commit_callbacks(execute=True):
            services.delete_customer(user, customer.id)
    finally:
        handle.unsubscribe()

    assert len(received) == 1
    assert received[0].customers == []
    assert received[0].entries == []
    assert received[0].payments == []


def test_unsubscribe_twice_is_harmless(user):
    received = []
    first = feeds.subscribe(user.id, received.append)
    second = feeds.subscribe(user.id, received.append)

    first.unsubscribe()
    first.unsubscribe()

    assert not first.active
    assert second.active
    feeds.publish(user.id)
    assert len(received) == 1
    second.unsubscribe()


def test_gate_reads_current_account_state(user, customer):
    services.change_plan(user.id, 'demo', date(2024, 1, 1))
    for day in ('2024-03-01', '2024-03-02', '2024-03-03'):
        services.record_entry(user, customer.id, day, 1)
    # exemption granted on a stale copy only
    user.exempt_from_limits = True

    decision, entry = services.record_entry(user, customer.id, '2024-03-04', 1)

    assert not decision
    assert entry is None
