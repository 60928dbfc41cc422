# diary_app/services.py
"""
Record store operations for one account.

Views go through these functions for every write so that the entry gate,
amount computation and customer cascade happen in one place.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from . import exceptions
from .ledger import apply_unit_price_correction
from .models import Customer, DiaryEntry, Payment, Subscription, User
from .subscription import (
    DEMO_PLAN, Account, SubscriptionTerms, apply_plan_change, can_record_entry, plan_config,
)
from .utils import local_today, parse_date, round2, to_decimal

logger = logging.getLogger(__name__)

CUSTOMER_FIELDS = ('name', 'default_quantity', 'price_per_unit', 'phone', 'address')
ENTRY_PATCH_FIELDS = ('delivered', 'notes')


@dataclass
class AccountSnapshot:
    """Full, consistent copy of one account's records."""
    customers: List[Customer] = field(default_factory=list)
    entries: List[DiaryEntry] = field(default_factory=list)
    payments: List[Payment] = field(default_factory=list)
    subscription: Optional[Subscription] = None


def load_snapshot(user) -> AccountSnapshot:
    """``user`` may be a User or its primary key."""
    return AccountSnapshot(
        customers=list(Customer.objects.filter(owner=user)),
        entries=list(DiaryEntry.objects.filter(owner=user)),
        payments=list(Payment.objects.filter(owner=user)),
        subscription=Subscription.objects.filter(user=user).first(),
    )


def account_for_user(user, subscription=None) -> Account:
    if subscription is None:
        subscription = Subscription.objects.filter(user=user).first()
    terms = None
    if subscription is not None:
        terms = SubscriptionTerms(
            plan=subscription.plan,
            entry_limit=subscription.entry_limit,
            start_date=subscription.start_date,
            end_date=subscription.end_date,
        )
    return Account(exempt_from_limits=user.exempt_from_limits, subscription=terms)


def _require_positive(value, label):
    number = to_decimal(value)
    if not number.is_finite() or number <= 0:
        raise exceptions.ValidationError(f"{label} must be greater than 0")
    return number


def _get_owned(model, user, object_id, label):
    try:
        return model.objects.get(id=object_id, owner=user)
    except (model.DoesNotExist, DjangoValidationError, ValueError, TypeError):
        # malformed UUIDs count as missing
        raise exceptions.NotFoundError(f"{label} {object_id} not found")


# Customers

def get_customer(user, customer_id):
    return _get_owned(Customer, user, customer_id, 'Customer')


def create_customer(user, name, default_quantity, price_per_unit, phone='', address=''):
    if not (name or '').strip():
        raise exceptions.ValidationError('Name is required')
    customer = Customer.objects.create(
        owner=user,
        name=name.strip(),
        default_quantity=_require_positive(default_quantity, 'Quantity'),
        price_per_unit=_require_positive(price_per_unit, 'Price'),
        phone=(phone or '').strip(),
        address=(address or '').strip(),
    )
    logger.info(f"Customer {customer.id} created for {user.id}")
    return customer


def update_customer(user, customer_id, patch):
    customer = _get_owned(Customer, user, customer_id, 'Customer')
    unknown = set(patch) - set(CUSTOMER_FIELDS)
    if unknown:
        raise exceptions.ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

    if 'name' in patch and not (patch['name'] or '').strip():
        raise exceptions.ValidationError('Name is required')
    if 'default_quantity' in patch:
        _require_positive(patch['default_quantity'], 'Quantity')
    if 'price_per_unit' in patch:
        _require_positive(patch['price_per_unit'], 'Price')

    # Existing entry amounts keep the price they were recorded at.
    for name, value in patch.items():
        setattr(customer, name, value.strip() if isinstance(value, str) else value)
    customer.save()
    return customer


@transaction.atomic
def delete_customer(user, customer_id):
    customer = _get_owned(Customer, user, customer_id, 'Customer')
    entries_deleted, _ = DiaryEntry.objects.filter(customer=customer).delete()
    payments_deleted, _ = Payment.objects.filter(customer=customer).delete()
    customer.delete()
    logger.info(
        f"Customer {customer_id} deleted with {entries_deleted} entries "
        f"and {payments_deleted} payments"
    )
    return entries_deleted, payments_deleted


# Diary entries

def record_entry(user, customer_id, date, quantity, notes='', milk_quality=None, delivered=True):
    """
    Create a diary entry if the account's plan admits one.

    Returns ``(decision, entry)``; ``entry`` is None when the gate denies.
    """
    if not customer_id:
        raise exceptions.ValidationError('Please select a customer')
    quantity = _require_positive(quantity, 'Quantity')
    entry_date = parse_date(date)
    customer = _get_owned(Customer, user, customer_id, 'Customer')

    with transaction.atomic():
        # the account row is held until the insert so the count cannot go stale
        account = User.objects.select_for_update().get(pk=user.pk)
        used = DiaryEntry.objects.filter(owner=account).count()
        decision = can_record_entry(account_for_user(account), used)
        if not decision:
            return decision, None

        entry = DiaryEntry.objects.create(
            owner=account,
            customer=customer,
            date=entry_date,
            quantity=quantity,
            amount=round2(quantity * to_decimal(customer.price_per_unit)),
            notes=notes or '',
            milk_quality=milk_quality or None,
            delivered=delivered,
        )
    logger.info(f"Entry {entry.id} recorded for customer {customer.id} on {entry_date}")
    return decision, entry


def update_entry(user, entry_id, patch):
    entry = _get_owned(DiaryEntry, user, entry_id, 'Entry')
    unknown = set(patch) - set(ENTRY_PATCH_FIELDS)
    if unknown:
        raise exceptions.ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
    for name, value in patch.items():
        setattr(entry, name, value)
    entry.save(update_fields=list(patch) + ['updated_at'])
    return entry


def correct_entry_price(user, entry_id, new_unit_price):
    entry = _get_owned(DiaryEntry, user, entry_id, 'Entry')
    entry.amount = apply_unit_price_correction(entry, new_unit_price)
    entry.save(update_fields=['amount', 'updated_at'])
    logger.info(f"Entry {entry.id} re-priced to {entry.amount}")
    return entry


def delete_entry(user, entry_id):
    entry = _get_owned(DiaryEntry, user, entry_id, 'Entry')
    entry.delete()


# Payments

def add_payment(user, customer_id, amount, method='cash', note=None, date=None):
    amount = _require_positive(amount, 'Amount')
    if method not in dict(Payment.METHOD_CHOICES):
        raise exceptions.ValidationError(f"Unknown payment method {method!r}")
    customer = _get_owned(Customer, user, customer_id, 'Customer')

    # blank notes are stored as absent
    if isinstance(note, str) and note.strip():
        note = note.strip()
    else:
        note = None

    payment = Payment.objects.create(
        owner=user,
        customer=customer,
        amount=round2(amount),
        method=method,
        note=note,
        date=parse_date(date) if date else local_today(user.timezone),
    )
    logger.info(f"Payment {payment.id} of {payment.amount} recorded for customer {customer.id}")
    return payment


def delete_payment(user, payment_id):
    payment = _get_owned(Payment, user, payment_id, 'Payment')
    payment.delete()


# Subscriptions

def start_demo(user):
    subscription, created = Subscription.objects.get_or_create(
        user=user,
        defaults={
            'plan': DEMO_PLAN,
            'entry_limit': plan_config(DEMO_PLAN).entry_limit,
            'start_date': local_today(user.timezone),
            'end_date': None,
        },
    )
    return subscription


@transaction.atomic
def change_plan(user_id, plan, effective_date=None):
    try:
        user = User.objects.get(id=user_id)
    except (User.DoesNotExist, DjangoValidationError, ValueError):
        raise exceptions.NotFoundError(f"User {user_id} not found")

    cfg = plan_config(plan)
    period = apply_plan_change(plan, effective_date or local_today(user.timezone))
    subscription, _ = Subscription.objects.update_or_create(
        user=user,
        defaults={
            'plan': plan,
            'entry_limit': cfg.entry_limit,
            'start_date': period.start_date,
            'end_date': period.end_date,
        },
    )
    logger.info(f"Plan for {user.id} set to {plan} from {period.start_date} to {period.end_date}")
    return subscription
