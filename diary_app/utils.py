# diary_app/utils.py
import calendar
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

import jwt
import pytz
from django.conf import settings
from django.utils import timezone

from .exceptions import ValidationError

CENT = Decimal('0.01')
ZERO = Decimal('0')


def generate_jwt_tokens(user):
    """Generate access and refresh tokens for a user"""
    now = timezone.now()

    access_payload = {
        'user_id': str(user.id),
        'role': user.role,
        'exp': now + timedelta(seconds=settings.JWT_ACCESS_TOKEN_LIFETIME),
        'iat': now,
        'type': 'access'
    }

    refresh_payload = {
        'user_id': str(user.id),
        'role': user.role,
        'exp': now + timedelta(seconds=settings.JWT_REFRESH_TOKEN_LIFETIME),
        'iat': now,
        'type': 'refresh'
    }

    access_token = jwt.encode(access_payload, settings.JWT_SECRET_KEY, algorithm='HS256')
    refresh_token = jwt.encode(refresh_payload, settings.JWT_SECRET_KEY, algorithm='HS256')

    return access_token, refresh_token


def local_today(user_timezone):
    """Today's calendar date in the account's timezone"""
    return timezone.now().astimezone(pytz.timezone(user_timezone)).date()


def current_month(user_timezone):
    return local_today(user_timezone).strftime('%Y-%m')


# Numbers

def to_decimal(value):
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"Not a number: {value!r}")


def round2(value):
    """Round a currency amount to 2 decimal places, half away from zero."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def fmt2(value):
    return f"{round2(value):.2f}"


# Dates and months

def date_key(value):
    """ISO ``YYYY-MM-DD`` text for a date, or the value itself if already text."""
    if isinstance(value, (date, datetime)):
        return value.strftime('%Y-%m-%d')
    return str(value)


def in_month(value, month):
    # Plain prefix test on the ISO text; no timezone conversion happens here.
    return date_key(value).startswith(month)


def parse_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value), '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(f"Invalid date {value!r}. Use YYYY-MM-DD")


def parse_month(value):
    """Validate a ``YYYY-MM`` month key and return it unchanged."""
    try:
        datetime.strptime(str(value), '%Y-%m')
    except ValueError:
        raise ValidationError(f"Invalid month {value!r}. Use YYYY-MM")
    if len(str(value)) != 7:
        raise ValidationError(f"Invalid month {value!r}. Use YYYY-MM")
    return str(value)


def add_months(start, months):
    """Same day-of-month ``months`` later, clamped to the end of a shorter month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def shift_month(month, delta):
    first = parse_date(parse_month(month) + '-01')
    return add_months(first, delta).strftime('%Y-%m')


def month_label(month):
    return parse_date(parse_month(month) + '-01').strftime('%B %Y')
