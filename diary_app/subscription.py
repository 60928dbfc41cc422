# diary_app/subscription.py
"""Subscription plans and the entry-limit gate."""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .exceptions import ValidationError
from .utils import add_months

logger = logging.getLogger(__name__)

DEMO_PLAN = 'demo'
DEMO_ENTRY_LIMIT = 3
DEMO_LIMIT_REASON = 'demo limit reached'
DEMO_LIMIT_MESSAGE = 'Demo limit reached. Please contact the owner to upgrade your subscription.'


@dataclass(frozen=True)
class PlanConfig:
    label: str
    duration_months: int
    entry_limit: Optional[int]  # None = unlimited


PLAN_CONFIG = {
    'demo': PlanConfig('Demo - 3 entries free', 0, DEMO_ENTRY_LIMIT),
    'monthly': PlanConfig('Monthly - ₹99', 1, None),
    'half_yearly': PlanConfig('6 Months - ₹549', 6, None),
    'yearly': PlanConfig('12 Months - ₹1049', 12, None),
}


@dataclass(frozen=True)
class SubscriptionTerms:
    plan: str
    entry_limit: Optional[int]
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class Account:
    """What the gate needs to know about an account, as plain data."""
    exempt_from_limits: bool = False
    subscription: Optional[SubscriptionTerms] = None


@dataclass(frozen=True)
class GateDecision:
    admitted: bool
    reason: Optional[str] = None

    def __bool__(self):
        return self.admitted


ADMIT = GateDecision(True)


def deny(reason):
    return GateDecision(False, reason)


@dataclass(frozen=True)
class PlanPeriod:
    start_date: date
    end_date: Optional[date]


def plan_config(plan) -> PlanConfig:
    try:
        return PLAN_CONFIG[plan]
    except KeyError:
        raise ValidationError(f"Unknown plan {plan!r}. Use one of: {', '.join(PLAN_CONFIG)}")


def effective_limit(account: Account) -> Optional[int]:
    if account.exempt_from_limits:
        return None
    if account.subscription is None:
        return DEMO_ENTRY_LIMIT
    return account.subscription.entry_limit


def can_record_entry(account: Account, current_entry_count: int) -> GateDecision:
    limit = effective_limit(account)
    if limit is None:
        return ADMIT
    if current_entry_count >= limit:
        logger.info(f"Entry refused: {current_entry_count} of {limit} entries used")
        return deny(DEMO_LIMIT_REASON)
    return ADMIT


def entry_usage(account: Account, used: int):
    limit = effective_limit(account)
    return {
        'used': used,
        'limit': limit,
        'remaining': None if limit is None else max(limit - used, 0),
    }


def apply_plan_change(plan, effective_date: date) -> PlanPeriod:
    cfg = plan_config(plan)
    if cfg.duration_months == 0:
        return PlanPeriod(start_date=effective_date, end_date=None)
    return PlanPeriod(
        start_date=effective_date,
        end_date=add_months(effective_date, cfg.duration_months),
    )


def current_plan_label(account: Account) -> str:
    if account.subscription is None:
        return PLAN_CONFIG[DEMO_PLAN].label + ' (default)'
    return plan_config(account.subscription.plan).label
