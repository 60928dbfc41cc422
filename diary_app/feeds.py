# diary_app/feeds.py
"""
Snapshot feed: listeners get a whole new AccountSnapshot after every
committed change to one of the account's records.
"""
import logging
import threading

from django.db import transaction
from django.db.models.signals import post_delete, post_save

from .models import Customer, DiaryEntry, Payment, Subscription
from .services import load_snapshot

logger = logging.getLogger(__name__)

_listeners = {}
_lock = threading.Lock()


class FeedHandle:
    def __init__(self, account_id, callback):
        self.account_id = str(account_id)
        self.callback = callback
        self.active = True

    def unsubscribe(self):
        if not self.active:
            return
        with _lock:
            callbacks = _listeners.get(self.account_id, [])
            if self.callback in callbacks:
                callbacks.remove(self.callback)
            if not callbacks:
                _listeners.pop(self.account_id, None)
        self.active = False


def subscribe(account_id, callback):
    """Call ``callback(snapshot)`` after each change; returns a FeedHandle."""
    handle = FeedHandle(account_id, callback)
    with _lock:
        _listeners.setdefault(handle.account_id, []).append(callback)
    return handle


def publish(account_id):
    with _lock:
        callbacks = list(_listeners.get(str(account_id), []))
    if not callbacks:
        return

    snapshot = load_snapshot(account_id)
    for callback in callbacks:
        try:
            callback(snapshot)
        except Exception:
            logger.exception(f"Snapshot listener failed for account {account_id}")


class _Publish:
    """on_commit callback that publishes one account's snapshot."""

    def __init__(self, account_id):
        self.account_id = account_id

    def __call__(self):
        publish(self.account_id)


def _scope(savepoint_ids):
    return set(savepoint_ids) - {None}


def _already_scheduled(connection, account_id):
    # A callback queued in the same atomic block already covers this change.
    scope = _scope(connection.savepoint_ids)
    return any(
        isinstance(func, _Publish) and func.account_id == account_id and _scope(sids) == scope
        for sids, func, *_ in connection.run_on_commit
    )


def _account_id(instance):
    if isinstance(instance, Subscription):
        return str(instance.user_id)
    return str(instance.owner_id)


def _record_changed(sender, instance, using=None, **kwargs):
    account_id = _account_id(instance)
    connection = transaction.get_connection(using)
    if connection.in_atomic_block and _already_scheduled(connection, account_id):
        return
    transaction.on_commit(_Publish(account_id), using=using)


def connect_signals():
    for model in (Customer, DiaryEntry, Payment, Subscription):
        post_save.connect(_record_changed, sender=model, dispatch_uid=f'feed-save-{model.__name__}')
        post_delete.connect(_record_changed, sender=model, dispatch_uid=f'feed-delete-{model.__name__}')
