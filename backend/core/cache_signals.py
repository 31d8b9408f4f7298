"""
Cache invalidation signals
Automatically invalidate cached read models when their source rows change
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import invalidate_cache_pattern, DASHBOARD_KEY_PREFIX, CB_OVERVIEW_KEY_PREFIX, REPORTS_KEY_PREFIX

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()

# Models feeding the Creative Boost monthly overview
CB_OVERVIEW_MODELS = {'OutputType', 'CreativeBoostClient', 'ClientMonth', 'ClientMonthOutput', 'Client'}

# Models feeding the executive dashboard and reports
DASHBOARD_MODELS = {
    'Client', 'Engagement', 'EngagementService', 'EngagementAssignment', 'Colleague',
    'Lead', 'Meeting', 'ClientMonth', 'ClientMonthOutput', 'OutputType', 'ExtraWork',
}


@contextmanager
def suspend_cache_signals():
    """
    Context manager to temporarily suspend cache invalidation signals.
    Useful for bulk operations (month sync, seeding) to prevent excessive cache clearing.
    Remember to manually invalidate cache after the block!
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


def invalidate_dashboard_cache_manual():
    """Manually invalidate dashboard and report caches"""
    invalidate_cache_pattern(DASHBOARD_KEY_PREFIX)
    invalidate_cache_pattern(REPORTS_KEY_PREFIX)
    logger.info("Invalidated dashboard cache (Manual/Signal)")


def invalidate_cb_overview_cache_manual():
    """Manually invalidate Creative Boost overview cache"""
    invalidate_cache_pattern(CB_OVERVIEW_KEY_PREFIX)
    logger.info("Invalidated Creative Boost overview cache (Manual/Signal)")


@receiver([post_save, post_delete])
def invalidate_read_model_caches(sender, instance, **kwargs):
    """Invalidate dashboard / Creative Boost caches when their source models change"""
    if is_suspended():
        return

    model_name = sender.__name__
    if model_name in CB_OVERVIEW_MODELS:
        invalidate_cb_overview_cache_manual()
    if model_name in DASHBOARD_MODELS:
        invalidate_dashboard_cache_manual()
