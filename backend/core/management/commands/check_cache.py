"""
Check the cache backend used for dashboard and Creative Boost read models.

Usage:
    python manage.py check_cache
    python manage.py check_cache --clear
"""
from django.conf import settings
from django.core.cache import cache
from django.core.management.base import BaseCommand, CommandError

from backend.core.cache_signals import invalidate_cb_overview_cache_manual, invalidate_dashboard_cache_manual
from backend.core.cache_utils import make_cache_key, DASHBOARD_KEY_PREFIX


class Command(BaseCommand):
    help = 'Verify the cache backend works and optionally clear the read model caches'

    def add_arguments(self, parser):
        parser.add_argument('--clear', action='store_true', help='Invalidate dashboard and Creative Boost caches')

    def handle(self, *args, **options):
        self.stdout.write(f"Cache backend: {settings.CACHES['default']['BACKEND']}")
        self.stdout.write(f"Cache location: {settings.CACHES['default'].get('LOCATION', 'N/A')}")

        key = make_cache_key(DASHBOARD_KEY_PREFIX, 'check_cache')
        cache.set(key, {'ok': True}, 60)
        if cache.get(key) != {'ok': True}:
            raise CommandError('Cache GET did not return the value that was SET')
        cache.delete(key)
        if cache.get(key) is not None:
            raise CommandError('Cache DELETE did not remove the key')
        self.stdout.write(self.style.SUCCESS('Cache SET/GET/DELETE work'))

        if options['clear']:
            invalidate_dashboard_cache_manual()
            invalidate_cb_overview_cache_manual()
            self.stdout.write(self.style.SUCCESS('Read model caches invalidated'))
