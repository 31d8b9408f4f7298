"""
Management command to create the Creative Boost month rows of active engagements
"""
from datetime import date
from django.core.management.base import BaseCommand, CommandError
from backend.creative_boost.services import ensure_client_months_for_active_engagements


class Command(BaseCommand):
    help = "Creates missing Creative Boost months for engagements that sell Creative Boost"

    def add_arguments(self, parser):
        parser.add_argument('--year', type=int, help='Year (defaults to the current year)')
        parser.add_argument('--month', type=int, help='Month 1-12 (defaults to the current month)')

    def handle(self, *args, **options):
        today = date.today()
        year = options['year'] or today.year
        month = options['month'] or today.month
        if not 1 <= month <= 12:
            raise CommandError(f"Invalid month: {month}")

        created = ensure_client_months_for_active_engagements(year, month)
        for client_month in created:
            self.stdout.write(self.style.SUCCESS(
                f"  Created: {client_month.client} (max {client_month.max_credits}, {client_month.price_per_credit}/credit)"
            ))
        self.stdout.write(f"Months created for {year}-{month:02d}: {len(created)}")
