"""
Management command to create the default Creative Boost output catalogue
"""
from django.core.management.base import BaseCommand
from backend.creative_boost.models import OutputType
from backend.creative_boost.services import DEFAULT_OUTPUT_TYPES


class Command(BaseCommand):
    help = "Creates the default Creative Boost output types"

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS("SEEDING OUTPUT TYPES"))

        created_count = 0
        for sort_order, (name, category, base_credits) in enumerate(DEFAULT_OUTPUT_TYPES, start=1):
            output_type, created = OutputType.objects.get_or_create(
                name=name,
                defaults={
                    'category': category,
                    'base_credits': base_credits,
                    'sort_order': sort_order,
                }
            )
            if created:
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f"  Created: {name} ({base_credits} credits)"))
            else:
                self.stdout.write(self.style.WARNING(f"  Skipped (already exists): {name}"))

        self.stdout.write(f"Output types created: {created_count}")
        self.stdout.write(f"Total output types: {OutputType.objects.count()}")
