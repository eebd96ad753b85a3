"""
Management command: seed default carriers and the break-glass admin.

Usage:
    python manage.py seed_initial_data
    python manage.py seed_initial_data --admin-password 's3cret!'
"""

from django.conf import settings
from django.core.management.base import BaseCommand
from apps.authentication.models import User, StaffUser
from apps.pallets.models import Carrier


CARRIERS = [
    "BRT",
    "DHL Freight",
    "GLS",
    "Arco Spedizioni",
    "Fercam",
    "TNT / FedEx",
]


class Command(BaseCommand):
    help = "Seed default carriers and the break-glass admin staff row"

    def add_arguments(self, parser):
        parser.add_argument("--admin-password", default=None,
                            help="Password for a newly created break-glass user")

    def handle(self, *args, **options):
        created_carriers = 0
        for name in CARRIERS:
            _, created = Carrier.objects.get_or_create(name=name)
            if created:
                created_carriers += 1

        created_staff = 0
        for email in settings.BREAK_GLASS_EMAILS:
            user = User.objects.filter(email=email.strip().lower()).first()
            if user is None:
                user = User.objects.create_user(
                    email=email,
                    password=options["admin_password"],
                    full_name="SPST Admin",
                )
            _, created = StaffUser.objects.get_or_create(
                user=user, defaults={"role": StaffUser.Role.ADMIN, "enabled": True},
            )
            if created:
                created_staff += 1

        self.stdout.write(self.style.SUCCESS(
            f"Seeded {created_carriers} carriers and {created_staff} staff users."
        ))
