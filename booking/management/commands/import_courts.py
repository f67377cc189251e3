import json
from decimal import Decimal, InvalidOperation
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from accounts.models import Owner
from booking.models import Court


class Command(BaseCommand):
    help = 'Loads courts for an establishment owner from a JSON file'

    def add_arguments(self, parser):
        parser.add_argument('json_file', type=str, help='Path to a JSON list of courts')
        parser.add_argument('--owner', required=True, help="Owner's login e-mail")

    @transaction.atomic
    def handle(self, *args, **options):
        json_file_path = options['json_file']
        email = options['owner'].strip().lower()

        owner = Owner.objects.filter(user__email=email).first()
        if owner is None:
            raise CommandError(f"No owner registered with e-mail '{email}'")

        self.stdout.write(self.style.SUCCESS(f"Importing courts from '{json_file_path}' for {owner}..."))

        try:
            with open(json_file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            raise CommandError(f"File not found: '{json_file_path}'")
        except json.JSONDecodeError:
            raise CommandError("Could not decode JSON from file.")

        created_count = 0
        updated_count = 0
        skipped_count = 0

        for court_data in data:
            name = (court_data.get('name') or '').strip()
            if not name:
                skipped_count += 1
                continue
            try:
                price = Decimal(str(court_data.get('price_per_hour', 0)))
            except InvalidOperation:
                self.stderr.write(self.style.WARNING(f"Skipping '{name}': invalid price"))
                skipped_count += 1
                continue

            _, created = Court.objects.update_or_create(
                owner=owner,
                name=name,
                defaults={
                    'sport_type': court_data.get('sport_type', ''),
                    'price_per_hour': price,
                    'availability': court_data.get('availability', ''),
                    'is_active': court_data.get('is_active', True),
                },
            )
            if created:
                created_count += 1
            else:
                updated_count += 1

        self.stdout.write(self.style.SUCCESS(
            f"Done: {created_count} created, {updated_count} updated, {skipped_count} skipped."
        ))
