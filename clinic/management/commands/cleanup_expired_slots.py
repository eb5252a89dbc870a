from django.core.management.base import BaseCommand
from django.utils import timezone

from clinic.services.slots import purge_expired_slots


class Command(BaseCommand):
    help = "Delete unbooked slots whose end time has passed and broadcast the new collection versions."

    def add_arguments(self, parser):
        parser.add_argument('--dry-run', action='store_true', help='Only report how many slots would be removed.')

    def handle(self, *args, **options):
        now = timezone.now()
        n = purge_expired_slots(now=now, dry_run=options['dry_run'])
        if options['dry_run']:
            self.stdout.write(f"{n} expired slot(s) would be removed")
            return
        self.stdout.write(self.style.SUCCESS(f"Removed {n} expired slot(s) at {now.isoformat()}"))
