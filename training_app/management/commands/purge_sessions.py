from django.core.management.base import BaseCommand

from accounts.models import AuthSession


class Command(BaseCommand):
    help = "Delete login sessions whose expiry has passed."

    def handle(self, *args, **options):
        deleted, _ = AuthSession.objects.expired().delete()
        self.stdout.write(self.style.SUCCESS(f"Deleted {deleted} expired session(s)."))
