from django.core.management.base import BaseCommand, CommandError
from rest_framework_simplejwt.tokens import AccessToken

from clinic.models import User


class Command(BaseCommand):
    help = "Print a bearer access token for an existing user."

    def add_arguments(self, parser):
        parser.add_argument('username')

    def handle(self, *args, **options):
        try:
            user = User.objects.get(username=options['username'])
        except User.DoesNotExist:
            raise CommandError(f"unknown user: {options['username']}")
        if user.is_suspended:
            raise CommandError(f"user {user.username} is suspended")
        self.stdout.write(str(AccessToken.for_user(user)))
