import logging

from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError

from users.models import Role, User

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Creates the single superadmin account."

    def add_arguments(self, parser):
        parser.add_argument("--email", required=True)
        parser.add_argument("--name", required=True)
        parser.add_argument("--password", required=True)

    def handle(self, *args, **options):
        existing = User.objects.filter(role=Role.SUPERADMIN).first()
        if existing is not None:
            raise CommandError(f"A superadmin already exists: {existing.email}")

        email = options["email"].strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            raise CommandError(f"User with email {email} already exists")

        try:
            validate_password(options["password"])
        except ValidationError as exc:
            raise CommandError(" ".join(exc.messages))

        user = User.objects.create_superadmin(
            email=email, password=options["password"], name=options["name"]
        )
        logger.info("Superadmin %s created", user.pk)
        self.stdout.write(self.style.SUCCESS(f"Superadmin created: {user.email}"))
