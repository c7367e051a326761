"""Create the first administrator account."""

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from access_control.roles import Role


class Command(BaseCommand):
    """Management command that bootstraps an admin account if none exists."""

    help = (
        "Create an admin account from ADMIN_EMAIL / ADMIN_USERNAME / ADMIN_PASSWORD "
        "unless an admin already exists. Command-line options override the settings."
    )

    def add_arguments(self, parser):
        parser.add_argument("--email", help="Admin email (defaults to ADMIN_EMAIL).")
        parser.add_argument("--username", help="Admin username (defaults to ADMIN_USERNAME).")
        parser.add_argument("--password", help="Admin password (defaults to ADMIN_PASSWORD).")
        parser.add_argument("--full-name", default="Administrator", help="Display name for the account.")

    def handle(self, *args, **options):
        """Entrypoint for the management command."""
        User = get_user_model()

        existing = User.objects.filter(role=Role.ADMIN.label).order_by("date_joined").first()
        if existing is not None:
            self.stdout.write(f"Admin account already exists: {existing.email}")
            return

        email = options.get("email") or settings.ADMIN_EMAIL
        username = options.get("username") or settings.ADMIN_USERNAME
        password = options.get("password") or settings.ADMIN_PASSWORD
        if not password:
            raise CommandError("Set ADMIN_PASSWORD or pass --password to create the admin account.")
        if User.objects.filter(email__iexact=email).exists():
            raise CommandError(f"An account with email {email} already exists and is not an admin.")

        admin = User.objects.create_superuser(
            email=email,
            password=password,
            username=username,
            full_name=options["full_name"],
        )
        self.stdout.write(self.style.SUCCESS(f"Created admin account {admin.email}."))
        self.stdout.write(self.style.WARNING("Change the password after the first login."))
