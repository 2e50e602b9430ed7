"""
Django management command to create an admin user for /manage
Usage: python manage.py create_admin_user --email admin@example.com --password secret
"""

from django.core.management.base import BaseCommand, CommandError

from accounts.models import User


class Command(BaseCommand):
    help = "Create an admin user who can sign in to /manage"

    def add_arguments(self, parser):
        parser.add_argument("--email", type=str, required=True, help="User email address")
        parser.add_argument("--password", type=str, required=True, help="Password")
        parser.add_argument(
            "--promote",
            action="store_true",
            help="Give an existing user the admin role instead of failing",
        )

    def handle(self, *args, **options):
        email = options["email"].strip().lower()

        existing = User.objects.filter(email=email).first()
        if existing:
            if not options["promote"]:
                raise CommandError(f"User {email} already exists (use --promote)")
            existing.role = User.Role.ADMIN
            existing.set_password(options["password"])
            existing.save(update_fields=["role", "password"])
            self.stdout.write(self.style.SUCCESS(f"Promoted {email} to admin"))
            return

        user = User.objects.create_user(
            email=email,
            password=options["password"],
            role=User.Role.ADMIN,
        )
        self.stdout.write(self.style.SUCCESS("Admin user created successfully"))
        self.stdout.write(f"Email: {user.email}")
        self.stdout.write(f"Role: {user.role}")
