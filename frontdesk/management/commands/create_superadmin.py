import getpass

from django.core.management.base import BaseCommand, CommandError
from django.db import IntegrityError

from frontdesk import roles
from frontdesk.models import Admin


class Command(BaseCommand):
    help = "Create the first Super Admin account (skipped if the e-mail already exists)."

    def add_arguments(self, parser):
        parser.add_argument("--username", default="superadmin")
        parser.add_argument("--email", required=True)
        parser.add_argument("--password", help="Prompted for when omitted.")
        parser.add_argument("--first-name", default="Super")
        parser.add_argument("--last-name", default="Admin")
        parser.add_argument("--department", default="Administration")

    def handle(self, *args, **options):
        email = options["email"].strip().lower()
        if Admin.objects.filter(email=email).exists():
            self.stdout.write(self.style.WARNING(f"Admin {email} already exists, nothing to do."))
            return

        password = options["password"] or getpass.getpass("Password: ")
        if len(password) < 8:
            raise CommandError("Password must be at least 8 characters.")

        try:
            admin = Admin.objects.create_admin(
                username=options["username"],
                email=email,
                password=password,
                first_name=options["first_name"],
                last_name=options["last_name"],
                department=options["department"],
                role=roles.SUPER_ADMIN,
            )
        except IntegrityError as e:
            raise CommandError(f"Could not create admin: {e}")
        self.stdout.write(self.style.SUCCESS(f"Super Admin {admin.username} <{admin.email}> created."))
