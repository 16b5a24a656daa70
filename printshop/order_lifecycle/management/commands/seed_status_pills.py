from django.core.management.base import BaseCommand, CommandError

from organizations.models import Organization
from order_lifecycle.services import StatusPillService


class Command(BaseCommand):
    help = "Seed the standard order status pills for organizations that have none."

    def add_arguments(self, parser):
        parser.add_argument(
            "--organization",
            help="Slug of a single organization to seed (default: all active organizations).",
        )

    def handle(self, *args, **options):
        organizations = Organization.objects.filter(is_active=True).order_by("name")
        slug = options.get("organization")
        if slug:
            organizations = organizations.filter(slug=slug)
            if not organizations.exists():
                raise CommandError(f"Organization '{slug}' not found.")

        service = StatusPillService()
        seeded = 0
        for organization in organizations:
            created = service.seed_defaults(organization.id)
            if created:
                seeded += 1
                self.stdout.write(f"{organization.slug}: seeded {len(created)} pills")
            else:
                self.stdout.write(f"{organization.slug}: pills already present, skipped")

        self.stdout.write(self.style.SUCCESS(f"Seeded status pills for {seeded} organization(s)."))
