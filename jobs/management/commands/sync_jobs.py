"""
Django management command to pull jobs from every configured ATS board
Run this from a scheduler (e.g. hourly cron).

Usage:
    python manage.py sync_jobs
    python manage.py sync_jobs --source 3  # One source only
"""

from django.core.management.base import BaseCommand, CommandError

from jobs.models import JobImportSource
from jobs.sync import sync_jobs


class Command(BaseCommand):
    help = "Sync imported jobs from Greenhouse and Lever boards"

    def add_arguments(self, parser):
        parser.add_argument("--source", type=int, help="Only sync the import source with this id")

    def handle(self, *args, **options):
        sources = JobImportSource.objects.select_related("company")
        if options["source"]:
            sources = sources.filter(pk=options["source"])
            if not sources.exists():
                raise CommandError(f"Import source {options['source']} does not exist")

        failures = 0
        for source in sources:
            result = sync_jobs(source)
            if result.success:
                self.stdout.write(
                    self.style.SUCCESS(
                        f"{source}: +{result.added} ~{result.updated} -{result.removed} "
                        f"reactivated {result.reactivated}, {result.total_active} active"
                    )
                )
            else:
                failures += 1
                self.stdout.write(self.style.ERROR(f"{source}: {result.error}"))

        if failures:
            self.stdout.write(self.style.WARNING(f"{failures} source(s) failed"))
