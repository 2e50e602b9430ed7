"""
Django management command to rebuild the reference index from scratch
Usage: python manage.py rebuild_references
"""

from django.core.management.base import BaseCommand

from core.references import rebuild_references


class Command(BaseCommand):
    help = "Re-scan every entity for [[references]] and rebuild the backlink index"

    def handle(self, *args, **options):
        count = rebuild_references()
        self.stdout.write(self.style.SUCCESS(f"Rebuilt {count} references"))
