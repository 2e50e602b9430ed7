import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200)),
                ("slug", models.SlugField(blank=True, max_length=220, unique=True)),
                ("description", models.TextField(help_text="Markdown, supports [[references]]")),
                ("location", models.CharField(blank=True, max_length=300)),
                ("link", models.URLField(max_length=500)),
                (
                    "organizer",
                    models.CharField(
                        blank=True,
                        help_text="Comma separated, names can match directory entries",
                        max_length=300,
                    ),
                ),
                ("cover_image", models.CharField(blank=True, max_length=255)),
                ("icon_image", models.CharField(blank=True, max_length=255)),
                ("requires_signup", models.BooleanField(default=False)),
                (
                    "recurrence_rule",
                    models.CharField(blank=True, help_text="e.g. FREQ=WEEKLY;BYDAY=TH", max_length=100),
                ),
                ("recurrence_end", models.DateField(blank=True, null=True)),
                ("default_start_time", models.TimeField(blank=True, null=True)),
                ("default_end_time", models.TimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ["title"]},
        ),
        migrations.CreateModel(
            name="EventDate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_date", models.DateTimeField()),
                ("end_date", models.DateTimeField(blank=True, null=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="dates",
                        to="events.event",
                    ),
                ),
            ],
            options={"ordering": ["start_date"]},
        ),
        migrations.CreateModel(
            name="EventOccurrence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("occurrence_date", models.DateField()),
                ("location", models.CharField(blank=True, max_length=300)),
                ("description", models.TextField(blank=True)),
                ("link", models.URLField(blank=True, max_length=500)),
                ("start_time", models.TimeField(blank=True, null=True)),
                ("end_time", models.TimeField(blank=True, null=True)),
                ("cancelled", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="overrides",
                        to="events.event",
                    ),
                ),
            ],
            options={
                "ordering": ["occurrence_date"],
                "indexes": [
                    models.Index(fields=["event", "occurrence_date"], name="events_even_event_i_7c2f1a_idx")
                ],
                "unique_together": {("event", "occurrence_date")},
            },
        ),
    ]
