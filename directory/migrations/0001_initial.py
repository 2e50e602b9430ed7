import django.db.models.deletion
from django.db import migrations, models


def slugged_fields():
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("name", models.CharField(max_length=200)),
        ("slug", models.SlugField(blank=True, max_length=220, unique=True)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Technology",
            fields=slugged_fields()
            + [
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("language", "Language"),
                            ("framework", "Framework"),
                            ("database", "Database"),
                            ("cloud", "Cloud"),
                            ("platform", "Platform"),
                            ("tool", "Tool"),
                            ("other", "Other"),
                        ],
                        default="other",
                        max_length=20,
                    ),
                ),
                ("description", models.TextField(blank=True)),
                ("website", models.URLField(blank=True)),
                ("icon", models.CharField(blank=True, max_length=255)),
                ("visible", models.BooleanField(default=True)),
            ],
            options={"ordering": ["name"], "abstract": False, "verbose_name_plural": "Technologies"},
        ),
        migrations.CreateModel(
            name="Company",
            fields=slugged_fields()
            + [
                ("description", models.TextField(blank=True, help_text="Markdown, supports [[references]]")),
                ("website", models.URLField(blank=True)),
                ("wikipedia", models.URLField(blank=True)),
                ("github", models.URLField(blank=True)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("location", models.CharField(blank=True, max_length=200)),
                ("founded", models.CharField(blank=True, help_text="Year, e.g. 2014", max_length=20)),
                ("logo", models.CharField(blank=True, max_length=255)),
                ("cover_image", models.CharField(blank=True, max_length=255)),
                ("visible", models.BooleanField(default=True)),
                (
                    "technologies",
                    models.ManyToManyField(blank=True, related_name="companies", to="directory.technology"),
                ),
            ],
            options={"ordering": ["name"], "abstract": False, "verbose_name_plural": "Companies"},
        ),
        migrations.CreateModel(
            name="Group",
            fields=slugged_fields()
            + [
                ("description", models.TextField(blank=True)),
                ("website", models.URLField(blank=True)),
                ("meeting_frequency", models.CharField(blank=True, max_length=200)),
                ("logo", models.CharField(blank=True, max_length=255)),
                ("cover_image", models.CharField(blank=True, max_length=255)),
                ("visible", models.BooleanField(default=True)),
            ],
            options={"ordering": ["name"], "abstract": False},
        ),
        migrations.CreateModel(
            name="Person",
            fields=slugged_fields()
            + [
                ("bio", models.TextField(blank=True)),
                ("website", models.URLField(blank=True)),
                ("github", models.URLField(blank=True)),
                ("avatar", models.CharField(blank=True, max_length=255)),
                (
                    "social_links",
                    models.JSONField(blank=True, default=dict, help_text='e.g. {"linkedin": "https://..."}'),
                ),
                ("visible", models.BooleanField(default=True)),
            ],
            options={"ordering": ["name"], "abstract": False, "verbose_name_plural": "People"},
        ),
        migrations.CreateModel(
            name="Project",
            fields=slugged_fields()
            + [
                ("description", models.TextField(blank=True)),
                ("links", models.JSONField(blank=True, default=dict, help_text='e.g. {"github": "https://..."}')),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("game", "Game"),
                            ("webapp", "Web App"),
                            ("library", "Library"),
                            ("tool", "Tool"),
                            ("hardware", "Hardware"),
                            ("other", "Other"),
                        ],
                        default="other",
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("active", "Active"),
                            ("completed", "Completed"),
                            ("archived", "Archived"),
                            ("on-hold", "On Hold"),
                        ],
                        default="active",
                        max_length=20,
                    ),
                ),
                ("logo", models.CharField(blank=True, max_length=255)),
                ("cover_image", models.CharField(blank=True, max_length=255)),
                (
                    "technologies",
                    models.ManyToManyField(blank=True, related_name="projects", to="directory.technology"),
                ),
            ],
            options={"ordering": ["name"], "abstract": False},
        ),
        migrations.CreateModel(
            name="Product",
            fields=slugged_fields()
            + [
                ("description", models.TextField(blank=True)),
                ("website", models.URLField(blank=True)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("software", "Software"),
                            ("hardware", "Hardware"),
                            ("service", "Service"),
                            ("other", "Other"),
                        ],
                        default="software",
                        max_length=20,
                    ),
                ),
                (
                    "company",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="products",
                        to="directory.company",
                    ),
                ),
                ("logo", models.CharField(blank=True, max_length=255)),
                ("cover_image", models.CharField(blank=True, max_length=255)),
            ],
            options={"ordering": ["name"], "abstract": False},
        ),
    ]
