import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("directory", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="JobImportSource",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "source_type",
                    models.CharField(choices=[("greenhouse", "Greenhouse"), ("lever", "Lever")], max_length=20),
                ),
                (
                    "source_identifier",
                    models.CharField(help_text="Board token or company slug on the ATS", max_length=200),
                ),
                ("source_url", models.URLField(blank=True)),
                ("last_fetched_at", models.DateTimeField(blank=True, null=True)),
                (
                    "fetch_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("success", "Success"), ("error", "Error")],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("fetch_error", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="job_sources",
                        to="directory.company",
                    ),
                ),
            ],
            options={
                "ordering": ["company__name"],
                "unique_together": {("source_type", "source_identifier")},
            },
        ),
        migrations.CreateModel(
            name="Job",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=300)),
                ("slug", models.SlugField(blank=True, max_length=320, unique=True)),
                ("description", models.TextField(blank=True, help_text="Markdown, supports [[references]]")),
                ("description_html", models.TextField(blank=True)),
                (
                    "company_name",
                    models.CharField(
                        blank=True, help_text="Used when the company is not in the directory", max_length=200
                    ),
                ),
                ("location", models.CharField(blank=True, max_length=300)),
                ("department", models.CharField(blank=True, max_length=200)),
                (
                    "workplace_type",
                    models.CharField(
                        blank=True,
                        choices=[("remote", "Remote"), ("onsite", "On-site"), ("hybrid", "Hybrid")],
                        max_length=20,
                    ),
                ),
                ("salary_range", models.CharField(blank=True, max_length=100)),
                ("url", models.URLField(help_text="Where to apply", max_length=1000)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("active", "Active"),
                            ("removed", "Removed"),
                            ("filled", "Filled"),
                            ("expired", "Expired"),
                            ("hidden", "Hidden"),
                        ],
                        default="active",
                        max_length=20,
                    ),
                ),
                (
                    "source_type",
                    models.CharField(
                        choices=[("manual", "Manual"), ("imported", "Imported")], default="manual", max_length=20
                    ),
                ),
                ("external_id", models.CharField(blank=True, max_length=200)),
                ("posted_at", models.DateTimeField(blank=True, null=True)),
                ("expires_at", models.DateTimeField(blank=True, null=True)),
                ("external_updated_at", models.DateTimeField(blank=True, null=True)),
                ("first_seen_at", models.DateTimeField(blank=True, null=True)),
                ("last_seen_at", models.DateTimeField(blank=True, null=True)),
                ("removed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "company",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="jobs",
                        to="directory.company",
                    ),
                ),
                (
                    "source",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="jobs",
                        to="jobs.jobimportsource",
                    ),
                ),
            ],
            options={
                "ordering": ["-posted_at", "-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="jobs_job_status_4e8b21_idx"),
                    models.Index(fields=["source", "external_id"], name="jobs_job_source__9a3c6d_idx"),
                ],
            },
        ),
    ]
