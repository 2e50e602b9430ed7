from django.db import migrations, models

CONTENT_TYPES = [
    ("event", "Event"),
    ("company", "Company"),
    ("group", "Group"),
    ("person", "Person"),
    ("project", "Project"),
    ("product", "Product"),
    ("technology", "Technology"),
    ("news", "News"),
    ("job", "Job"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="SiteConfig",
            fields=[
                ("key", models.CharField(max_length=100, primary_key=True, serialize=False)),
                ("value", models.TextField(blank=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Site Setting",
                "verbose_name_plural": "Site Settings",
            },
        ),
        migrations.CreateModel(
            name="Reference",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("source_type", models.CharField(choices=CONTENT_TYPES, max_length=20)),
                ("source_id", models.PositiveIntegerField()),
                ("target_type", models.CharField(choices=CONTENT_TYPES, max_length=20)),
                ("target_id", models.PositiveIntegerField()),
                ("reference_text", models.CharField(max_length=500)),
                ("relation", models.CharField(blank=True, max_length=200)),
                ("field", models.CharField(default="description", max_length=50)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["source_type", "source_id"],
                "indexes": [
                    models.Index(fields=["source_type", "source_id"], name="core_refere_source__0f2a1c_idx"),
                    models.Index(fields=["target_type", "target_id"], name="core_refere_target__8d4e2b_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Comment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("content_type", models.CharField(choices=CONTENT_TYPES, max_length=20)),
                ("content_id", models.PositiveIntegerField()),
                ("author_name", models.CharField(blank=True, max_length=100)),
                ("content", models.TextField(max_length=5000)),
                (
                    "is_private",
                    models.BooleanField(default=False, help_text="Private comments are only visible to admins"),
                ),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("ip_hash", models.CharField(blank=True, max_length=16)),
                ("user_agent", models.CharField(blank=True, max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["content_type", "content_id"], name="core_commen_content_3b7c9e_idx"),
                    models.Index(fields=["ip_hash", "created_at"], name="core_commen_ip_hash_5a1d4f_idx"),
                ],
            },
        ),
    ]
