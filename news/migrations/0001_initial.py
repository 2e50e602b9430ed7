from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="News",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200)),
                ("slug", models.SlugField(blank=True, max_length=220, unique=True)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("announcement", "Announcement"),
                            ("editorial", "Editorial"),
                            ("meta", "Site News"),
                        ],
                        default="announcement",
                        max_length=20,
                    ),
                ),
                ("content", models.TextField(help_text="Markdown, supports [[references]]")),
                ("excerpt", models.TextField(blank=True, max_length=500)),
                ("cover_image", models.CharField(blank=True, max_length=255)),
                ("published_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ["-published_at", "-created_at"], "verbose_name_plural": "News"},
        ),
    ]
