from django.db import models

from core.utils import unique_slug


class SluggedModel(models.Model):
    """
    Abstract base for directory entries.

    The slug is generated from ``name`` on first save and kept unique across
    the table with ``-2``, ``-3``... suffixes.
    """

    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["name"]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(type(self), self.name, exclude_pk=self.pk)
        super().save(*args, **kwargs)


class Technology(SluggedModel):
    class Category(models.TextChoices):
        LANGUAGE = "language", "Language"
        FRAMEWORK = "framework", "Framework"
        DATABASE = "database", "Database"
        CLOUD = "cloud", "Cloud"
        PLATFORM = "platform", "Platform"
        TOOL = "tool", "Tool"
        OTHER = "other", "Other"

    category = models.CharField(max_length=20, choices=Category.choices, default=Category.OTHER)
    description = models.TextField(blank=True)
    website = models.URLField(blank=True)
    icon = models.CharField(max_length=255, blank=True)
    visible = models.BooleanField(default=True)

    class Meta(SluggedModel.Meta):
        verbose_name_plural = "Technologies"


class Company(SluggedModel):
    description = models.TextField(blank=True, help_text="Markdown, supports [[references]]")
    website = models.URLField(blank=True)
    wikipedia = models.URLField(blank=True)
    github = models.URLField(blank=True)
    email = models.EmailField(blank=True)
    location = models.CharField(max_length=200, blank=True)
    founded = models.CharField(max_length=20, blank=True, help_text="Year, e.g. 2014")
    logo = models.CharField(max_length=255, blank=True)
    cover_image = models.CharField(max_length=255, blank=True)
    visible = models.BooleanField(default=True)
    technologies = models.ManyToManyField(Technology, blank=True, related_name="companies")

    class Meta(SluggedModel.Meta):
        verbose_name_plural = "Companies"


class Group(SluggedModel):
    description = models.TextField(blank=True)
    website = models.URLField(blank=True)
    meeting_frequency = models.CharField(max_length=200, blank=True)
    logo = models.CharField(max_length=255, blank=True)
    cover_image = models.CharField(max_length=255, blank=True)
    visible = models.BooleanField(default=True)


class Person(SluggedModel):
    bio = models.TextField(blank=True)
    website = models.URLField(blank=True)
    github = models.URLField(blank=True)
    avatar = models.CharField(max_length=255, blank=True)
    social_links = models.JSONField(default=dict, blank=True, help_text='e.g. {"linkedin": "https://..."}')
    visible = models.BooleanField(default=True)

    class Meta(SluggedModel.Meta):
        verbose_name_plural = "People"


class Project(SluggedModel):
    class Type(models.TextChoices):
        GAME = "game", "Game"
        WEBAPP = "webapp", "Web App"
        LIBRARY = "library", "Library"
        TOOL = "tool", "Tool"
        HARDWARE = "hardware", "Hardware"
        OTHER = "other", "Other"

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        COMPLETED = "completed", "Completed"
        ARCHIVED = "archived", "Archived"
        ON_HOLD = "on-hold", "On Hold"

    description = models.TextField(blank=True)
    links = models.JSONField(default=dict, blank=True, help_text='e.g. {"github": "https://..."}')
    type = models.CharField(max_length=20, choices=Type.choices, default=Type.OTHER)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    logo = models.CharField(max_length=255, blank=True)
    cover_image = models.CharField(max_length=255, blank=True)
    technologies = models.ManyToManyField(Technology, blank=True, related_name="projects")


class Product(SluggedModel):
    class Type(models.TextChoices):
        SOFTWARE = "software", "Software"
        HARDWARE = "hardware", "Hardware"
        SERVICE = "service", "Service"
        OTHER = "other", "Other"

    description = models.TextField(blank=True)
    website = models.URLField(blank=True)
    type = models.CharField(max_length=20, choices=Type.choices, default=Type.SOFTWARE)
    company = models.ForeignKey(
        Company, on_delete=models.SET_NULL, null=True, blank=True, related_name="products"
    )
    logo = models.CharField(max_length=255, blank=True)
    cover_image = models.CharField(max_length=255, blank=True)
