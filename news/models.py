from django.db import models
from django.utils import timezone

from core.utils import unique_slug


class NewsQuerySet(models.QuerySet):
    def published(self, now=None):
        return self.filter(published_at__isnull=False, published_at__lte=now or timezone.now())


class News(models.Model):
    """
    Announcements and editorials. ``published_at`` left empty keeps the
    article a draft; a future value schedules it.
    """

    class Type(models.TextChoices):
        ANNOUNCEMENT = "announcement", "Announcement"
        EDITORIAL = "editorial", "Editorial"
        META = "meta", "Site News"

    title = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True, blank=True)
    type = models.CharField(max_length=20, choices=Type.choices, default=Type.ANNOUNCEMENT)
    content = models.TextField(help_text="Markdown, supports [[references]]")
    excerpt = models.TextField(blank=True, max_length=500)
    cover_image = models.CharField(max_length=255, blank=True)
    published_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = NewsQuerySet.as_manager()

    class Meta:
        ordering = ["-published_at", "-created_at"]
        verbose_name_plural = "News"

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(News, self.title, exclude_pk=self.pk)
        super().save(*args, **kwargs)

    @property
    def is_published(self):
        return self.published_at is not None and self.published_at <= timezone.now()
