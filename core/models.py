from datetime import timedelta

from django.db import models
from django.utils import timezone

from core.registry import CONTENT_KINDS, get_kind

CONTENT_TYPE_CHOICES = [(key, kind.label) for key, kind in CONTENT_KINDS.items()]


class SiteConfig(models.Model):
    """
    Key/value site settings editable from ``/manage/settings``.

    Section visibility lives under ``section_visible_<section>`` keys with the
    values ``"true"``/``"false"``. A missing key means visible.
    """

    key = models.CharField(max_length=100, primary_key=True)
    value = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Site Setting"
        verbose_name_plural = "Site Settings"

    def __str__(self):
        return f"{self.key}={self.value}"

    @staticmethod
    def section_key(section: str) -> str:
        return f"section_visible_{section}"

    @classmethod
    def is_section_visible(cls, section: str) -> bool:
        value = (
            cls.objects.filter(key=cls.section_key(section))
            .values_list("value", flat=True)
            .first()
        )
        return value != "false"

    @classmethod
    def set_section_visible(cls, section: str, visible: bool):
        cls.objects.update_or_create(
            key=cls.section_key(section),
            defaults={"value": "true" if visible else "false"},
        )

    @classmethod
    def section_visibility(cls, sections) -> dict:
        stored = dict(
            cls.objects.filter(
                key__in=[cls.section_key(s) for s in sections]
            ).values_list("key", "value")
        )
        return {s: stored.get(cls.section_key(s)) != "false" for s in sections}


class Reference(models.Model):
    """
    One ``[[reference]]`` found in a source entity's text, resolved to its target.

    Rows for a source are replaced wholesale every time the source is saved,
    so the table doubles as the backlink index.
    """

    source_type = models.CharField(max_length=20, choices=CONTENT_TYPE_CHOICES)
    source_id = models.PositiveIntegerField()
    target_type = models.CharField(max_length=20, choices=CONTENT_TYPE_CHOICES)
    target_id = models.PositiveIntegerField()
    reference_text = models.CharField(max_length=500)
    relation = models.CharField(max_length=200, blank=True)
    field = models.CharField(max_length=50, default="description")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["source_type", "source_id"]
        indexes = [
            models.Index(fields=["source_type", "source_id"], name="core_refere_source__0f2a1c_idx"),
            models.Index(fields=["target_type", "target_id"], name="core_refere_target__8d4e2b_idx"),
        ]

    def __str__(self):
        return f"{self.source_type}:{self.source_id} -> {self.target_type}:{self.target_id}"


class CommentQuerySet(models.QuerySet):
    def for_content(self, content_type: str, content_id: int):
        return self.filter(content_type=content_type, content_id=content_id)

    def public(self):
        return self.filter(is_private=False)

    def recent_from(self, ip_hash: str, content_type: str, content_id: int, minutes: int = 60):
        since = timezone.now() - timedelta(minutes=minutes)
        return self.for_content(content_type, content_id).filter(
            ip_hash=ip_hash, created_at__gte=since
        )


class Comment(models.Model):
    """Visitor comment attached to any content entity."""

    content_type = models.CharField(max_length=20, choices=CONTENT_TYPE_CHOICES)
    content_id = models.PositiveIntegerField()
    author_name = models.CharField(max_length=100, blank=True)
    content = models.TextField(max_length=5000)
    is_private = models.BooleanField(
        default=False, help_text="Private comments are only visible to admins"
    )
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    ip_hash = models.CharField(max_length=16, blank=True)
    user_agent = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = CommentQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["content_type", "content_id"], name="core_commen_content_3b7c9e_idx"),
            models.Index(fields=["ip_hash", "created_at"], name="core_commen_ip_hash_5a1d4f_idx"),
        ]

    def __str__(self):
        return f"Comment by {self.display_author} on {self.content_type}:{self.content_id}"

    @property
    def display_author(self):
        return self.author_name or "Anonymous"

    def get_target(self):
        return get_kind(self.content_type).model._default_manager.filter(
            pk=self.content_id
        ).first()
