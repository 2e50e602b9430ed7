from django.db import models
from django.utils import timezone

from core.utils import unique_slug
from directory.models import Company


class JobImportSource(models.Model):
    """A company's applicant tracking system board that jobs are pulled from."""

    class SourceType(models.TextChoices):
        GREENHOUSE = "greenhouse", "Greenhouse"
        LEVER = "lever", "Lever"

    class FetchStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        SUCCESS = "success", "Success"
        ERROR = "error", "Error"

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="job_sources")
    source_type = models.CharField(max_length=20, choices=SourceType.choices)
    source_identifier = models.CharField(
        max_length=200, help_text="Board token or company slug on the ATS"
    )
    source_url = models.URLField(blank=True)
    last_fetched_at = models.DateTimeField(null=True, blank=True)
    fetch_status = models.CharField(
        max_length=20, choices=FetchStatus.choices, default=FetchStatus.PENDING
    )
    fetch_error = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["company__name"]
        unique_together = ["source_type", "source_identifier"]

    def __str__(self):
        return f"{self.company.name} ({self.get_source_type_display()}: {self.source_identifier})"


class JobQuerySet(models.QuerySet):
    def active(self):
        return self.filter(status=Job.Status.ACTIVE)


class Job(models.Model):
    """
    A job posting. Manual postings are entered in /manage. Imported postings
    are owned by a ``JobImportSource`` and keyed by ``external_id``.
    """

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        REMOVED = "removed", "Removed"
        FILLED = "filled", "Filled"
        EXPIRED = "expired", "Expired"
        HIDDEN = "hidden", "Hidden"

    class WorkplaceType(models.TextChoices):
        REMOTE = "remote", "Remote"
        ONSITE = "onsite", "On-site"
        HYBRID = "hybrid", "Hybrid"

    class SourceType(models.TextChoices):
        MANUAL = "manual", "Manual"
        IMPORTED = "imported", "Imported"

    title = models.CharField(max_length=300)
    slug = models.SlugField(max_length=320, unique=True, blank=True)
    description = models.TextField(blank=True, help_text="Markdown, supports [[references]]")
    description_html = models.TextField(blank=True)
    company = models.ForeignKey(
        Company, on_delete=models.SET_NULL, null=True, blank=True, related_name="jobs"
    )
    company_name = models.CharField(
        max_length=200, blank=True, help_text="Used when the company is not in the directory"
    )
    location = models.CharField(max_length=300, blank=True)
    department = models.CharField(max_length=200, blank=True)
    workplace_type = models.CharField(max_length=20, choices=WorkplaceType.choices, blank=True)
    salary_range = models.CharField(max_length=100, blank=True)
    url = models.URLField(max_length=1000, help_text="Where to apply")

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    source_type = models.CharField(
        max_length=20, choices=SourceType.choices, default=SourceType.MANUAL
    )
    source = models.ForeignKey(
        JobImportSource, on_delete=models.CASCADE, null=True, blank=True, related_name="jobs"
    )
    external_id = models.CharField(max_length=200, blank=True)

    posted_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    external_updated_at = models.DateTimeField(null=True, blank=True)
    first_seen_at = models.DateTimeField(null=True, blank=True)
    last_seen_at = models.DateTimeField(null=True, blank=True)
    removed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = JobQuerySet.as_manager()

    class Meta:
        ordering = ["-posted_at", "-created_at"]
        indexes = [
            models.Index(fields=["status"], name="jobs_job_status_4e8b21_idx"),
            models.Index(fields=["source", "external_id"], name="jobs_job_source__9a3c6d_idx"),
        ]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if not self.slug:
            base = f"{self.title} {self.display_company}".strip()
            self.slug = unique_slug(Job, base, exclude_pk=self.pk)
        if self.posted_at is None and self.source_type == self.SourceType.MANUAL:
            self.posted_at = timezone.now()
        super().save(*args, **kwargs)

    @property
    def display_company(self) -> str:
        if self.company_id:
            return self.company.name
        return self.company_name

    @property
    def is_imported(self) -> bool:
        return self.source_type == self.SourceType.IMPORTED
