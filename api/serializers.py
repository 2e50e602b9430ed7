"""
Read-only JSON representations of the public content types.

Keys are camelCase, images are absolute URLs and timestamps ISO-8601.
"""

from rest_framework import serializers

from core.images import image_url
from core.markdown_export import absolute_url
from directory.models import Company, Group, Person, Product, Project, Technology
from events.models import Event, EventDate
from jobs.models import Job
from news.models import News


class ImageField(serializers.Field):
    def __init__(self, **kwargs):
        kwargs["read_only"] = True
        super().__init__(**kwargs)

    def to_representation(self, value):
        url = image_url(value)
        return absolute_url(url) if url else None


class ContentSerializer(serializers.ModelSerializer):
    """Adds ``url`` (the public page) and camelCase timestamps."""

    url_prefix = ""

    url = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    def get_url(self, obj):
        return absolute_url(f"{self.url_prefix}/{obj.slug}")


class TechnologySummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Technology
        fields = ["id", "slug", "name", "category"]


class CompanySerializer(ContentSerializer):
    url_prefix = "/directory/companies"
    logo = ImageField()
    coverImage = ImageField(source="cover_image")
    technologies = TechnologySummarySerializer(many=True, read_only=True)

    class Meta:
        model = Company
        fields = [
            "id", "slug", "name", "description", "website", "wikipedia", "github",
            "email", "location", "founded", "logo", "coverImage", "technologies",
            "url", "createdAt", "updatedAt",
        ]


class GroupSerializer(ContentSerializer):
    url_prefix = "/directory/groups"
    logo = ImageField()
    coverImage = ImageField(source="cover_image")
    meetingFrequency = serializers.CharField(source="meeting_frequency", read_only=True)

    class Meta:
        model = Group
        fields = [
            "id", "slug", "name", "description", "website", "meetingFrequency",
            "logo", "coverImage", "url", "createdAt", "updatedAt",
        ]


class PersonSerializer(ContentSerializer):
    url_prefix = "/directory/people"
    avatar = ImageField()
    socialLinks = serializers.JSONField(source="social_links", read_only=True)

    class Meta:
        model = Person
        fields = [
            "id", "slug", "name", "bio", "website", "github", "avatar",
            "socialLinks", "url", "createdAt", "updatedAt",
        ]


class ProjectSerializer(ContentSerializer):
    url_prefix = "/directory/projects"
    logo = ImageField()
    coverImage = ImageField(source="cover_image")
    technologies = TechnologySummarySerializer(many=True, read_only=True)

    class Meta:
        model = Project
        fields = [
            "id", "slug", "name", "description", "type", "status", "links",
            "logo", "coverImage", "technologies", "url", "createdAt", "updatedAt",
        ]


class ProductSerializer(ContentSerializer):
    url_prefix = "/directory/products"
    logo = ImageField()
    coverImage = ImageField(source="cover_image")
    company = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id", "slug", "name", "description", "website", "type", "company",
            "logo", "coverImage", "url", "createdAt", "updatedAt",
        ]

    def get_company(self, obj):
        if obj.company is None:
            return None
        return {"id": obj.company.pk, "slug": obj.company.slug, "name": obj.company.name}


class TechnologySerializer(ContentSerializer):
    url_prefix = "/directory/technologies"
    icon = ImageField()

    class Meta:
        model = Technology
        fields = [
            "id", "slug", "name", "category", "description", "website", "icon",
            "url", "createdAt", "updatedAt",
        ]


class EventDateSerializer(serializers.ModelSerializer):
    startDate = serializers.DateTimeField(source="start_date")
    endDate = serializers.DateTimeField(source="end_date", allow_null=True)

    class Meta:
        model = EventDate
        fields = ["startDate", "endDate"]


class EventSerializer(ContentSerializer):
    url_prefix = "/events"
    coverImage = ImageField(source="cover_image")
    iconImage = ImageField(source="icon_image")
    requiresSignup = serializers.BooleanField(source="requires_signup", read_only=True)
    recurrenceRule = serializers.CharField(source="recurrence_rule", read_only=True)
    recurrence = serializers.CharField(source="recurrence_description", read_only=True)
    dates = serializers.SerializerMethodField()

    class Meta:
        model = Event
        fields = [
            "id", "slug", "title", "description", "organizer", "location", "link",
            "requiresSignup", "recurrenceRule", "recurrence", "coverImage", "iconImage",
            "dates", "url", "createdAt", "updatedAt",
        ]

    def get_dates(self, obj):
        """Explicit dates, or the upcoming generated ones for recurring events."""
        if not obj.is_recurring:
            return EventDateSerializer(obj.dates.all(), many=True).data
        field = serializers.DateTimeField()
        return [
            {
                "startDate": field.to_representation(o.start),
                "endDate": field.to_representation(o.end) if o.end else None,
                "cancelled": o.cancelled,
            }
            for o in obj.upcoming_occurrences()
        ]


class NewsSerializer(ContentSerializer):
    url_prefix = "/news"
    coverImage = ImageField(source="cover_image")
    publishedAt = serializers.DateTimeField(source="published_at", read_only=True)

    class Meta:
        model = News
        fields = [
            "id", "slug", "title", "type", "excerpt", "content", "coverImage",
            "publishedAt", "url", "createdAt", "updatedAt",
        ]


class JobSerializer(ContentSerializer):
    url_prefix = "/jobs"
    companyName = serializers.CharField(source="display_company", read_only=True)
    companySlug = serializers.SerializerMethodField()
    workplaceType = serializers.CharField(source="workplace_type", read_only=True)
    salaryRange = serializers.CharField(source="salary_range", read_only=True)
    applyUrl = serializers.URLField(source="url", read_only=True)
    postedAt = serializers.DateTimeField(source="posted_at", read_only=True)

    class Meta:
        model = Job
        fields = [
            "id", "slug", "title", "description", "companyName", "companySlug",
            "location", "department", "workplaceType", "salaryRange", "applyUrl",
            "postedAt", "url", "createdAt", "updatedAt",
        ]

    def get_companySlug(self, obj):
        return obj.company.slug if obj.company_id else None
