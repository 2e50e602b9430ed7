"""
Registry of the content types that can reference each other.

Each kind knows its model, the field holding its display name, the markdown
fields scanned for ``[[references]]`` and its public URL prefix. Models are
looked up lazily so this module can be imported from any app.
"""

from dataclasses import dataclass
from typing import Optional

from django.apps import apps


@dataclass(frozen=True)
class ContentKind:
    key: str
    model_label: str
    name_field: str
    text_fields: tuple
    url_prefix: str
    section: str
    label: str
    visibility_field: Optional[str] = None

    @property
    def model(self):
        return apps.get_model(self.model_label)

    def url_for(self, slug: str) -> str:
        return f"{self.url_prefix}/{slug}"

    def display_name(self, obj) -> str:
        return getattr(obj, self.name_field)

    def public_queryset(self):
        """Rows a visitor may see."""
        queryset = self.model._default_manager.all()
        if self.visibility_field:
            queryset = queryset.filter(**{self.visibility_field: True})
        if self.key == "news":
            queryset = queryset.published()
        elif self.key == "job":
            queryset = queryset.active()
        return queryset


CONTENT_KINDS = {
    kind.key: kind
    for kind in (
        ContentKind("event", "events.Event", "title", ("description",), "/events", "events", "Event"),
        ContentKind(
            "company", "directory.Company", "name", ("description",),
            "/directory/companies", "companies", "Company", "visible",
        ),
        ContentKind(
            "group", "directory.Group", "name", ("description",),
            "/directory/groups", "groups", "Group", "visible",
        ),
        ContentKind(
            "person", "directory.Person", "name", ("bio",),
            "/directory/people", "people", "Person", "visible",
        ),
        ContentKind("project", "directory.Project", "name", ("description",), "/directory/projects", "projects", "Project"),
        ContentKind("product", "directory.Product", "name", ("description",), "/directory/products", "products", "Product"),
        ContentKind(
            "technology", "directory.Technology", "name", ("description",),
            "/directory/technologies", "technologies", "Technology", "visible",
        ),
        ContentKind("news", "news.News", "title", ("content", "excerpt"), "/news", "news", "News"),
        ContentKind("job", "jobs.Job", "title", ("description",), "/jobs", "jobs", "Job"),
    )
}

SECTIONS = [
    "events", "companies", "groups", "projects", "products",
    "technologies", "people", "news", "jobs",
]


def get_kind(key: str) -> ContentKind:
    try:
        return CONTENT_KINDS[key]
    except KeyError:
        raise ValueError(f"Unknown content type: {key}") from None


def kind_for_model(model_class) -> Optional[ContentKind]:
    label = model_class._meta.label
    for kind in CONTENT_KINDS.values():
        if kind.model_label == label:
            return kind
    return None


def content_url(content_type: str, slug: str) -> str:
    """Public URL of an entity, e.g. ``/directory/companies/acme``."""
    return get_kind(content_type).url_for(slug)
