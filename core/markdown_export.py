"""
Markdown mirrors of the public pages.

Each entity renders as YAML frontmatter (PyYAML) followed by a Markdown body.
References in descriptions are resolved to absolute ``.md`` links so the
documents stand alone.
"""

import re
from datetime import date, datetime, time

import yaml
from django.conf import settings
from django.http import HttpResponse

from core.images import image_url
from core.references import get_backlinks, resolve_text
from core.registry import CONTENT_KINDS, ContentKind

INTERNAL_LINK_RE = re.compile(r"\]\((/[^)\s]*)\)")
ENTITY_PATH_RE = re.compile(
    r"^(?:%s)/[a-z0-9-]+$" % "|".join(re.escape(kind.url_prefix) for kind in CONTENT_KINDS.values())
)
MARKDOWN_CONTENT_TYPE = "text/markdown; charset=utf-8"


def markdown_response(content: str) -> HttpResponse:
    response = HttpResponse(content, content_type=MARKDOWN_CONTENT_TYPE)
    response["X-Content-Type-Options"] = "nosniff"
    return response


def absolute_url(path: str) -> str:
    return f"{settings.SITE_URL}{path}"


def _plain(value):
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items() if v not in (None, "")}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def format_frontmatter(data: dict) -> str:
    """Dump ``data`` as a ``---`` delimited YAML block, skipping empty values."""
    clean = {
        key: _plain(value)
        for key, value in data.items()
        if value is not None and value != "" and value != [] and value != {}
    }
    body = yaml.safe_dump(
        clean, sort_keys=False, allow_unicode=True, default_flow_style=False, width=1000
    )
    return f"---\n{body}---\n"


def split_frontmatter(text: str):
    """Inverse of ``format_frontmatter``: ``(metadata, body)``."""
    if not text.startswith("---\n"):
        return {}, text
    end = text.find("\n---\n", 4)
    if end == -1:
        return {}, text
    return yaml.safe_load(text[4:end]) or {}, text[end + 5 :]


def _image(filename):
    url = image_url(filename)
    return absolute_url(url) if url else None


def _base(kind: ContentKind, obj) -> dict:
    return {
        "type": kind.key,
        "id": obj.pk,
        "slug": obj.slug,
        kind.name_field: kind.display_name(obj),
        "url": absolute_url(kind.url_for(obj.slug)),
        "api_url": absolute_url(f"/api/{kind.section}/{obj.slug}"),
    }


def _absolute_link(match) -> str:
    path = match.group(1)
    if ENTITY_PATH_RE.match(path):
        return f"]({absolute_url(path)}.md)"
    return f"]({absolute_url(path)})"


def _md_links(text: str) -> str:
    """
    Resolve references and make site links absolute.

    Links to entity pages point at their ``.md`` mirrors. Images, lists and
    query-string links keep their path.
    """
    return INTERNAL_LINK_RE.sub(_absolute_link, resolve_text(text or ""))


def _fields_company(obj):
    return {
        "website": obj.website,
        "wikipedia": obj.wikipedia,
        "github": obj.github,
        "email": obj.email,
        "location": obj.location,
        "founded": obj.founded,
        "logo": _image(obj.logo),
        "technologies": [t.name for t in obj.technologies.all()],
    }


def _fields_group(obj):
    return {
        "website": obj.website,
        "meeting_frequency": obj.meeting_frequency,
        "logo": _image(obj.logo),
    }


def _fields_person(obj):
    return {
        "website": obj.website,
        "github": obj.github,
        "avatar": _image(obj.avatar),
        "social_links": obj.social_links or None,
    }


def _fields_project(obj):
    return {
        "project_type": obj.type,
        "status": obj.status,
        "links": obj.links or None,
        "logo": _image(obj.logo),
        "technologies": [t.name for t in obj.technologies.all()],
    }


def _fields_product(obj):
    return {
        "website": obj.website,
        "product_type": obj.type,
        "company": obj.company.name if obj.company_id else None,
        "logo": _image(obj.logo),
    }


def _fields_technology(obj):
    return {"category": obj.get_category_display(), "website": obj.website}


def _fields_event(obj):
    return {
        "link": obj.link,
        "location": obj.location,
        "organizer": obj.organizer,
        "requires_signup": obj.requires_signup,
        "recurring": obj.is_recurring,
        "recurrence": obj.recurrence_description or None,
        "dates": [
            {"start": occ.start, "end": occ.end}
            for occ in obj.upcoming_occurrences()
            if not occ.cancelled
        ],
    }


def _fields_news(obj):
    return {
        "news_type": obj.type,
        "excerpt": obj.excerpt,
        "cover_image": _image(obj.cover_image),
        "published_at": obj.published_at,
    }


def _fields_job(obj):
    return {
        "company": obj.display_company,
        "location": obj.location,
        "department": obj.department,
        "workplace_type": obj.workplace_type,
        "salary_range": obj.salary_range,
        "apply_url": obj.url,
        "status": obj.status,
        "posted_at": obj.posted_at,
    }


FIELD_BUILDERS = {
    "company": _fields_company,
    "group": _fields_group,
    "person": _fields_person,
    "project": _fields_project,
    "product": _fields_product,
    "technology": _fields_technology,
    "event": _fields_event,
    "news": _fields_news,
    "job": _fields_job,
}


def entity_to_markdown(kind: ContentKind, obj) -> str:
    """Frontmatter plus ``# Title``, the description and a backlinks section."""
    data = _base(kind, obj)
    data.update(FIELD_BUILDERS[kind.key](obj))
    data["updated_at"] = obj.updated_at

    title = kind.display_name(obj)
    parts = [format_frontmatter(data), f"\n# {title}\n"]

    if kind.key == "news" and obj.excerpt:
        parts.append(f"\n> {obj.excerpt}\n")
    for field in kind.text_fields:
        if field == "excerpt":
            continue
        text = getattr(obj, field, "")
        if text:
            parts.append(f"\n{_md_links(text).strip()}\n")

    backlinks = get_backlinks(obj, kind)
    if backlinks:
        parts.append("\n## Referenced by\n\n")
        for link in backlinks:
            parts.append(f"- [{link.name}]({absolute_url(link.url)}.md) ({link.type_label})\n")
    return "".join(parts)


def list_to_markdown(kind: ContentKind, page, title: str) -> str:
    """A paginated listing as Markdown bullet points."""
    data = {
        "type": f"{kind.section}_list",
        "url": absolute_url(kind.url_prefix),
        "api_url": absolute_url(f"/api/{kind.section}"),
        "total": page.total,
        "limit": page.limit,
        "offset": page.offset,
        "has_more": page.has_more,
    }
    lines = [format_frontmatter(data), f"\n# {title}\n\n"]
    for obj in page.items:
        lines.append(f"- [{kind.display_name(obj)}]({absolute_url(kind.url_for(obj.slug))}.md)\n")
    if not page.items:
        lines.append("_Nothing here yet._\n")
    return "".join(lines)
