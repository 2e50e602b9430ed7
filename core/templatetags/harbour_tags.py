import markdown
from django import template
from django.utils.http import urlencode
from django.utils.safestring import mark_safe

from core.images import image_url
from core.references import resolve_text

register = template.Library()

MD_EXTENSIONS = ["extra", "sane_lists", "smarty"]


def render_markdown_html(text: str) -> str:
    """Resolve ``[[references]]`` then convert Markdown to HTML."""
    if not text:
        return ""
    return markdown.markdown(resolve_text(text), extensions=MD_EXTENSIONS)


@register.filter(name="markdownify")
def markdownify(text):
    return mark_safe(render_markdown_html(text))


@register.filter
def image_src(filename):
    return image_url(filename) or ""


@register.simple_tag(takes_context=True)
def page_query(context, offset, limit=None):
    """Current query string with ``offset`` (and optionally ``limit``) replaced."""
    request = context["request"]
    params = request.GET.copy()
    params["offset"] = offset
    if limit is not None:
        params["limit"] = limit
    return "?" + urlencode(sorted(params.items()))


@register.inclusion_tag("includes/pagination.html", takes_context=True)
def pagination(context, page):
    return {"page": page, "request": context["request"]}
