from django.conf import settings
from django.core.files.storage import default_storage
from django.db.models import Q
from django.http import FileResponse, Http404
from django.shortcuts import get_object_or_404, render
from django.views.decorators.http import require_GET
from loguru import logger
from rest_framework import status
from rest_framework.authentication import SessionAuthentication
from rest_framework.decorators import (
    api_view,
    authentication_classes,
    parser_classes,
    permission_classes,
)
from rest_framework.parsers import FormParser, JSONParser
from rest_framework.response import Response

from api.permissions import IsSiteAdmin
from core.captcha import verify_turnstile
from core.error_handling import action_error, action_success, first_form_error
from core.forms import CommentForm
from core.markdown_export import entity_to_markdown, list_to_markdown, markdown_response
from core.models import Comment, SiteConfig
from core.pagination import paginate, parse_pagination_params
from core.references import get_backlinks
from core.registry import get_kind
from core.utils import get_client_ip, hash_ip
from events.models import upcoming_events
from harbour_core.posthog_config import capture_event
from jobs.models import Job
from news.models import News

HOME_LIMIT = 5


def require_section(section):
    if not SiteConfig.is_section_visible(section):
        raise Http404(f"The {section} section is not available")


def search(queryset, kind, q):
    """Case-insensitive substring match on the name and text fields."""
    if not q:
        return queryset
    condition = Q(**{f"{kind.name_field}__icontains": q})
    for field in kind.text_fields:
        condition |= Q(**{f"{field}__icontains": q})
    return queryset.filter(condition)


def is_site_admin(user) -> bool:
    return user.is_authenticated and user.is_site_admin


def comment_context(request, kind, obj) -> dict:
    comments = Comment.objects.for_content(kind.key, obj.pk)
    if not is_site_admin(request.user):
        comments = comments.public()
    return {
        "comments": comments,
        "comment_form": CommentForm(initial={"content_type": kind.key, "content_id": obj.pk}),
    }


@require_GET
def home(request):
    visibility = SiteConfig.section_visibility(["events", "news", "jobs"])
    context = {
        "events": upcoming_events(limit=HOME_LIMIT) if visibility["events"] else [],
        "news": News.objects.published()[:HOME_LIMIT] if visibility["news"] else [],
        "jobs": Job.objects.active().select_related("company")[:HOME_LIMIT] if visibility["jobs"] else [],
    }
    return render(request, "public/home.html", context)


@require_GET
def entity_list(request, kind_key, markdown=False):
    """Paginated, searchable public listing for one content type."""
    kind = get_kind(kind_key)
    require_section(kind.section)

    params = parse_pagination_params(request.GET)
    queryset = search(kind.public_queryset(), kind, params.q)
    page = paginate(queryset, params)
    title = kind.section.capitalize()

    if markdown:
        return markdown_response(list_to_markdown(kind, page, title))
    return render(
        request,
        "public/list.html",
        {"kind": kind, "page": page, "q": params.q, "title": title},
    )


@require_GET
def entity_detail(request, kind_key, slug, markdown=False):
    kind = get_kind(kind_key)
    require_section(kind.section)
    obj = get_object_or_404(kind.public_queryset(), slug=slug)

    if markdown:
        return markdown_response(entity_to_markdown(kind, obj))

    context = {
        "kind": kind,
        "object": obj,
        "title": kind.display_name(obj),
        "backlinks": get_backlinks(obj, kind),
        "fields_template": f"public/fields/{kind.key}.html",
    }
    context.update(comment_context(request, kind, obj))
    return render(request, "public/detail.html", context)


@require_GET
def serve_image(request, filename):
    """Processed uploads live flat in default storage."""
    if "/" in filename or "\\" in filename or filename.startswith("."):
        raise Http404("Image not found")
    if not default_storage.exists(filename):
        raise Http404("Image not found")
    response = FileResponse(default_storage.open(filename, "rb"), content_type="image/webp")
    response["Cache-Control"] = "public, max-age=31536000, immutable"
    return response


def _content_exists(content_type, content_id) -> bool:
    kind = get_kind(content_type)
    return kind.public_queryset().filter(pk=content_id).exists()


@api_view(["POST"])
@parser_classes([JSONParser, FormParser])
def post_comment(request):
    """
    Create a visitor comment.

    Checks in order: field validation (400), Turnstile token (403), target
    exists (404), hourly limit per hashed IP and content item (429).
    """
    form = CommentForm(request.data)
    if not form.is_valid():
        return Response(action_error(first_form_error(form)), status=status.HTTP_400_BAD_REQUEST)

    ip = get_client_ip(request)
    token = request.data.get("cf-turnstile-response") or request.data.get("turnstileToken") or ""
    if not verify_turnstile(token, ip):
        return Response(action_error("CAPTCHA verification failed"), status=status.HTTP_403_FORBIDDEN)

    data = form.cleaned_data
    if not _content_exists(data["content_type"], data["content_id"]):
        return Response(action_error("Content not found"), status=status.HTTP_404_NOT_FOUND)

    ip_hash = hash_ip(ip) if ip else ""
    recent = Comment.objects.recent_from(ip_hash, data["content_type"], data["content_id"]).count()
    if recent >= settings.COMMENT_RATE_LIMIT:
        logger.info("Comment rate limit hit", ip_hash=ip_hash, content_type=data["content_type"])
        return Response(
            action_error("Too many comments. Please try again later."),
            status=status.HTTP_429_TOO_MANY_REQUESTS,
        )

    comment = Comment.objects.create(
        content_type=data["content_type"],
        content_id=data["content_id"],
        author_name=data["author_name"].strip(),
        content=data["content"],
        is_private=data["is_private"],
        ip_address=ip or None,
        ip_hash=ip_hash,
        user_agent=request.META.get("HTTP_USER_AGENT", "")[:500],
    )
    logger.info("Comment created", comment=comment.pk, content_type=comment.content_type)
    capture_event("comment_created", distinct_id=ip_hash or None, properties={"content_type": comment.content_type})
    return Response(action_success({"id": comment.pk}), status=status.HTTP_201_CREATED)


@api_view(["POST"])
@authentication_classes([SessionAuthentication])
@permission_classes([IsSiteAdmin])
def delete_comment(request):
    comment_id = request.data.get("id") or request.data.get("comment_id")
    try:
        comment_id = int(comment_id)
    except (TypeError, ValueError):
        return Response(action_error("Comment id is required"), status=status.HTTP_400_BAD_REQUEST)

    deleted, _ = Comment.objects.filter(pk=comment_id).delete()
    if not deleted:
        return Response(action_error("Comment not found"), status=status.HTTP_404_NOT_FOUND)
    logger.info("Comment deleted", comment=comment_id, user=request.user.pk)
    return Response(action_success())
