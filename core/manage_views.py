from datetime import date, timedelta

from django.contrib import messages
from django.db import transaction
from django.http import Http404
from django.shortcuts import get_object_or_404, redirect, render
from django.utils import timezone
from django.views.decorators.http import require_POST
from loguru import logger

from core.decorators import manage_required
from core.error_handling import first_form_error
from core.forms import SiteSettingsForm
from core.images import delete_image
from core.models import Comment, SiteConfig
from core.pagination import PaginationParams, paginate, parse_pagination_params
from core.registry import SECTIONS, get_kind
from core.views import search
from directory.forms import (
    CompanyForm,
    GroupForm,
    PersonForm,
    ProductForm,
    ProjectForm,
    TechnologyForm,
)
from events.forms import EventForm, OccurrenceOverrideForm, event_date_formset
from events.models import Event, EventOccurrence, site_timezone
from events.recurrence import DEFAULT_HORIZON_DAYS, generate_occurrences
from jobs.forms import JobForm, JobImportSourceForm
from jobs.models import JobImportSource
from jobs.sync import sync_jobs
from news.forms import NewsForm

COMMENTS_PER_PAGE = 20

# section -> (content kind, editor form)
EDITORS = {
    "companies": ("company", CompanyForm),
    "groups": ("group", GroupForm),
    "people": ("person", PersonForm),
    "projects": ("project", ProjectForm),
    "products": ("product", ProductForm),
    "technologies": ("technology", TechnologyForm),
    "events": ("event", EventForm),
    "news": ("news", NewsForm),
    "jobs": ("job", JobForm),
}


def _editor(section):
    try:
        kind_key, form_class = EDITORS[section]
    except KeyError:
        raise Http404(f"Unknown section: {section}") from None
    return get_kind(kind_key), form_class


@manage_required
def index(request):
    counts = []
    for section, (kind_key, _) in EDITORS.items():
        kind = get_kind(kind_key)
        counts.append({"section": section, "label": section.capitalize(), "count": kind.model.objects.count()})
    context = {
        "counts": counts,
        "recent_comments": Comment.objects.all()[:5],
        "sources": JobImportSource.objects.select_related("company"),
    }
    return render(request, "manage/index.html", context)


@manage_required
def entity_list(request, section):
    kind, _ = _editor(section)
    params = parse_pagination_params(request.GET)
    page = paginate(search(kind.model.objects.all(), kind, params.q), params)
    return render(
        request,
        "manage/list.html",
        {"kind": kind, "section": section, "page": page, "q": params.q},
    )


def _save_event(form, formset):
    """Events carry their explicit dates in an inline formset."""
    with transaction.atomic():
        event = form.save()
        formset.instance = event
        formset.save()
        if event.is_recurring:
            event.dates.all().delete()
    return event


def _has_dates(formset) -> bool:
    return any(
        f.cleaned_data.get("start_date") and not f.cleaned_data.get("DELETE")
        for f in formset.forms
        if hasattr(f, "cleaned_data")
    )


@manage_required
def entity_edit(request, section, pk=None):
    """Create (``pk`` is None) or edit one entity."""
    kind, form_class = _editor(section)
    instance = get_object_or_404(kind.model, pk=pk) if pk else None
    is_event = kind.key == "event"
    DateFormSet = event_date_formset(extra=0 if instance else 1) if is_event else None
    error = None

    if request.method == "POST":
        form = form_class(request.POST, instance=instance)
        formset = DateFormSet(request.POST, instance=instance, prefix="dates") if is_event else None

        valid = form.is_valid() and (formset is None or formset.is_valid())
        if valid and is_event and not form.is_recurring and not _has_dates(formset):
            form.add_error(None, "Add at least one date or make the event repeat")
            valid = False

        if valid:
            obj = _save_event(form, formset) if is_event else form.save()
            logger.info(
                "Saved entity",
                kind=kind.key,
                id=obj.pk,
                created=instance is None,
                user=request.user.pk,
            )
            messages.success(request, f'{kind.label} "{kind.display_name(obj)}" saved.')
            return redirect("manage:edit", section=section, pk=obj.pk)

        error = first_form_error(form)
        if error is None and formset is not None:
            error = next((first_form_error(f) for f in formset.forms if f.errors), None)
            error = error or (formset.non_form_errors()[0] if formset.non_form_errors() else None)
    else:
        form = form_class(instance=instance)
        formset = DateFormSet(instance=instance, prefix="dates") if is_event else None

    context = {
        "kind": kind,
        "section": section,
        "form": form,
        "date_formset": formset,
        "object": instance,
        "error": error,
        "action": "Edit" if instance else "Create",
    }
    return render(request, "manage/form.html", context)


@manage_required
def entity_delete(request, section, pk):
    kind, form_class = _editor(section)
    obj = get_object_or_404(kind.model, pk=pk)

    if request.method == "POST":
        name = kind.display_name(obj)
        images = [getattr(obj, field) for field in form_class.image_fields]
        obj.delete()
        for filename in images:
            delete_image(filename)
        logger.info("Deleted entity", kind=kind.key, id=pk, user=request.user.pk)
        messages.success(request, f'{kind.label} "{name}" deleted.')
        return redirect("manage:list", section=section)

    return render(
        request,
        "manage/confirm_delete.html",
        {"kind": kind, "section": section, "object": obj},
    )


def _parse_day(value):
    try:
        return date.fromisoformat(value or "")
    except ValueError:
        return None


@manage_required
def event_occurrences(request, pk):
    """
    Generated dates of a recurring event with their overrides.

    POST ``action`` is one of ``cancel``, ``restore``, ``override`` or
    ``clear`` and applies to the occurrence on ``date``.
    """
    event = get_object_or_404(Event, pk=pk)
    if not event.is_recurring:
        messages.error(request, "Only repeating events have generated occurrences.")
        return redirect("manage:edit", section="events", pk=event.pk)

    if request.method == "POST":
        action = request.POST.get("action", "")
        day = _parse_day(request.POST.get("date"))
        if day is None or day not in generate_occurrences(event.recurrence_rule, day, day):
            messages.error(request, "That date is not an occurrence of this event.")
            return redirect("manage:occurrences", pk=event.pk)

        override = EventOccurrence.objects.filter(event=event, occurrence_date=day).first()
        if action == "cancel":
            EventOccurrence.objects.update_or_create(
                event=event, occurrence_date=day, defaults={"cancelled": True}
            )
            messages.success(request, f"Cancelled {day:%b %d}.")
        elif action == "restore":
            if override:
                override.cancelled = False
                override.save(update_fields=["cancelled"])
            messages.success(request, f"Restored {day:%b %d}.")
        elif action == "override":
            form = OccurrenceOverrideForm(
                request.POST,
                instance=override or EventOccurrence(event=event, occurrence_date=day),
                prefix=f"occ-{day:%Y%m%d}",
            )
            if form.is_valid():
                form.save()
                messages.success(request, f"Updated {day:%b %d}.")
            else:
                messages.error(request, first_form_error(form))
        elif action == "clear":
            if override:
                override.delete()
            messages.success(request, f"Reset {day:%b %d} to the event defaults.")
        else:
            messages.error(request, f"Unknown action: {action or '(none)'}")
        return redirect("manage:occurrences", pk=event.pk)

    today = timezone.now().astimezone(site_timezone()).replace(hour=0, minute=0, second=0, microsecond=0)
    occurrences = event.occurrences(start=today, end=today + timedelta(days=DEFAULT_HORIZON_DAYS))
    rows = [
        {
            "occurrence": o,
            "form": OccurrenceOverrideForm(
                instance=EventOccurrence.objects.filter(pk=o.override_id).first() if o.override_id else None,
                prefix=f"occ-{o.date:%Y%m%d}",
            ),
        }
        for o in occurrences
    ]
    return render(request, "manage/occurrences.html", {"event": event, "rows": rows})


@manage_required
def comments(request):
    if request.method == "POST":
        comment_id = request.POST.get("comment_id", "")
        deleted = 0
        if comment_id.isdigit():
            deleted, _ = Comment.objects.filter(pk=int(comment_id)).delete()
        if deleted:
            logger.info("Comment deleted", comment=comment_id, user=request.user.pk)
            messages.success(request, "Comment deleted.")
        else:
            messages.error(request, "Comment not found.")
        return redirect(f"{request.path}?offset={request.GET.get('offset', 0)}")

    offset = parse_pagination_params(request.GET).offset
    page = paginate(Comment.objects.all(), PaginationParams(limit=COMMENTS_PER_PAGE, offset=offset))
    for comment in page.items:
        comment.target = comment.get_target()
        comment.target_url = get_kind(comment.content_type).url_for(comment.target.slug) if comment.target else ""
    return render(request, "manage/comments.html", {"page": page})


@manage_required
def site_settings(request):
    if request.method == "POST":
        form = SiteSettingsForm(request.POST)
        if form.is_valid():
            for section, visible in form.visibility().items():
                SiteConfig.set_section_visible(section, visible)
            logger.info("Section visibility updated", user=request.user.pk, **form.visibility())
            messages.success(request, "Settings saved.")
            return redirect("manage:settings")
    else:
        form = SiteSettingsForm(visibility=SiteConfig.section_visibility(SECTIONS))
    return render(request, "manage/settings.html", {"form": form})


@manage_required
def job_import(request):
    if request.method == "POST":
        form = JobImportSourceForm(request.POST)
        if form.is_valid():
            source = form.save()
            logger.info("Job import source added", source=source.pk, user=request.user.pk)
            result = sync_jobs(source)
            if result.success:
                messages.success(request, f"Source added, {result.added} jobs imported.")
            else:
                messages.warning(request, f"Source added but the first sync failed: {result.error}")
            return redirect("manage:job_import")
        messages.error(request, first_form_error(form))
    else:
        form = JobImportSourceForm()

    sources = JobImportSource.objects.select_related("company")
    return render(request, "manage/import_sources.html", {"form": form, "sources": sources})


@manage_required
@require_POST
def job_import_sync(request, pk):
    source = get_object_or_404(JobImportSource, pk=pk)
    result = sync_jobs(source)
    if result.success:
        messages.success(
            request,
            f"{source.company.name}: {result.added} added, {result.updated} updated, "
            f"{result.removed} removed, {result.reactivated} reactivated.",
        )
    else:
        messages.error(request, f"{source.company.name}: {result.error}")
    return redirect("manage:job_import")


@manage_required
@require_POST
def job_import_delete(request, pk):
    source = get_object_or_404(JobImportSource, pk=pk)
    name = str(source)
    source.delete()
    logger.info("Job import source deleted", source=pk, user=request.user.pk)
    messages.success(request, f"Removed {name} and its imported jobs.")
    return redirect("manage:job_import")
