from django.shortcuts import get_object_or_404, render
from django.views.decorators.http import require_GET

from core.markdown_export import entity_to_markdown, list_to_markdown, markdown_response
from core.pagination import Page, paginate, parse_pagination_params
from core.references import get_backlinks, organizer_links
from core.registry import get_kind
from core.views import comment_context, require_section
from events.ical import calendar_response, upcoming_occurrences
from events.models import Event, upcoming_events

PAST_EVENTS_LIMIT = 20


def _matches(occurrence, q):
    q = q.lower()
    event = occurrence.event
    return q in event.title.lower() or q in event.description.lower()


@require_GET
def event_list(request, markdown=False):
    """Upcoming occurrences soonest first, plus recently finished one-off events."""
    kind = get_kind("event")
    require_section(kind.section)

    params = parse_pagination_params(request.GET)
    occurrences = upcoming_events()
    if params.q:
        occurrences = [o for o in occurrences if _matches(o, params.q)]
    page = paginate(occurrences, params)

    if markdown:
        events_page = Page(items=[o.event for o in page.items], total=page.total, params=params)
        return markdown_response(list_to_markdown(kind, events_page, "Events"))

    past = Event.objects.past().order_by("-dates__start_date")
    past_events = []
    for event in past:
        if event not in past_events:
            past_events.append(event)
        if len(past_events) >= PAST_EVENTS_LIMIT:
            break

    return render(
        request,
        "events/list.html",
        {"kind": kind, "page": page, "q": params.q, "title": "Events", "past_events": past_events},
    )


@require_GET
def event_detail(request, slug, markdown=False):
    kind = get_kind("event")
    require_section(kind.section)
    event = get_object_or_404(Event.objects.prefetch_related("dates"), slug=slug)

    if markdown:
        return markdown_response(entity_to_markdown(kind, event))

    context = {
        "kind": kind,
        "object": event,
        "event": event,
        "title": event.title,
        "occurrences": event.all_dates(),
        "next_occurrence": event.next_occurrence(),
        "organizers": organizer_links(event.organizer),
        "backlinks": get_backlinks(event, kind),
    }
    context.update(comment_context(request, kind, event))
    return render(request, "events/detail.html", context)


@require_GET
def calendar_ics(request):
    require_section("events")
    return calendar_response(upcoming_occurrences(), request.get_host())
