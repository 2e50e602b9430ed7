"""
iCalendar export of upcoming event dates, built with ``icalendar``.

Start and end times keep the site timezone. The matching ``VTIMEZONE`` is
generated by ``add_missing_timezones`` so every ``TZID`` is defined in the
file.
"""

from datetime import timedelta
from typing import Iterable, List

from django.conf import settings
from django.http import HttpResponse
from django.utils import timezone
from icalendar import Calendar
from icalendar import Event as CalendarEvent

from core.markdown_export import absolute_url
from events.models import Event, Occurrence

DEFAULT_DURATION = timedelta(hours=1)
PRODID = "-//Harbour//Community Events//EN"


def occurrence_component(occurrence: Occurrence, host: str, stamp) -> CalendarEvent:
    event = occurrence.event
    start = occurrence.local_start
    end = occurrence.local_end or start + DEFAULT_DURATION

    component = CalendarEvent()
    component.add("uid", f"{event.pk}-{start:%Y%m%d%H%M}@{host}")
    component.add("dtstamp", stamp)
    component.add("dtstart", start)
    component.add("dtend", end)
    component.add("summary", event.title)
    component.add("description", occurrence.description)
    component.add("url", occurrence.link or absolute_url(f"/events/{event.slug}"))
    if occurrence.location:
        component.add("location", occurrence.location)
    return component


def build_calendar(occurrences: Iterable[Occurrence], host: str) -> bytes:
    """Serialize every non-cancelled occurrence as a ``VEVENT``."""
    calendar = Calendar()
    calendar.add("prodid", PRODID)
    calendar.add("version", "2.0")
    calendar.add("calscale", "GREGORIAN")
    calendar.add("method", "PUBLISH")
    calendar.add("x-wr-calname", f"{settings.SITE_NAME} Events")
    calendar.add("x-wr-timezone", settings.SITE_TIMEZONE)

    stamp = timezone.now()
    for occurrence in occurrences:
        if occurrence.cancelled:
            continue
        calendar.add_component(occurrence_component(occurrence, host, stamp))

    calendar.add_missing_timezones()
    return calendar.to_ical()


def upcoming_occurrences(now=None) -> List[Occurrence]:
    """Every upcoming date of every event in the default horizon."""
    now = now or timezone.now()
    occurrences = []
    for event in Event.objects.upcoming(now).prefetch_related("dates"):
        occurrences.extend(event.occurrences(start=now))
    return sorted(occurrences, key=lambda o: o.start)


def calendar_response(occurrences: Iterable[Occurrence], host: str) -> HttpResponse:
    host = host.split(":")[0]
    response = HttpResponse(build_calendar(occurrences, host), content_type="text/calendar; charset=utf-8")
    response["Content-Disposition"] = 'attachment; filename="events.ics"'
    response["Cache-Control"] = "public, max-age=3600"
    return response
