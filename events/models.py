from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import List, Optional

import pytz
from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from core.utils import unique_slug
from events.recurrence import DEFAULT_HORIZON_DAYS, describe_rule, generate_occurrences

DEFAULT_START_TIME = time(18, 0)


def site_timezone():
    return pytz.timezone(settings.SITE_TIMEZONE)


def localize(day, at: time) -> datetime:
    """Aware datetime for a wall-clock time on ``day`` in the site timezone."""
    return site_timezone().localize(datetime.combine(day, at))


@dataclass
class Occurrence:
    """One concrete date of an event, explicit or generated from its rule."""

    event: "Event"
    start: datetime
    end: Optional[datetime]
    location: str
    description: str
    link: str
    cancelled: bool = False
    generated: bool = False
    override_id: Optional[int] = None

    @property
    def local_start(self) -> datetime:
        return self.start.astimezone(site_timezone())

    @property
    def local_end(self) -> Optional[datetime]:
        return self.end.astimezone(site_timezone()) if self.end else None

    @property
    def date(self):
        return self.local_start.date()


class EventQuerySet(models.QuerySet):
    def upcoming(self, now=None):
        """Events with a date still ahead, plus every recurring event."""
        now = now or timezone.now()
        return self.filter(
            Q(dates__start_date__gte=now)
            | Q(dates__end_date__gte=now)
            | ~Q(recurrence_rule="")
        ).distinct()

    def past(self, now=None):
        now = now or timezone.now()
        return self.filter(recurrence_rule="").exclude(
            pk__in=self.upcoming(now).values("pk")
        ).filter(dates__isnull=False).distinct()


class Event(models.Model):
    """
    A meetup, conference or workshop.

    One-off events list their dates in ``EventDate`` rows. Recurring events
    carry a ``recurrence_rule`` and default start/end times instead, and
    individual dates can be cancelled or changed with ``EventOccurrence``.
    """

    title = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True, blank=True)
    description = models.TextField(help_text="Markdown, supports [[references]]")
    location = models.CharField(max_length=300, blank=True)
    link = models.URLField(max_length=500)
    organizer = models.CharField(
        max_length=300, blank=True, help_text="Comma separated, names can match directory entries"
    )
    cover_image = models.CharField(max_length=255, blank=True)
    icon_image = models.CharField(max_length=255, blank=True)
    requires_signup = models.BooleanField(default=False)

    recurrence_rule = models.CharField(max_length=100, blank=True, help_text="e.g. FREQ=WEEKLY;BYDAY=TH")
    recurrence_end = models.DateField(null=True, blank=True)
    default_start_time = models.TimeField(null=True, blank=True)
    default_end_time = models.TimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = EventQuerySet.as_manager()

    class Meta:
        ordering = ["title"]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Event, self.title, exclude_pk=self.pk)
        super().save(*args, **kwargs)

    @property
    def is_recurring(self) -> bool:
        return bool(self.recurrence_rule)

    @property
    def recurrence_description(self) -> str:
        return describe_rule(self.recurrence_rule)

    def _generated_occurrences(self, start: datetime, end: datetime) -> List[Occurrence]:
        tz = site_timezone()
        first_day = start.astimezone(tz).date()
        last_day = end.astimezone(tz).date()
        if self.recurrence_end and self.recurrence_end < last_day:
            last_day = self.recurrence_end

        overrides = {
            o.occurrence_date: o
            for o in self.overrides.filter(occurrence_date__gte=first_day, occurrence_date__lte=last_day)
        }

        occurrences = []
        for day in generate_occurrences(self.recurrence_rule, first_day, last_day):
            override = overrides.get(day)
            start_time = (override and override.start_time) or self.default_start_time or DEFAULT_START_TIME
            end_time = (override and override.end_time) or self.default_end_time
            occurrence_start = localize(day, start_time)
            occurrence_end = localize(day, end_time) if end_time else None
            if (occurrence_end or occurrence_start) < start:
                continue
            occurrences.append(
                Occurrence(
                    event=self,
                    start=occurrence_start,
                    end=occurrence_end,
                    location=(override and override.location) or self.location,
                    description=(override and override.description) or self.description,
                    link=(override and override.link) or self.link,
                    cancelled=bool(override and override.cancelled),
                    generated=True,
                    override_id=override.pk if override else None,
                )
            )
        return occurrences

    def occurrences(self, start: datetime = None, end: datetime = None) -> List[Occurrence]:
        """
        Concrete dates between ``start`` and ``end``.

        ``start`` defaults to now and ``end`` to 90 days later for recurring
        events. One-off events return every explicit date overlapping the
        window (``end=None`` means no upper bound).
        """
        start = start or timezone.now()
        if self.is_recurring:
            end = end or start + timedelta(days=DEFAULT_HORIZON_DAYS)
            return self._generated_occurrences(start, end)

        occurrences = []
        for event_date in self.dates.all():
            finish = event_date.end_date or event_date.start_date
            if finish < start or (end is not None and event_date.start_date > end):
                continue
            occurrences.append(
                Occurrence(
                    event=self,
                    start=event_date.start_date,
                    end=event_date.end_date,
                    location=self.location,
                    description=self.description,
                    link=self.link,
                )
            )
        return sorted(occurrences, key=lambda o: o.start)

    def upcoming_occurrences(self) -> List[Occurrence]:
        return self.occurrences()

    def all_dates(self) -> List[Occurrence]:
        """Every explicit date, past included, or the upcoming generated ones."""
        if self.is_recurring:
            return self.occurrences()
        return self.occurrences(start=datetime.min.replace(tzinfo=pytz.UTC))

    def next_occurrence(self) -> Optional[Occurrence]:
        return next((o for o in self.occurrences() if not o.cancelled), None)


class EventDate(models.Model):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="dates")
    start_date = models.DateTimeField()
    end_date = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["start_date"]

    def __str__(self):
        return f"{self.event.title} @ {self.start_date:%Y-%m-%d %H:%M}"


class EventOccurrence(models.Model):
    """Per-date override of a recurring event. Empty fields fall back to the event."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="overrides")
    occurrence_date = models.DateField()
    location = models.CharField(max_length=300, blank=True)
    description = models.TextField(blank=True)
    link = models.URLField(max_length=500, blank=True)
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)
    cancelled = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["occurrence_date"]
        unique_together = ["event", "occurrence_date"]
        indexes = [models.Index(fields=["event", "occurrence_date"], name="events_even_event_i_7c2f1a_idx")]

    def __str__(self):
        return f"{self.event.title} on {self.occurrence_date}"


def upcoming_events(limit: int = None, now=None) -> List[Occurrence]:
    """
    Next occurrence of every upcoming event, soonest first.

    Events whose generated dates in the horizon are all cancelled drop out.
    """
    now = now or timezone.now()
    upcoming = []
    for event in Event.objects.upcoming(now).prefetch_related("dates"):
        occurrence = next((o for o in event.occurrences(start=now) if not o.cancelled), None)
        if occurrence is not None:
            upcoming.append(occurrence)
    upcoming.sort(key=lambda o: o.start)
    return upcoming[:limit] if limit else upcoming
