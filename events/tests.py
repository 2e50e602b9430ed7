from datetime import date, time, timedelta

from django.conf import settings
from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from icalendar import Calendar

from accounts.models import User
from core.markdown_export import split_frontmatter
from core.models import SiteConfig
from events.ical import build_calendar
from events.models import Event, EventDate, EventOccurrence, localize, upcoming_events
from events.recurrence import (
    RecurrenceError,
    RecurrenceRule,
    build_rule,
    describe_rule,
    generate_occurrences,
    parse_rule,
    rule_to_form_values,
)


class RecurrenceRuleTest(SimpleTestCase):
    def test_parse_weekly(self):
        self.assertEqual(parse_rule("FREQ=WEEKLY;BYDAY=TH"), RecurrenceRule("WEEKLY", 1, "TH", None))
        self.assertEqual(parse_rule("freq=weekly;interval=2;byday=th").interval, 2)
        self.assertIsNone(parse_rule(""))

    def test_monthly_position_defaults_to_first(self):
        self.assertEqual(parse_rule("FREQ=MONTHLY;BYDAY=TH").position, 1)
        self.assertEqual(parse_rule("FREQ=MONTHLY;BYDAY=-1FR").position, -1)

    def test_unknown_parts_are_ignored(self):
        self.assertEqual(parse_rule("FREQ=WEEKLY;BYDAY=MO;WKST=SU"), RecurrenceRule("WEEKLY", 1, "MO"))

    def test_invalid_rules(self):
        for rule in ("FREQ=DAILY", "FREQ=WEEKLY;BYDAY=XX", "FREQ=MONTHLY;BYDAY=7TH", "FREQ=WEEKLY;INTERVAL=x"):
            with self.subTest(rule=rule), self.assertRaises(RecurrenceError):
                parse_rule(rule)

    def test_build_rule(self):
        self.assertEqual(build_rule("", "TH"), "")
        self.assertEqual(build_rule("weekly", "TH"), "FREQ=WEEKLY;BYDAY=TH")
        self.assertEqual(build_rule("biweekly", "TH"), "FREQ=WEEKLY;INTERVAL=2;BYDAY=TH")
        self.assertEqual(build_rule("monthly", "FR", -1), "FREQ=MONTHLY;BYDAY=-1FR")
        self.assertEqual(build_rule("monthly", "WE"), "FREQ=MONTHLY;BYDAY=1WE")
        with self.assertRaises(RecurrenceError):
            build_rule("weekly", "")

    def test_form_values(self):
        self.assertEqual(
            rule_to_form_values("FREQ=WEEKLY;INTERVAL=2;BYDAY=TH"),
            {"frequency": "biweekly", "day": "TH", "position": ""},
        )
        self.assertEqual(
            rule_to_form_values("FREQ=MONTHLY;BYDAY=-1FR"),
            {"frequency": "monthly", "day": "FR", "position": "-1"},
        )

    def test_describe(self):
        self.assertEqual(describe_rule("FREQ=WEEKLY;BYDAY=TH"), "Every Thursday")
        self.assertEqual(describe_rule("FREQ=WEEKLY;INTERVAL=2;BYDAY=TU"), "Every other Tuesday")
        self.assertEqual(describe_rule("FREQ=MONTHLY;BYDAY=-1FR"), "Last Friday of every month")
        self.assertEqual(describe_rule("FREQ=DAILY"), "")


class GenerateOccurrencesTest(SimpleTestCase):
    # 2025-01-01 is a Wednesday
    start = date(2025, 1, 1)

    def test_weekly(self):
        self.assertEqual(
            generate_occurrences("FREQ=WEEKLY;BYDAY=TH", self.start, date(2025, 1, 31)),
            [date(2025, 1, 2), date(2025, 1, 9), date(2025, 1, 16), date(2025, 1, 23), date(2025, 1, 30)],
        )

    def test_biweekly_counts_from_first_match(self):
        self.assertEqual(
            generate_occurrences("FREQ=WEEKLY;INTERVAL=2;BYDAY=TH", self.start, date(2025, 1, 31)),
            [date(2025, 1, 2), date(2025, 1, 16), date(2025, 1, 30)],
        )

    def test_first_thursday_monthly(self):
        self.assertEqual(
            generate_occurrences("FREQ=MONTHLY;BYDAY=1TH", self.start, date(2025, 3, 31)),
            [date(2025, 1, 2), date(2025, 2, 6), date(2025, 3, 6)],
        )

    def test_last_friday_monthly(self):
        self.assertEqual(
            generate_occurrences("FREQ=MONTHLY;BYDAY=-1FR", self.start, date(2025, 3, 31)),
            [date(2025, 1, 31), date(2025, 2, 28), date(2025, 3, 28)],
        )

    def test_monthly_skips_dates_before_start(self):
        dates = generate_occurrences("FREQ=MONTHLY;BYDAY=1TH", date(2025, 1, 10), date(2025, 2, 28))
        self.assertEqual(dates, [date(2025, 2, 6)])

    def test_window_end_is_inclusive(self):
        self.assertEqual(generate_occurrences("FREQ=WEEKLY;BYDAY=TH", date(2025, 1, 2), date(2025, 1, 2)), [date(2025, 1, 2)])
        self.assertEqual(generate_occurrences("FREQ=WEEKLY;BYDAY=TH", date(2025, 1, 3), date(2025, 1, 8)), [])

    def test_default_horizon_and_cap(self):
        dates = generate_occurrences("FREQ=WEEKLY;BYDAY=TH", self.start)
        self.assertEqual(dates[-1], date(2025, 3, 27))
        self.assertEqual(len(generate_occurrences("FREQ=WEEKLY;BYDAY=TH", self.start, date(2027, 1, 1))), 52)
        self.assertEqual(len(generate_occurrences("FREQ=WEEKLY;BYDAY=TH", self.start, date(2025, 3, 1), max_occurrences=3)), 3)

    def test_end_before_start(self):
        self.assertEqual(generate_occurrences("FREQ=WEEKLY;BYDAY=TH", self.start, date(2024, 12, 1)), [])


class EventOccurrenceTest(TestCase):
    def setUp(self):
        # 2030-01-01 is a Tuesday, the Thursdays are the 3rd, 10th, 17th, 24th and 31st
        self.window_start = localize(date(2030, 1, 1), time(0, 0))
        self.window_end = localize(date(2030, 1, 31), time(0, 0))
        self.event = Event.objects.create(
            title="Hack Night",
            description="Bring a laptop",
            location="Innovation Hub",
            link="https://example.com/hack",
            recurrence_rule="FREQ=WEEKLY;BYDAY=TH",
            default_start_time=time(19, 0),
            default_end_time=time(21, 0),
        )

    def occurrences(self):
        return self.event.occurrences(start=self.window_start, end=self.window_end)

    def test_generated_dates_use_default_times(self):
        occurrences = self.occurrences()
        self.assertEqual([o.date.day for o in occurrences], [3, 10, 17, 24, 31])
        first = occurrences[0]
        self.assertTrue(first.generated)
        self.assertEqual((first.local_start.hour, first.local_end.hour), (19, 21))
        self.assertEqual(first.location, "Innovation Hub")

    def test_override_and_cancel(self):
        EventOccurrence.objects.create(
            event=self.event, occurrence_date=date(2030, 1, 10), location="Library", start_time=time(18, 0)
        )
        EventOccurrence.objects.create(event=self.event, occurrence_date=date(2030, 1, 17), cancelled=True)

        by_day = {o.date.day: o for o in self.occurrences()}
        self.assertEqual(by_day[10].location, "Library")
        self.assertEqual(by_day[10].local_start.hour, 18)
        self.assertEqual(by_day[10].description, "Bring a laptop")
        self.assertTrue(by_day[17].cancelled)
        self.assertFalse(by_day[24].cancelled)

    def test_recurrence_end(self):
        self.event.recurrence_end = date(2030, 1, 20)
        self.event.save()
        self.assertEqual([o.date.day for o in self.occurrences()], [3, 10, 17])

    def test_next_occurrence_skips_cancelled(self):
        upcoming = self.event.occurrences()
        EventOccurrence.objects.create(event=self.event, occurrence_date=upcoming[0].date, cancelled=True)
        self.assertEqual(self.event.next_occurrence().date, upcoming[1].date)

    def test_one_off_dates(self):
        now = timezone.now()
        event = Event.objects.create(title="Conf", description="Talks", link="https://example.com/conf")
        EventDate.objects.create(event=event, start_date=now - timedelta(days=30))
        upcoming = EventDate.objects.create(event=event, start_date=now + timedelta(days=3))

        self.assertEqual([o.start for o in event.occurrences()], [upcoming.start_date])
        self.assertEqual(len(event.all_dates()), 2)
        self.assertFalse(event.occurrences()[0].generated)

    def test_upcoming_and_past_querysets(self):
        now = timezone.now()
        past = Event.objects.create(title="Old Meetup", description="x", link="https://example.com/old")
        EventDate.objects.create(event=past, start_date=now - timedelta(days=10))
        soon = Event.objects.create(title="Soon", description="x", link="https://example.com/soon")
        EventDate.objects.create(event=soon, start_date=now + timedelta(days=1))

        self.assertEqual(set(Event.objects.upcoming()), {soon, self.event})
        self.assertEqual(list(Event.objects.past()), [past])

    def test_upcoming_events_sorted_by_next_date(self):
        self.event.delete()
        now = timezone.now()
        later = Event.objects.create(title="Later", description="x", link="https://example.com/later")
        EventDate.objects.create(event=later, start_date=now + timedelta(days=40))
        sooner = Event.objects.create(title="Sooner", description="x", link="https://example.com/sooner")
        EventDate.objects.create(event=sooner, start_date=now + timedelta(minutes=30))

        occurrences = upcoming_events()
        self.assertEqual(occurrences[0].event, sooner)
        self.assertEqual([o.start for o in occurrences], sorted(o.start for o in occurrences))
        self.assertIn(later, [o.event for o in occurrences])


class ICalTest(TestCase):
    def test_build_calendar(self):
        event = Event.objects.create(
            title="Hack Night, Downtown",
            description="Bring a laptop",
            location="Innovation Hub",
            link="https://example.com/hack",
            recurrence_rule="FREQ=WEEKLY;BYDAY=TH",
            default_start_time=time(19, 0),
        )
        EventOccurrence.objects.create(event=event, occurrence_date=date(2030, 1, 10), cancelled=True)
        occurrences = event.occurrences(
            start=localize(date(2030, 1, 1), time(0, 0)), end=localize(date(2030, 1, 14), time(0, 0))
        )

        calendar = build_calendar(occurrences, "harbour.test").decode()
        self.assertEqual(calendar.count("BEGIN:VEVENT"), 1)
        self.assertIn(f"DTSTART;TZID={settings.SITE_TIMEZONE}:20300103T190000", calendar)
        self.assertIn(f"DTEND;TZID={settings.SITE_TIMEZONE}:20300103T200000", calendar)
        self.assertIn(f"UID:{event.pk}-203001031900@harbour.test", calendar)
        self.assertIn("SUMMARY:Hack Night\\, Downtown", calendar)
        self.assertNotIn("20300110T", calendar)

    def test_every_tzid_has_a_timezone(self):
        event = Event.objects.create(title="Conf", description="Talks", link="https://example.com/conf")
        EventDate.objects.create(event=event, start_date=timezone.now() + timedelta(days=2))

        calendar = build_calendar(event.occurrences(), "harbour.test").decode()
        self.assertIn("BEGIN:VTIMEZONE", calendar)
        self.assertIn(f"TZID:{settings.SITE_TIMEZONE}", calendar)

        parsed = Calendar.from_ical(calendar)
        self.assertEqual([tz["TZID"] for tz in parsed.walk("VTIMEZONE")], [settings.SITE_TIMEZONE])

    def test_long_text_survives_folding(self):
        description = "Lightning talks, demos and pizza. " * 10
        event = Event.objects.create(title="Demo Day", description=description, link="https://example.com/demo")
        EventDate.objects.create(event=event, start_date=timezone.now() + timedelta(days=1))

        calendar = build_calendar(event.occurrences(), "harbour.test")
        for line in calendar.split(b"\r\n"):
            self.assertLessEqual(len(line), 75)
        parsed = Calendar.from_ical(calendar)
        self.assertEqual(str(parsed.walk("VEVENT")[0]["DESCRIPTION"]), description)
        self.assertEqual(str(parsed.walk("VEVENT")[0]["URL"]), "https://example.com/demo")

    def test_event_without_end_lasts_an_hour(self):
        event = Event.objects.create(title="Meetup", description="Chat", link="https://example.com/m")
        start = localize(date(2030, 5, 2), time(18, 30))
        EventDate.objects.create(event=event, start_date=start)

        parsed = Calendar.from_ical(build_calendar(event.occurrences(), "harbour.test"))
        vevent = parsed.walk("VEVENT")[0]
        self.assertEqual(vevent.decoded("DTEND") - vevent.decoded("DTSTART"), timedelta(hours=1))

    def test_calendar_endpoint(self):
        response = self.client.get("/calendar.ics")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "text/calendar; charset=utf-8")

        SiteConfig.set_section_visible("events", False)
        self.assertEqual(self.client.get("/calendar.ics").status_code, 404)


class EventPagesTest(TestCase):
    def setUp(self):
        self.event = Event.objects.create(
            title="Hack Night",
            description="Run by [[Code Club]]",
            link="https://example.com/hack",
            organizer="Code Club, Someone Else",
            recurrence_rule="FREQ=WEEKLY;BYDAY=TH",
        )

    def test_list(self):
        response = self.client.get("/events")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["page"].items[0].event, self.event)

    def test_detail(self):
        response = self.client.get("/events/hack-night")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.context["organizers"],
            [{"name": "Code Club", "url": None}, {"name": "Someone Else", "url": None}],
        )

    def test_markdown(self):
        meta, body = split_frontmatter(self.client.get("/events/hack-night.md").content.decode())
        self.assertEqual(meta["type"], "event")
        self.assertTrue(meta["recurring"])
        self.assertEqual(meta["recurrence"], "Every Thursday")
        self.assertIn("Run by **Code Club**", body)

        meta, body = split_frontmatter(self.client.get("/events.md").content.decode())
        self.assertEqual(meta["type"], "events_list")
        self.assertIn("- [Hack Night]", body)


class ManageEventTest(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(email="admin@example.com", password="pw", role=User.Role.ADMIN)
        self.client.force_login(self.admin)

    def post_event(self, url="/manage/events/new", dates=(), **fields):
        data = {
            "title": "Hack Night",
            "description": "Bring a laptop",
            "link": "https://example.com/hack",
            "dates-TOTAL_FORMS": str(max(len(dates), 1)),
            "dates-INITIAL_FORMS": "0",
            "dates-MIN_NUM_FORMS": "0",
            "dates-MAX_NUM_FORMS": "1000",
        }
        for i, start in enumerate(dates):
            data[f"dates-{i}-start_date"] = start
        data.update(fields)
        return self.client.post(url, data)

    def test_one_off_event_needs_a_date(self):
        response = self.post_event()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["error"], "Add at least one date or make the event repeat")
        self.assertFalse(Event.objects.exists())

    def test_create_one_off_event(self):
        response = self.post_event(dates=["2030-05-01T18:00"])
        event = Event.objects.get()
        self.assertRedirects(response, f"/manage/events/{event.pk}", fetch_redirect_response=False)
        self.assertEqual(event.dates.count(), 1)
        self.assertEqual(event.recurrence_rule, "")

    def test_create_recurring_event(self):
        self.post_event(frequency="monthly", day="FR", position="-1", default_start_time="19:00")
        event = Event.objects.get()
        self.assertEqual(event.recurrence_rule, "FREQ=MONTHLY;BYDAY=-1FR")
        self.assertEqual(event.recurrence_description, "Last Friday of every month")

    def test_frequency_needs_day(self):
        response = self.post_event(frequency="weekly")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Event.objects.exists())

    def test_end_time_after_start(self):
        response = self.post_event(
            frequency="weekly", day="TH", default_start_time="19:00", default_end_time="18:00"
        )
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Event.objects.exists())

    def test_manage_occurrences(self):
        event = Event.objects.create(
            title="Hack Night",
            description="Bring a laptop",
            link="https://example.com/hack",
            recurrence_rule="FREQ=WEEKLY;BYDAY=TH",
        )
        url = f"/manage/events/{event.pk}/occurrences"
        self.assertEqual(self.client.get(url).status_code, 200)

        day = event.occurrences()[0].date
        self.client.post(url, {"action": "cancel", "date": day.isoformat()})
        self.assertTrue(EventOccurrence.objects.get(event=event, occurrence_date=day).cancelled)

        self.client.post(url, {"action": "restore", "date": day.isoformat()})
        self.assertFalse(EventOccurrence.objects.get(event=event, occurrence_date=day).cancelled)

        prefix = f"occ-{day:%Y%m%d}"
        self.client.post(url, {"action": "override", "date": day.isoformat(), f"{prefix}-location": "Library"})
        self.assertEqual(event.occurrences()[0].location, "Library")

        self.client.post(url, {"action": "clear", "date": day.isoformat()})
        self.assertFalse(EventOccurrence.objects.filter(event=event).exists())

    def test_occurrence_date_must_match_rule(self):
        event = Event.objects.create(
            title="Hack Night",
            description="x",
            link="https://example.com/hack",
            recurrence_rule="FREQ=WEEKLY;BYDAY=TH",
        )
        friday = event.occurrences()[0].date + timedelta(days=1)
        self.client.post(f"/manage/events/{event.pk}/occurrences", {"action": "cancel", "date": friday.isoformat()})
        self.assertFalse(EventOccurrence.objects.exists())
