from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from accounts.models import User
from core.models import SiteConfig
from events.models import Event, EventDate
from jobs.models import Job
from news.models import News


class NewsPublishingTest(TestCase):
    def setUp(self):
        now = timezone.now()
        self.published = News.objects.create(
            title="Harbour Launches", content="Hello", published_at=now - timedelta(days=1)
        )
        self.draft = News.objects.create(title="Draft Post", content="Soon")
        self.scheduled = News.objects.create(
            title="Scheduled Post", content="Later", published_at=now + timedelta(days=2)
        )

    def test_published_queryset(self):
        self.assertEqual(list(News.objects.published()), [self.published])
        self.assertTrue(self.published.is_published)
        self.assertFalse(self.draft.is_published)
        self.assertFalse(self.scheduled.is_published)

    def test_only_published_articles_are_public(self):
        response = self.client.get("/news")
        self.assertEqual([n.title for n in response.context["page"].items], ["Harbour Launches"])
        self.assertEqual(self.client.get("/news/harbour-launches").status_code, 200)
        self.assertEqual(self.client.get("/news/draft-post").status_code, 404)
        self.assertEqual(self.client.get("/news/scheduled-post").status_code, 404)

    def test_manage_publish_now(self):
        admin = User.objects.create_user(email="admin@example.com", password="pw", role=User.Role.ADMIN)
        self.client.force_login(admin)
        self.client.post(
            f"/manage/news/{self.draft.pk}",
            {"title": "Draft Post", "type": "announcement", "content": "Soon", "publish_now": "on"},
        )
        self.draft.refresh_from_db()
        self.assertTrue(self.draft.is_published)


class FeedTest(TestCase):
    def setUp(self):
        now = timezone.now()
        News.objects.create(title="Harbour Launches", content="Hello", published_at=now - timedelta(days=1))
        News.objects.create(title="Ancient History", content="Old", published_at=now - timedelta(days=90))
        Job.objects.create(title="Backend Developer", company_name="Initech", url="https://example.com/apply")
        event = Event.objects.create(title="Hack Night", description="Code", link="https://example.com/hack")
        EventDate.objects.create(event=event, start_date=now + timedelta(days=2))

    def test_news_feed(self):
        response = self.client.get("/news.rss")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response["Content-Type"].startswith("application/rss+xml"))
        self.assertContains(response, "Harbour Launches")
        self.assertContains(response, "Ancient History")

    def test_jobs_feed(self):
        self.assertContains(self.client.get("/jobs.rss"), "Backend Developer at Initech")

    def test_events_feed(self):
        self.assertContains(self.client.get("/events.rss"), "Hack Night")

    def test_combined_feed_only_has_recent_news(self):
        response = self.client.get("/feed.rss")
        self.assertContains(response, "Harbour Launches")
        self.assertContains(response, "Backend Developer")
        self.assertContains(response, "Hack Night")
        self.assertNotContains(response, "Ancient History")

    def test_hidden_section_left_out(self):
        SiteConfig.set_section_visible("jobs", False)
        self.assertNotContains(self.client.get("/feed.rss"), "Backend Developer")
        self.assertNotContains(self.client.get("/jobs.rss"), "Backend Developer")
