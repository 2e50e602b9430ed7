"""RSS feeds built on Django's syndication framework."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from django.conf import settings
from django.contrib.syndication.views import Feed
from django.utils import timezone

from core.markdown_export import absolute_url
from core.models import SiteConfig
from core.utils import truncate
from events.models import upcoming_events
from jobs.models import Job
from news.models import News

FEED_LIMIT = 50
RECENT_NEWS_DAYS = 30


@dataclass
class FeedItem:
    title: str
    path: str
    description: str
    pubdate: datetime
    category: str


def event_items():
    if not SiteConfig.is_section_visible("events"):
        return []
    return [
        FeedItem(
            title=f"{o.event.title} ({o.local_start:%b %d, %Y %H:%M})",
            path=f"/events/{o.event.slug}",
            description=o.description,
            pubdate=o.start,
            category="Event",
        )
        for o in upcoming_events(limit=FEED_LIMIT)
    ]


def news_items(since=None):
    if not SiteConfig.is_section_visible("news"):
        return []
    articles = News.objects.published()
    if since is not None:
        articles = articles.filter(published_at__gte=since)
    return [
        FeedItem(
            title=article.title,
            path=f"/news/{article.slug}",
            description=article.excerpt or article.content,
            pubdate=article.published_at,
            category=article.get_type_display(),
        )
        for article in articles[:FEED_LIMIT]
    ]


def job_items():
    if not SiteConfig.is_section_visible("jobs"):
        return []
    jobs = Job.objects.active().select_related("company")[:FEED_LIMIT]
    return [
        FeedItem(
            title=f"{job.title} at {job.display_company}" if job.display_company else job.title,
            path=f"/jobs/{job.slug}",
            description=job.description,
            pubdate=job.posted_at or job.created_at,
            category="Job",
        )
        for job in jobs
    ]


class BaseFeed(Feed):
    description_length = 500

    def title(self):
        return f"{settings.SITE_NAME} {self.section_title}".strip()

    def link(self):
        return absolute_url("/")

    def item_title(self, item):
        return item.title

    def item_link(self, item):
        return absolute_url(item.path)

    def item_guid(self, item):
        return absolute_url(item.path)

    def item_description(self, item):
        return truncate(item.description, self.description_length)

    def item_pubdate(self, item):
        return item.pubdate

    def item_categories(self, item):
        return [item.category]


class EventsFeed(BaseFeed):
    section_title = "Events"
    description = "Upcoming events"

    def items(self):
        return event_items()


class NewsFeed(BaseFeed):
    section_title = "News"
    description = "Latest news"

    def items(self):
        return news_items()


class JobsFeed(BaseFeed):
    section_title = "Jobs"
    description = "Open positions"

    def items(self):
        return job_items()


class CombinedFeed(BaseFeed):
    section_title = ""
    description = "Events, news and jobs"

    def items(self):
        since = timezone.now() - timedelta(days=RECENT_NEWS_DAYS)
        items = event_items() + news_items(since=since) + job_items()
        items.sort(key=lambda item: item.pubdate, reverse=True)
        return items[:FEED_LIMIT]
