from django.contrib import admin
from django.urls import include, path

from core import feeds, views
from events.views import calendar_ics

urlpatterns = [
    path("", views.home, name="home"),
    path("admin/", admin.site.urls),
    path("directory/", include("directory.urls")),
    path("", include("events.urls")),
    path("", include("news.urls")),
    path("", include("jobs.urls")),
    path("images/<str:filename>", views.serve_image, name="image"),
    path("feed.rss", feeds.CombinedFeed(), name="feed"),
    path("events.rss", feeds.EventsFeed(), name="events_feed"),
    path("news.rss", feeds.NewsFeed(), name="news_feed"),
    path("jobs.rss", feeds.JobsFeed(), name="jobs_feed"),
    path("calendar.ics", calendar_ics, name="calendar"),
    path("api/", include("api.urls")),
    path("manage/", include("accounts.urls")),
    path("manage/", include("core.manage_urls")),
]
