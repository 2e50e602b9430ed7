from django.urls import path

from events import views

app_name = "events"

urlpatterns = [
    path("events.md", views.event_list, {"markdown": True}, name="list_md"),
    path("events", views.event_list, name="list"),
    path("events/<slug:slug>.md", views.event_detail, {"markdown": True}, name="detail_md"),
    path("events/<slug:slug>", views.event_detail, name="detail"),
]
