from django.urls import path

from core import views

app_name = "jobs"

urlpatterns = [
    path("jobs.md", views.entity_list, {"kind_key": "job", "markdown": True}, name="list_md"),
    path("jobs", views.entity_list, {"kind_key": "job"}, name="list"),
    path("jobs/<slug:slug>.md", views.entity_detail, {"kind_key": "job", "markdown": True}, name="detail_md"),
    path("jobs/<slug:slug>", views.entity_detail, {"kind_key": "job"}, name="detail"),
]
