from django.urls import path

from core import manage_views as views

app_name = "manage"

urlpatterns = [
    path("", views.index, name="index"),
    path("comments", views.comments, name="comments"),
    path("settings", views.site_settings, name="settings"),
    path("jobs/import", views.job_import, name="job_import"),
    path("jobs/import/<int:pk>/sync", views.job_import_sync, name="job_import_sync"),
    path("jobs/import/<int:pk>/delete", views.job_import_delete, name="job_import_delete"),
    path("events/<int:pk>/occurrences", views.event_occurrences, name="occurrences"),
    path("<str:section>", views.entity_list, name="list"),
    path("<str:section>/new", views.entity_edit, name="new"),
    path("<str:section>/<int:pk>", views.entity_edit, name="edit"),
    path("<str:section>/<int:pk>/delete", views.entity_delete, name="delete"),
]
