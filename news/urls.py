from django.urls import path

from core import views

app_name = "news"

urlpatterns = [
    path("news.md", views.entity_list, {"kind_key": "news", "markdown": True}, name="list_md"),
    path("news", views.entity_list, {"kind_key": "news"}, name="list"),
    path("news/<slug:slug>.md", views.entity_detail, {"kind_key": "news", "markdown": True}, name="detail_md"),
    path("news/<slug:slug>", views.entity_detail, {"kind_key": "news"}, name="detail"),
]
