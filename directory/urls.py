from django.urls import path

from core import views

app_name = "directory"

SECTIONS = {
    "companies": "company",
    "groups": "group",
    "people": "person",
    "projects": "project",
    "products": "product",
    "technologies": "technology",
}

urlpatterns = []
for section, kind_key in SECTIONS.items():
    urlpatterns += [
        path(f"{section}.md", views.entity_list, {"kind_key": kind_key, "markdown": True}, name=f"{section}_md"),
        path(f"{section}", views.entity_list, {"kind_key": kind_key}, name=section),
        path(
            f"{section}/<slug:slug>.md",
            views.entity_detail,
            {"kind_key": kind_key, "markdown": True},
            name=f"{kind_key}_md",
        ),
        path(f"{section}/<slug:slug>", views.entity_detail, {"kind_key": kind_key}, name=kind_key),
    ]
