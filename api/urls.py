from django.urls import include, path
from rest_framework.routers import DefaultRouter

from api import views
from core.views import delete_comment, post_comment

router = DefaultRouter(trailing_slash=False)
router.include_root_view = False
router.register(r"companies", views.CompanyViewSet, basename="api-company")
router.register(r"groups", views.GroupViewSet, basename="api-group")
router.register(r"people", views.PersonViewSet, basename="api-person")
router.register(r"projects", views.ProjectViewSet, basename="api-project")
router.register(r"products", views.ProductViewSet, basename="api-product")
router.register(r"technologies", views.TechnologyViewSet, basename="api-technology")
router.register(r"events", views.EventViewSet, basename="api-event")
router.register(r"news", views.NewsViewSet, basename="api-news")
router.register(r"jobs", views.JobViewSet, basename="api-job")

app_name = "api"

urlpatterns = [
    path("comments", post_comment, name="post_comment"),
    path("comments/delete", delete_comment, name="delete_comment"),
    path("", include(router.urls)),
]
