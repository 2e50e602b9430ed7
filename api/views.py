from django.http import Http404
from rest_framework import viewsets

from api import serializers
from core.models import SiteConfig
from core.registry import get_kind
from core.views import search


class ContentViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Public list/detail endpoints for one content type.

    Lists accept ``limit``, ``offset`` and ``q``; details are looked up by
    slug. Hidden sections and non-public rows answer 404.
    """

    kind_key = ""
    lookup_field = "slug"

    @property
    def kind(self):
        return get_kind(self.kind_key)

    @property
    def resource_name(self):
        return self.kind.label

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        if not SiteConfig.is_section_visible(self.kind.section):
            raise Http404

    def get_queryset(self):
        kind = self.kind
        queryset = kind.public_queryset()
        if self.action == "list":
            queryset = search(queryset, kind, (self.request.query_params.get("q") or "").strip())
        return queryset

    def finalize_response(self, request, response, *args, **kwargs):
        response = super().finalize_response(request, response, *args, **kwargs)
        response["Access-Control-Allow-Origin"] = "*"
        return response


class CompanyViewSet(ContentViewSet):
    kind_key = "company"
    serializer_class = serializers.CompanySerializer

    def get_queryset(self):
        return super().get_queryset().prefetch_related("technologies")


class GroupViewSet(ContentViewSet):
    kind_key = "group"
    serializer_class = serializers.GroupSerializer


class PersonViewSet(ContentViewSet):
    kind_key = "person"
    serializer_class = serializers.PersonSerializer


class ProjectViewSet(ContentViewSet):
    kind_key = "project"
    serializer_class = serializers.ProjectSerializer

    def get_queryset(self):
        return super().get_queryset().prefetch_related("technologies")


class ProductViewSet(ContentViewSet):
    kind_key = "product"
    serializer_class = serializers.ProductSerializer

    def get_queryset(self):
        return super().get_queryset().select_related("company")


class TechnologyViewSet(ContentViewSet):
    kind_key = "technology"
    serializer_class = serializers.TechnologySerializer


class EventViewSet(ContentViewSet):
    kind_key = "event"
    serializer_class = serializers.EventSerializer

    def get_queryset(self):
        return super().get_queryset().prefetch_related("dates", "overrides")


class NewsViewSet(ContentViewSet):
    kind_key = "news"
    serializer_class = serializers.NewsSerializer


class JobViewSet(ContentViewSet):
    kind_key = "job"
    serializer_class = serializers.JobSerializer

    def get_queryset(self):
        return super().get_queryset().select_related("company")
