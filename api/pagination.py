from rest_framework.pagination import BasePagination
from rest_framework.response import Response

from core.pagination import build_link_header, paginate, parse_pagination_params


class LinkHeaderPagination(BasePagination):
    """
    ``limit``/``offset`` pagination with the page described twice: in a
    ``pagination`` object in the body and as an RFC 5988 ``Link`` header.
    """

    def paginate_queryset(self, queryset, request, view=None):
        self.request = request
        self.params = parse_pagination_params(request.query_params)
        self.page = paginate(queryset, self.params)
        return self.page.items

    def get_paginated_response(self, data):
        response = Response({"data": data, "pagination": self.page.as_dict()})
        base_url = self.request.build_absolute_uri(self.request.path)
        link = build_link_header(base_url, self.params, self.page.total)
        if link:
            response["Link"] = link
        return response

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "properties": {
                "data": schema,
                "pagination": {
                    "type": "object",
                    "properties": {
                        "total": {"type": "integer"},
                        "limit": {"type": "integer"},
                        "offset": {"type": "integer"},
                        "hasMore": {"type": "boolean"},
                    },
                },
            },
        }
