"""
Query-string pagination shared by the HTML pages, the Markdown mirrors and
the JSON API.
"""

from dataclasses import dataclass
from typing import List, Mapping
from urllib.parse import urlencode

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


@dataclass(frozen=True)
class PaginationParams:
    limit: int = DEFAULT_LIMIT
    offset: int = 0
    q: str = ""

    @property
    def current_page(self) -> int:
        return self.offset // self.limit + 1


def _parse_int(value, default):
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def parse_pagination_params(query: Mapping) -> PaginationParams:
    """
    Read ``limit``, ``offset`` and ``q`` from a query dict.

    ``limit`` defaults to 50, is capped at 200 and falls back to the default
    when missing, non-numeric or below 1. ``offset`` defaults to 0 and never
    goes negative. Bad input never raises.
    """
    limit = _parse_int(query.get("limit"), DEFAULT_LIMIT)
    if limit < 1:
        limit = DEFAULT_LIMIT
    limit = min(limit, MAX_LIMIT)

    offset = max(_parse_int(query.get("offset"), 0), 0)
    q = (query.get("q") or "").strip()
    return PaginationParams(limit=limit, offset=offset, q=q)


def page_window(current_page: int, total_pages: int, size: int = 5) -> List[int]:
    """
    Page numbers to show around ``current_page``.

    Two pages either side of the current one, shifted to keep ``size``
    numbers on screen when near the first or last page.
    """
    if total_pages < 1:
        return []
    half = size // 2
    current_page = min(max(current_page, 1), total_pages)

    start = max(1, current_page - half)
    end = min(total_pages, current_page + half)
    if current_page <= half + 1:
        end = min(size, total_pages)
    if current_page >= total_pages - half:
        start = max(1, total_pages - size + 1)
    return list(range(start, end + 1))


def _page_url(base_url: str, limit: int, offset: int, q: str) -> str:
    params = {"limit": limit, "offset": offset}
    if q:
        params["q"] = q
    return f"{base_url}?{urlencode(params)}"


def build_link_header(base_url: str, params: PaginationParams, total: int) -> str:
    """
    RFC 5988 ``Link`` header for a paginated listing.

    ``first`` and ``prev`` appear once we are past the first item, ``next`` and
    ``last`` while items remain. An empty string means a single page.
    """
    limit, offset = params.limit, params.offset
    links = []
    if offset > 0:
        links.append(f'<{_page_url(base_url, limit, 0, params.q)}>; rel="first"')
        prev_offset = max(0, offset - limit)
        links.append(f'<{_page_url(base_url, limit, prev_offset, params.q)}>; rel="prev"')
    if offset + limit < total:
        links.append(f'<{_page_url(base_url, limit, offset + limit, params.q)}>; rel="next"')
        last_offset = ((total - 1) // limit) * limit
        links.append(f'<{_page_url(base_url, limit, last_offset, params.q)}>; rel="last"')
    return ", ".join(links)


@dataclass
class Page:
    items: list
    total: int
    params: PaginationParams

    @property
    def limit(self):
        return self.params.limit

    @property
    def offset(self):
        return self.params.offset

    @property
    def has_more(self) -> bool:
        return self.params.offset + len(self.items) < self.total

    @property
    def current_page(self) -> int:
        return self.params.current_page

    @property
    def total_pages(self) -> int:
        return max(1, -(-self.total // self.params.limit))

    @property
    def pages(self) -> List[dict]:
        return [
            {"number": n, "offset": (n - 1) * self.params.limit, "current": n == self.current_page}
            for n in page_window(self.current_page, self.total_pages)
        ]

    @property
    def previous_offset(self):
        if self.params.offset <= 0:
            return None
        return max(0, self.params.offset - self.params.limit)

    @property
    def next_offset(self):
        return self.params.offset + self.params.limit if self.has_more else None

    def as_dict(self) -> dict:
        return {
            "total": self.total,
            "limit": self.params.limit,
            "offset": self.params.offset,
            "hasMore": self.has_more,
        }


def paginate(queryset, params: PaginationParams) -> Page:
    """Slice a queryset (or a plain list) for the given params."""
    total = len(queryset) if isinstance(queryset, list) else queryset.count()
    items = list(queryset[params.offset : params.offset + params.limit])
    return Page(items=items, total=total, params=params)
