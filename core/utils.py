import hashlib
import re

_SPACE_RE = re.compile(r"[\s_]+")
_INVALID_RE = re.compile(r"[^a-z0-9-]")
_DASHES_RE = re.compile(r"-+")


def slugify_name(text: str) -> str:
    """
    Turn a display name into a URL slug.

    Lowercases, turns whitespace and underscores into hyphens, drops anything
    outside ``[a-z0-9-]`` and collapses/strips hyphens. ``"Acme Corp!"``
    becomes ``"acme-corp"``.
    """
    slug = (text or "").lower().strip()
    slug = _SPACE_RE.sub("-", slug)
    slug = _INVALID_RE.sub("", slug)
    slug = _DASHES_RE.sub("-", slug)
    return slug.strip("-")


def unique_slug(model_class, text: str, exclude_pk=None, field: str = "slug") -> str:
    """
    Slugify ``text`` and append ``-2``, ``-3``... until no row of
    ``model_class`` uses it. ``exclude_pk`` keeps an edited row's own slug
    out of the clash check.
    """
    base = slugify_name(text) or model_class._meta.model_name
    queryset = model_class._default_manager.all()
    if exclude_pk is not None:
        queryset = queryset.exclude(pk=exclude_pk)

    slug = base
    counter = 2
    while queryset.filter(**{field: slug}).exists():
        slug = f"{base}-{counter}"
        counter += 1
    return slug


def get_client_ip(request) -> str:
    """Extract client IP from request headers."""
    forwarded = request.META.get("HTTP_CF_CONNECTING_IP") or request.META.get(
        "HTTP_X_FORWARDED_FOR"
    )
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "")


def hash_ip(ip: str) -> str:
    """First 16 hex chars of the SHA-256 of an IP, for rate limiting."""
    return hashlib.sha256(ip.encode("utf-8")).hexdigest()[:16]


def truncate(text: str, length: int = 500) -> str:
    if not text or len(text) <= length:
        return text or ""
    return text[:length] + "..."
