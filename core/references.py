"""
``[[Reference]]`` resolution and backlinks.

Any markdown text field may mention another entity by name with
``[[Name]]``, or with a relation as ``[[{CEO} at {Acme}]]``. Rendering
rewrites each token into a markdown link when the name resolves and into
``**Name**`` when it does not. Every other byte of the text is left alone.

Saving an entity stores its resolved references in ``core.Reference``.
That table is what entity pages read their backlinks from.
``compute_backlinks`` does the same work by scanning every entity, and
``rebuild_references`` uses it to rebuild the table.
"""

import re
from dataclasses import dataclass
from functools import reduce
from operator import or_
from typing import Dict, Iterable, List, Optional

from django.db import transaction
from django.db.models import Q
from loguru import logger

from core.models import Reference
from core.registry import CONTENT_KINDS, ContentKind, content_url, kind_for_model

REFERENCE_RE = re.compile(r"\[\[([^\]]+)\]\]")
RELATION_RE = re.compile(r"^\{([^}]+)\}\s+(at|of)\s+\{([^}]+)\}$", re.IGNORECASE)


def normalize_key(text: str) -> str:
    return text.strip().lower()


@dataclass(frozen=True)
class ParsedReference:
    text: str
    target_name: str
    relation: Optional[str] = None
    preposition: Optional[str] = None

    @property
    def key(self) -> str:
        return normalize_key(self.target_name)


@dataclass(frozen=True)
class ResolvedTarget:
    content_type: str
    id: int
    slug: str
    name: str

    @property
    def url(self) -> str:
        return content_url(self.content_type, self.slug)


@dataclass(frozen=True)
class Backlink:
    content_type: str
    id: int
    slug: str
    name: str
    relation: str = ""

    @property
    def url(self) -> str:
        return content_url(self.content_type, self.slug)

    @property
    def type_label(self) -> str:
        return CONTENT_KINDS[self.content_type].label


def parse_reference(inner: str) -> ParsedReference:
    """Parse the text between ``[[`` and ``]]``."""
    text = inner.strip()
    match = RELATION_RE.match(text)
    if match:
        return ParsedReference(
            text=text,
            target_name=match.group(3).strip(),
            relation=match.group(1).strip(),
            preposition=match.group(2).lower(),
        )
    return ParsedReference(text=text, target_name=text)


def extract_references(text: str) -> List[ParsedReference]:
    if not text:
        return []
    return [parse_reference(m.group(1)) for m in REFERENCE_RE.finditer(text)]


def _escape_label(name: str) -> str:
    return name.replace("[", "\\[").replace("]", "\\]")


def render_references(text: str, resolution_map: Dict[str, ResolvedTarget]) -> str:
    """
    Rewrite every ``[[Name]]`` in ``text`` using ``resolution_map``.

    Args:
        text: Markdown source
        resolution_map: Lowercased, trimmed name -> resolved target

    Returns:
        The text with resolved tokens turned into ``[Display Name](url)`` and
        unresolved ones into ``**Name**``. Nothing outside the tokens changes.
    """
    if not text:
        return text or ""

    def replace(match):
        ref = parse_reference(match.group(1))
        target = resolution_map.get(ref.key)
        if target is not None:
            subject = f"[{_escape_label(target.name)}]({target.url})"
        else:
            subject = f"**{ref.target_name}**"
        if ref.relation:
            return f"{ref.relation} {ref.preposition} {subject}"
        return subject

    return REFERENCE_RE.sub(replace, text)


def build_resolution_map(
    names: Optional[Iterable[str]] = None, public: bool = True
) -> Dict[str, ResolvedTarget]:
    """
    Look up entities by name (case-insensitive) or slug.

    Args:
        names: Only resolve these names; ``None`` loads every entity
        public: Skip hidden entities, unpublished news and inactive jobs

    Returns:
        Mapping of lowercased name to target. Names matching several entities
        are ambiguous and left out. A name match beats a slug match.
    """
    keys = None
    if names is not None:
        keys = {normalize_key(n) for n in names if n and n.strip()}
        if not keys:
            return {}

    by_name: Dict[str, List[ResolvedTarget]] = {}
    by_slug: Dict[str, List[ResolvedTarget]] = {}

    for kind in CONTENT_KINDS.values():
        queryset = kind.public_queryset() if public else kind.model._default_manager.all()
        if keys is not None:
            conditions = [Q(**{f"{kind.name_field}__iexact": k}) | Q(slug=k) for k in keys]
            queryset = queryset.filter(reduce(or_, conditions))

        for row in queryset.values("id", "slug", kind.name_field):
            target = ResolvedTarget(kind.key, row["id"], row["slug"], row[kind.name_field])
            by_name.setdefault(normalize_key(target.name), []).append(target)
            by_slug.setdefault(target.slug, []).append(target)

    resolution = {}
    for key in set(by_name) | set(by_slug):
        if keys is not None and key not in keys:
            continue
        candidates = by_name.get(key) or by_slug.get(key) or []
        if len(candidates) == 1:
            resolution[key] = candidates[0]
        elif len(candidates) > 1:
            logger.debug("Ambiguous reference", key=key, matches=len(candidates))
    return resolution


def resolve_text(text: str) -> str:
    """Render references in ``text`` against the live database."""
    refs = extract_references(text)
    if not refs:
        return text or ""
    return render_references(text, build_resolution_map(r.target_name for r in refs))


def split_organizers(organizer: str) -> List[str]:
    return [name.strip() for name in (organizer or "").split(",") if name.strip()]


def collect_references(kind: ContentKind, instance):
    """Yield ``(field, ParsedReference)`` for every reference held by ``instance``."""
    for field in kind.text_fields:
        for ref in extract_references(getattr(instance, field, "")):
            yield field, ref
    if kind.key == "event":
        for name in split_organizers(instance.organizer):
            yield "organizer", ParsedReference(text=name, target_name=name, relation="Organizer")


def sync_references(instance, kind: ContentKind = None, resolution_map=None) -> int:
    """
    Replace the stored references of ``instance`` with the ones in its text.

    Returns:
        Number of reference rows written
    """
    kind = kind or kind_for_model(type(instance))
    found = list(collect_references(kind, instance))
    if resolution_map is None:
        resolution_map = build_resolution_map((ref.target_name for _, ref in found), public=False)

    rows = []
    seen = set()
    for field, ref in found:
        target = resolution_map.get(ref.key)
        if target is None:
            continue
        if target.content_type == kind.key and target.id == instance.pk:
            continue
        identity = (field, target.content_type, target.id)
        if identity in seen:
            continue
        seen.add(identity)
        rows.append(
            Reference(
                source_type=kind.key,
                source_id=instance.pk,
                target_type=target.content_type,
                target_id=target.id,
                reference_text=ref.text[:500],
                relation=ref.relation or "",
                field=field,
            )
        )

    with transaction.atomic():
        Reference.objects.filter(source_type=kind.key, source_id=instance.pk).delete()
        Reference.objects.bulk_create(rows)
    return len(rows)


def resync_mentions(instance, kind: ContentKind = None) -> int:
    """
    Re-sync entities whose text mentions ``instance`` by name, plus those
    whose stored references already point at it.

    Text written before the entity existed only gains its stored reference
    once the mentioning entity is synced again. After a rename the old
    mentions no longer resolve, so their rows have to go.
    """
    kind = kind or kind_for_model(type(instance))
    name = (kind.display_name(instance) or "").strip()

    pending: Dict[str, set] = {}
    for source_type, source_id in Reference.objects.filter(
        target_type=kind.key, target_id=instance.pk
    ).values_list("source_type", "source_id"):
        pending.setdefault(source_type, set()).add(source_id)

    resynced = 0
    for source_kind in CONTENT_KINDS.values():
        conditions = [Q(pk__in=pending.get(source_kind.key, ()))]
        if name:
            for field in source_kind.text_fields:
                conditions.append(Q(**{f"{field}__icontains": f"[[{name}"}))
                conditions.append(Q(**{f"{field}__icontains": f"{{{name}}}"}))
            if source_kind.key == "event":
                conditions.append(Q(organizer__icontains=name))
        queryset = source_kind.model._default_manager.filter(reduce(or_, conditions))
        if source_kind.key == kind.key:
            queryset = queryset.exclude(pk=instance.pk)
        for source in queryset:
            sync_references(source, source_kind)
            resynced += 1
    return resynced


def delete_references(instance, kind: ContentKind = None):
    kind = kind or kind_for_model(type(instance))
    Reference.objects.filter(
        Q(source_type=kind.key, source_id=instance.pk)
        | Q(target_type=kind.key, target_id=instance.pk)
    ).delete()


def _load_backlinks(pairs) -> List[Backlink]:
    """Turn ``(source_type, source_id, relation)`` triples into visible backlinks."""
    wanted: Dict[str, Dict[int, str]] = {}
    for source_type, source_id, relation in pairs:
        wanted.setdefault(source_type, {}).setdefault(source_id, relation)

    backlinks = []
    for source_type, relations in wanted.items():
        kind = CONTENT_KINDS[source_type]
        rows = kind.public_queryset().filter(pk__in=relations.keys())
        for row in rows.values("id", "slug", kind.name_field):
            backlinks.append(
                Backlink(
                    content_type=source_type,
                    id=row["id"],
                    slug=row["slug"],
                    name=row[kind.name_field],
                    relation=relations[row["id"]],
                )
            )
    backlinks.sort(key=lambda b: (b.type_label, b.name.lower()))
    return backlinks


def get_backlinks(instance, kind: ContentKind = None) -> List[Backlink]:
    """Entities whose stored references point at ``instance``."""
    kind = kind or kind_for_model(type(instance))
    pairs = Reference.objects.filter(
        target_type=kind.key, target_id=instance.pk
    ).values_list("source_type", "source_id", "relation")
    return _load_backlinks(pairs)


def compute_backlinks(instance, kind: ContentKind = None, resolution_map=None) -> List[Backlink]:
    """
    Find backlinks by scanning the text of every other entity.

    This ignores the ``Reference`` table entirely, so it is the ground truth
    the stored index is rebuilt from.
    """
    kind = kind or kind_for_model(type(instance))
    if resolution_map is None:
        resolution_map = build_resolution_map(public=False)

    pairs = []
    for source_kind in CONTENT_KINDS.values():
        for source in source_kind.model._default_manager.all():
            if source_kind.key == kind.key and source.pk == instance.pk:
                continue
            for _field, ref in collect_references(source_kind, source):
                target = resolution_map.get(ref.key)
                if target and target.content_type == kind.key and target.id == instance.pk:
                    pairs.append((source_kind.key, source.pk, ref.relation or ""))
                    break
    return _load_backlinks(pairs)


def rebuild_references() -> int:
    """Re-sync every entity from scratch. Returns the number of rows written."""
    resolution_map = build_resolution_map(public=False)
    written = 0
    with transaction.atomic():
        Reference.objects.all().delete()
        for kind in CONTENT_KINDS.values():
            for instance in kind.model._default_manager.all():
                written += sync_references(instance, kind, resolution_map)
    logger.info("Rebuilt reference index", references=written)
    return written


def organizer_links(organizer: str) -> List[dict]:
    """Split an event organizer string into names with optional entity URLs."""
    names = split_organizers(organizer)
    resolution = build_resolution_map(names) if names else {}
    links = []
    for name in names:
        target = resolution.get(normalize_key(name))
        links.append({"name": target.name if target else name, "url": target.url if target else None})
    return links
