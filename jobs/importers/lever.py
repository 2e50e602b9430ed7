"""
Lever public postings API.

``https://api.lever.co/v0/postings/<company>?mode=json``. The source
identifier is the company slug from ``jobs.lever.co/<company>``.
"""

from urllib.parse import quote

from jobs.importers.base import (
    FetchedJob,
    JobImporter,
    html_to_text,
    parse_timestamp,
    workplace_from_location,
)

API_BASE = "https://api.lever.co/v0/postings"

WORKPLACE_TYPES = {"remote": "remote", "on-site": "onsite", "hybrid": "hybrid"}


def build_description_html(posting: dict) -> str:
    parts = []
    if posting.get("description"):
        parts.append(posting["description"])
    for section in posting.get("lists") or []:
        parts.append(f"<h3>{section.get('text', '')}</h3>")
        parts.append(section.get("content", ""))
    if posting.get("additional"):
        parts.append(posting["additional"])
    return "\n".join(parts)


def format_location(categories: dict) -> str:
    if categories.get("allLocations"):
        return "; ".join(categories["allLocations"])
    return categories.get("location") or ""


def convert_posting(posting: dict) -> FetchedJob:
    categories = posting.get("categories") or {}
    location = format_location(categories)
    description_html = build_description_html(posting)
    workplace = WORKPLACE_TYPES.get(posting.get("workplaceType") or "", "")
    return FetchedJob(
        external_id=posting["id"],
        title=posting.get("text") or "Untitled",
        url=posting.get("hostedUrl") or posting.get("applyUrl") or "",
        location=location,
        department=categories.get("department") or categories.get("team") or "",
        description_html=description_html,
        description_text=posting.get("descriptionPlain") or html_to_text(description_html),
        workplace_type=workplace or workplace_from_location(location),
        posted_at=parse_timestamp(posting.get("createdAt")),
        updated_at=parse_timestamp(posting.get("updatedAt")),
    )


class LeverImporter(JobImporter):
    source_type = "lever"

    def fetch_jobs(self, source):
        company = source.source_identifier.strip()
        data = self.get_json(
            f"{API_BASE}/{quote(company)}?mode=json",
            not_found=f'Lever company "{company}" not found. Check the slug is correct.',
        )
        return [convert_posting(posting) for posting in data]
