"""
Greenhouse public job board API.

``https://boards-api.greenhouse.io/v1/boards/<board_token>/jobs?content=true``
needs no authentication. The source identifier is the board token.
"""

from jobs.importers.base import (
    FetchedJob,
    JobImporter,
    html_to_text,
    parse_timestamp,
)

API_BASE = "https://boards-api.greenhouse.io/v1/boards"


def detect_workplace_type(job: dict) -> str:
    location = ((job.get("location") or {}).get("name") or "").lower()
    if "remote" in location:
        return "hybrid" if "hybrid" in location else "remote"

    for meta in job.get("metadata") or []:
        value = meta.get("value")
        value = value.lower() if isinstance(value, str) else ""
        if "remote" in (meta.get("name") or "").lower() or "remote" in value:
            return "hybrid" if "hybrid" in value else "remote"

    if location and "anywhere" not in location:
        return "onsite"
    return ""


def convert_job(job: dict) -> FetchedJob:
    content = job.get("content") or ""
    return FetchedJob(
        external_id=str(job["id"]),
        title=job.get("title") or "Untitled",
        url=job.get("absolute_url") or "",
        location=(job.get("location") or {}).get("name") or "",
        department=", ".join(d["name"] for d in job.get("departments") or [] if d.get("name")),
        description_html=content,
        description_text=html_to_text(content),
        workplace_type=detect_workplace_type(job),
        posted_at=parse_timestamp(job.get("first_published")),
        updated_at=parse_timestamp(job.get("updated_at")),
    )


class GreenhouseImporter(JobImporter):
    source_type = "greenhouse"

    def fetch_jobs(self, source):
        token = source.source_identifier.strip()
        data = self.get_json(
            f"{API_BASE}/{token}/jobs?content=true",
            not_found=f'Board "{token}" not found. Check the board token is correct.',
        )
        return [convert_job(job) for job in data.get("jobs", [])]
