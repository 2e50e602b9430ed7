import html
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

import requests
from bs4 import BeautifulSoup
from dateutil import parser as date_parser
from django.conf import settings

USER_AGENT = "Harbour job importer"


class JobImportError(Exception):
    """The remote board could not be fetched or understood."""


@dataclass
class FetchedJob:
    external_id: str
    title: str
    url: str
    location: str = ""
    department: str = ""
    description_html: str = ""
    description_text: str = ""
    workplace_type: str = ""
    posted_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class ValidationResult:
    valid: bool
    error: str = ""
    job_count: int = 0


def html_to_text(markup: str) -> str:
    """Plain text from (possibly entity-escaped) job description HTML."""
    if not markup:
        return ""
    soup = BeautifulSoup(html.unescape(markup), "html.parser")
    return re.sub(r"\s+", " ", soup.get_text(" ")).strip()


def parse_timestamp(value) -> Optional[datetime]:
    """ISO strings or epoch milliseconds to aware datetimes."""
    if value in (None, ""):
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    try:
        parsed = date_parser.isoparse(value)
    except (ValueError, TypeError):
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def workplace_from_location(location: str) -> str:
    lowered = (location or "").lower()
    if "hybrid" in lowered:
        return "hybrid"
    if "remote" in lowered:
        return "remote"
    return ""


class JobImporter:
    """
    Base class for ATS importers.

    Subclasses set ``source_type`` and implement ``fetch_jobs``; the default
    ``validate_config`` simply tries a fetch.
    """

    source_type = ""

    def fetch_jobs(self, source) -> List[FetchedJob]:
        raise NotImplementedError

    def validate_config(self, source) -> ValidationResult:
        if not (source.source_identifier or "").strip():
            return ValidationResult(valid=False, error="Source identifier is required")
        try:
            jobs = self.fetch_jobs(source)
        except JobImportError as e:
            return ValidationResult(valid=False, error=str(e))
        return ValidationResult(valid=True, job_count=len(jobs))

    def get_json(self, url: str, not_found: str):
        try:
            response = requests.get(
                url,
                headers={"Accept": "application/json", "User-Agent": USER_AGENT},
                timeout=settings.JOB_IMPORT_TIMEOUT,
            )
        except requests.RequestException as e:
            raise JobImportError(f"Could not reach {self.source_type}: {e}") from e

        if response.status_code == 404:
            raise JobImportError(not_found)
        if not response.ok:
            raise JobImportError(
                f"{self.source_type.title()} API error: {response.status_code} {response.reason}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise JobImportError(f"{self.source_type.title()} returned invalid JSON") from e
