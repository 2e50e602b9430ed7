"""
Job import sync.

Fetch a source's postings, then reconcile them with the jobs already stored
for that source:

* unseen postings are inserted as active,
* known postings get their fields and ``last_seen_at`` refreshed,
* removed/filled/expired postings that reappear are reactivated,
* hidden postings stay hidden and only get ``last_seen_at`` bumped,
* active postings missing from the feed are marked removed.
"""

from dataclasses import asdict, dataclass

from django.db import transaction
from django.utils import timezone
from loguru import logger

from harbour_core.posthog_config import capture_event, capture_exception
from jobs.importers import JobImportError, get_importer
from jobs.importers.base import FetchedJob
from jobs.models import Job, JobImportSource


@dataclass
class SyncResult:
    success: bool
    added: int = 0
    updated: int = 0
    removed: int = 0
    reactivated: int = 0
    total_active: int = 0
    error: str = ""

    def as_dict(self):
        data = asdict(self)
        data["totalActive"] = data.pop("total_active")
        return data


def _job_fields(fetched: FetchedJob) -> dict:
    return {
        "title": fetched.title[:300],
        "location": fetched.location[:300],
        "department": fetched.department[:200],
        "description": fetched.description_text,
        "description_html": fetched.description_html,
        "url": fetched.url,
        "workplace_type": fetched.workplace_type,
        "posted_at": fetched.posted_at,
        "external_updated_at": fetched.updated_at,
    }


def _apply(job: Job, fields: dict):
    for name, value in fields.items():
        setattr(job, name, value)


def _reconcile(source: JobImportSource, fetched_jobs) -> SyncResult:
    now = timezone.now()
    result = SyncResult(success=True)
    existing = {job.external_id: job for job in source.jobs.all()}
    fetched_ids = set()

    for fetched in fetched_jobs:
        fetched_ids.add(fetched.external_id)
        job = existing.get(fetched.external_id)

        if job is None:
            Job.objects.create(
                company=source.company,
                source=source,
                source_type=Job.SourceType.IMPORTED,
                external_id=fetched.external_id,
                status=Job.Status.ACTIVE,
                first_seen_at=now,
                last_seen_at=now,
                **_job_fields(fetched),
            )
            result.added += 1
        elif job.status == Job.Status.HIDDEN:
            job.last_seen_at = now
            job.save(update_fields=["last_seen_at", "updated_at"])
            result.updated += 1
        elif job.status != Job.Status.ACTIVE:
            _apply(job, _job_fields(fetched))
            job.status = Job.Status.ACTIVE
            job.removed_at = None
            job.last_seen_at = now
            job.save()
            result.reactivated += 1
        else:
            _apply(job, _job_fields(fetched))
            job.last_seen_at = now
            job.save()
            result.updated += 1

    for external_id, job in existing.items():
        if job.status == Job.Status.ACTIVE and external_id and external_id not in fetched_ids:
            job.status = Job.Status.REMOVED
            job.removed_at = now
            job.save(update_fields=["status", "removed_at", "updated_at"])
            result.removed += 1

    result.total_active = source.jobs.filter(status=Job.Status.ACTIVE).count()
    return result


def _record_failure(source: JobImportSource, error: str) -> SyncResult:
    source.fetch_status = JobImportSource.FetchStatus.ERROR
    source.fetch_error = error
    source.save(update_fields=["fetch_status", "fetch_error", "updated_at"])
    return SyncResult(success=False, error=error)


def sync_jobs(source: JobImportSource) -> SyncResult:
    """
    Sync one import source.

    Fetch and reconcile failures do not propagate: they are stored on the
    source (``fetch_status="error"``) and returned as an unsuccessful result.
    """
    source.fetch_status = JobImportSource.FetchStatus.PENDING
    source.fetch_error = ""
    source.save(update_fields=["fetch_status", "fetch_error", "updated_at"])

    try:
        importer = get_importer(source.source_type)
        fetched_jobs = importer.fetch_jobs(source)
        with transaction.atomic():
            result = _reconcile(source, fetched_jobs)
    except (JobImportError, ValueError) as e:
        logger.warning("Job sync failed", source=source.pk, error=str(e))
        return _record_failure(source, str(e))
    except Exception as e:
        logger.opt(exception=e).error("Unexpected job sync error", source=source.pk)
        capture_exception(e, properties={"action": "sync_jobs", "source_id": source.pk})
        return _record_failure(source, f"Unexpected error: {e}")

    source.fetch_status = JobImportSource.FetchStatus.SUCCESS
    source.last_fetched_at = timezone.now()
    source.save(update_fields=["fetch_status", "last_fetched_at", "updated_at"])

    logger.info(
        "Job sync complete",
        source=source.pk,
        source_type=source.source_type,
        added=result.added,
        updated=result.updated,
        removed=result.removed,
        reactivated=result.reactivated,
        total_active=result.total_active,
    )
    capture_event("job_sync_completed", properties={"source_id": source.pk, **result.as_dict()})
    return result
