import io
from datetime import datetime, timezone as dt_timezone
from unittest.mock import Mock, patch

from django.core.management import CommandError, call_command
from django.test import SimpleTestCase, TestCase

from accounts.models import User
from directory.models import Company
from jobs.importers import FetchedJob, JobImportError, ValidationResult, get_importer
from jobs.importers.base import html_to_text, parse_timestamp, workplace_from_location
from jobs.importers.greenhouse import GreenhouseImporter, convert_job, detect_workplace_type
from jobs.importers.lever import convert_posting
from jobs.models import Job, JobImportSource
from jobs.sync import SyncResult, sync_jobs


def fetched(external_id, title="Backend Developer", **kwargs):
    return FetchedJob(external_id=external_id, title=title, url=f"https://jobs.example/{external_id}", **kwargs)


class ImporterParsingTest(SimpleTestCase):
    def test_html_to_text(self):
        self.assertEqual(html_to_text("&lt;p&gt;Hello &amp;amp; welcome&lt;/p&gt;"), "Hello & welcome")
        self.assertEqual(html_to_text("<ul><li>One</li>\n<li>Two</li></ul>"), "One Two")
        self.assertEqual(html_to_text(""), "")

    def test_parse_timestamp(self):
        self.assertEqual(parse_timestamp(1700000000000), datetime(2023, 11, 14, 22, 13, 20, tzinfo=dt_timezone.utc))
        self.assertEqual(parse_timestamp("2024-01-02T03:04:05Z"), datetime(2024, 1, 2, 3, 4, 5, tzinfo=dt_timezone.utc))
        self.assertIsNone(parse_timestamp("not a date"))
        self.assertIsNone(parse_timestamp(None))

    def test_workplace_from_location(self):
        self.assertEqual(workplace_from_location("Remote - Canada"), "remote")
        self.assertEqual(workplace_from_location("Hybrid (Remote OK)"), "hybrid")
        self.assertEqual(workplace_from_location("St. John's"), "")

    def test_greenhouse_job(self):
        job = convert_job(
            {
                "id": 4012,
                "title": "Platform Engineer",
                "absolute_url": "https://boards.greenhouse.io/acme/jobs/4012",
                "location": {"name": "St. John's, NL"},
                "departments": [{"name": "Engineering"}, {"name": "Platform"}],
                "content": "&lt;p&gt;Build things&lt;/p&gt;",
                "first_published": "2024-03-01T12:00:00-03:30",
                "updated_at": "2024-03-02T12:00:00Z",
            }
        )
        self.assertEqual(job.external_id, "4012")
        self.assertEqual(job.department, "Engineering, Platform")
        self.assertEqual(job.description_text, "Build things")
        self.assertEqual(job.workplace_type, "onsite")
        self.assertEqual(job.posted_at.utcoffset().total_seconds(), -3.5 * 3600)

    def test_greenhouse_workplace_from_metadata(self):
        job = {"location": {"name": ""}, "metadata": [{"name": "Work type", "value": "Hybrid remote"}]}
        self.assertEqual(detect_workplace_type(job), "hybrid")
        self.assertEqual(detect_workplace_type({"location": {"name": "Remote"}}), "remote")
        self.assertEqual(detect_workplace_type({}), "")

    def test_lever_posting(self):
        job = convert_posting(
            {
                "id": "abc-123",
                "text": "Designer",
                "hostedUrl": "https://jobs.lever.co/acme/abc-123",
                "categories": {"allLocations": ["Halifax", "Remote"], "team": "Design"},
                "description": "<p>Intro</p>",
                "lists": [{"text": "You have", "content": "<li>Taste</li>"}],
                "workplaceType": "on-site",
                "createdAt": 1700000000000,
            }
        )
        self.assertEqual(job.location, "Halifax; Remote")
        self.assertEqual(job.department, "Design")
        self.assertEqual(job.workplace_type, "onsite")
        self.assertIn("<h3>You have</h3>", job.description_html)
        self.assertEqual(job.description_text, "Intro You have Taste")

    def test_unknown_importer(self):
        with self.assertRaises(ValueError):
            get_importer("workday")


class ImporterHttpTest(SimpleTestCase):
    @patch("jobs.importers.base.requests.get")
    def test_board_not_found(self, get):
        get.return_value = Mock(status_code=404, ok=False)
        source = JobImportSource(source_type="greenhouse", source_identifier="nope")
        result = GreenhouseImporter().validate_config(source)
        self.assertFalse(result.valid)
        self.assertIn('Board "nope" not found', result.error)

    @patch("jobs.importers.base.requests.get")
    def test_fetch_jobs(self, get):
        get.return_value = Mock(
            status_code=200,
            ok=True,
            json=Mock(return_value={"jobs": [{"id": 1, "title": "Dev", "absolute_url": "https://x.example/1"}]}),
        )
        source = JobImportSource(source_type="greenhouse", source_identifier=" acme ")
        jobs = GreenhouseImporter().fetch_jobs(source)
        self.assertEqual([j.title for j in jobs], ["Dev"])
        self.assertIn("/boards/acme/jobs?content=true", get.call_args.args[0])

    @patch("jobs.importers.base.requests.get")
    def test_server_error(self, get):
        get.return_value = Mock(status_code=503, ok=False, reason="Service Unavailable")
        source = JobImportSource(source_type="greenhouse", source_identifier="acme")
        with self.assertRaises(JobImportError):
            GreenhouseImporter().fetch_jobs(source)

    def test_blank_identifier(self):
        source = JobImportSource(source_type="lever", source_identifier="  ")
        self.assertFalse(get_importer("lever").validate_config(source).valid)


class SyncJobsTest(TestCase):
    def setUp(self):
        self.company = Company.objects.create(name="Acme")
        self.source = JobImportSource.objects.create(
            company=self.company, source_type="greenhouse", source_identifier="acme"
        )
        patcher = patch("jobs.sync.get_importer")
        self.importer = patcher.start().return_value
        self.addCleanup(patcher.stop)

    def sync(self, *jobs):
        self.importer.fetch_jobs.return_value = list(jobs)
        return sync_jobs(self.source)

    def test_first_sync_adds_jobs(self):
        result = self.sync(fetched("1"), fetched("2", title="Designer"))
        self.assertTrue(result.success)
        self.assertEqual((result.added, result.total_active), (2, 2))

        job = Job.objects.get(external_id="1")
        self.assertEqual(job.company, self.company)
        self.assertEqual(job.source_type, Job.SourceType.IMPORTED)
        self.assertEqual(job.slug, "backend-developer-acme")
        self.assertIsNotNone(job.first_seen_at)

        self.source.refresh_from_db()
        self.assertEqual(self.source.fetch_status, JobImportSource.FetchStatus.SUCCESS)
        self.assertIsNotNone(self.source.last_fetched_at)

    def test_missing_jobs_are_removed_then_reactivated(self):
        self.sync(fetched("1"), fetched("2"))

        result = self.sync(fetched("1", title="Senior Backend Developer"))
        self.assertEqual((result.updated, result.removed, result.total_active), (1, 1, 1))
        removed = Job.objects.get(external_id="2")
        self.assertEqual(removed.status, Job.Status.REMOVED)
        self.assertIsNotNone(removed.removed_at)
        self.assertEqual(Job.objects.get(external_id="1").title, "Senior Backend Developer")

        result = self.sync(fetched("1"), fetched("2"))
        self.assertEqual(result.reactivated, 1)
        removed.refresh_from_db()
        self.assertEqual(removed.status, Job.Status.ACTIVE)
        self.assertIsNone(removed.removed_at)

    def test_hidden_jobs_stay_hidden(self):
        self.sync(fetched("1"))
        Job.objects.filter(external_id="1").update(status=Job.Status.HIDDEN)

        result = self.sync(fetched("1", title="Renamed"))
        job = Job.objects.get(external_id="1")
        self.assertEqual(job.status, Job.Status.HIDDEN)
        self.assertEqual(job.title, "Backend Developer")
        self.assertEqual(result.total_active, 0)

        result = self.sync()
        self.assertEqual(result.removed, 0)
        self.assertEqual(Job.objects.get(external_id="1").status, Job.Status.HIDDEN)

    def test_fetch_failure_is_recorded(self):
        self.sync(fetched("1"))
        self.importer.fetch_jobs.side_effect = JobImportError("Board not found")

        result = sync_jobs(self.source)
        self.assertFalse(result.success)
        self.assertEqual(result.error, "Board not found")
        self.source.refresh_from_db()
        self.assertEqual(self.source.fetch_status, JobImportSource.FetchStatus.ERROR)
        self.assertEqual(self.source.fetch_error, "Board not found")
        self.assertEqual(Job.objects.get(external_id="1").status, Job.Status.ACTIVE)

    def test_manual_jobs_untouched(self):
        manual = Job.objects.create(title="Office Manager", company=self.company, url="https://acme.example/jobs")
        self.sync()
        manual.refresh_from_db()
        self.assertEqual(manual.status, Job.Status.ACTIVE)

    def test_command(self):
        self.importer.fetch_jobs.return_value = [fetched("1")]
        out = io.StringIO()
        call_command("sync_jobs", stdout=out)
        self.assertIn("+1", out.getvalue())

        with self.assertRaises(CommandError):
            call_command("sync_jobs", "--source", "999", stdout=io.StringIO())


class JobPagesTest(TestCase):
    def setUp(self):
        self.company = Company.objects.create(name="Acme")
        self.job = Job.objects.create(title="Backend Developer", company=self.company, url="https://acme.example/1")
        Job.objects.create(title="Old Role", company_name="Initech", url="https://initech.example/1", status=Job.Status.FILLED)

    def test_manual_job_defaults(self):
        self.assertEqual(self.job.slug, "backend-developer-acme")
        self.assertIsNotNone(self.job.posted_at)
        self.assertEqual(self.job.display_company, "Acme")

    def test_only_active_jobs_are_public(self):
        response = self.client.get("/jobs")
        self.assertEqual([j.title for j in response.context["page"].items], ["Backend Developer"])
        self.assertEqual(self.client.get("/jobs/old-role-initech").status_code, 404)

        data = self.client.get("/api/jobs").json()
        self.assertEqual([j["title"] for j in data["data"]], ["Backend Developer"])
        self.assertEqual(data["data"][0]["companySlug"], "acme")
        self.assertEqual(data["data"][0]["applyUrl"], "https://acme.example/1")


class ManageJobsTest(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(email="admin@example.com", password="pw", role=User.Role.ADMIN)
        self.client.force_login(self.admin)
        self.company = Company.objects.create(name="Acme")

    def test_job_needs_a_company(self):
        data = {"title": "Developer", "url": "https://example.com/apply", "status": "active"}
        response = self.client.post("/manage/jobs/new", data)
        self.assertEqual(response.context["error"], "Company is required")

        self.client.post("/manage/jobs/new", {**data, "company_name": "Initech"})
        self.assertEqual(Job.objects.get().slug, "developer-initech")

    @patch("core.manage_views.sync_jobs", return_value=SyncResult(success=True, added=3))
    @patch("jobs.forms.get_importer")
    def test_add_import_source_syncs(self, get_importer_mock, sync_mock):
        get_importer_mock.return_value.validate_config.return_value = ValidationResult(valid=True, job_count=3)
        response = self.client.post(
            "/manage/jobs/import",
            {"company": self.company.pk, "source_type": "greenhouse", "source_identifier": " acme "},
        )
        self.assertRedirects(response, "/manage/jobs/import", fetch_redirect_response=False)
        source = JobImportSource.objects.get()
        self.assertEqual(source.source_identifier, "acme")
        sync_mock.assert_called_once_with(source)

    @patch("jobs.forms.get_importer")
    def test_invalid_board_rejected(self, get_importer_mock):
        get_importer_mock.return_value.validate_config.return_value = ValidationResult(
            valid=False, error='Board "acme" not found'
        )
        self.client.post(
            "/manage/jobs/import",
            {"company": self.company.pk, "source_type": "greenhouse", "source_identifier": "acme"},
        )
        self.assertFalse(JobImportSource.objects.exists())

    def test_delete_source_removes_its_jobs(self):
        source = JobImportSource.objects.create(company=self.company, source_type="lever", source_identifier="acme")
        Job.objects.create(
            title="Dev", company=self.company, url="https://x.example", source=source,
            source_type=Job.SourceType.IMPORTED, external_id="1",
        )
        self.client.post(f"/manage/jobs/import/{source.pk}/delete")
        self.assertFalse(JobImportSource.objects.exists())
        self.assertFalse(Job.objects.exists())
