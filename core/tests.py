import base64
import io
import shutil
import tempfile
from datetime import datetime
from unittest.mock import Mock, patch

from django.conf import settings
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase, override_settings
from PIL import Image

from accounts.models import User
from core.captcha import verify_turnstile
from core.images import ICON, CropArea, ImageUploadError, decode_data_url, process_image
from core.markdown_export import format_frontmatter, split_frontmatter
from core.models import Comment, Reference, SiteConfig
from core.pagination import (
    PaginationParams,
    build_link_header,
    page_window,
    paginate,
    parse_pagination_params,
)
from core.references import (
    ResolvedTarget,
    build_resolution_map,
    compute_backlinks,
    extract_references,
    get_backlinks,
    render_references,
    resolve_text,
)
from core.utils import hash_ip, slugify_name, truncate, unique_slug
from directory.models import Company, Person, Project


def png_data_url(size=(64, 32), color=(200, 30, 30)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode()


class SlugTest(TestCase):
    def test_slugify_name(self):
        self.assertEqual(slugify_name("Acme Corp!"), "acme-corp")
        self.assertEqual(slugify_name("  St. John's  Tech_Meetup "), "st-johns-tech-meetup")
        self.assertEqual(slugify_name("--C++ -- Users--"), "c-users")

    def test_unique_slug_appends_counter(self):
        Company.objects.create(name="Acme")
        Company.objects.create(name="acme!")
        self.assertEqual(Company.objects.get(name="acme!").slug, "acme-2")
        self.assertEqual(unique_slug(Company, "Acme"), "acme-3")

    def test_unique_slug_ignores_own_row(self):
        company = Company.objects.create(name="Acme")
        self.assertEqual(unique_slug(Company, "Acme", exclude_pk=company.pk), "acme")

    def test_empty_name_falls_back_to_model_name(self):
        self.assertEqual(unique_slug(Company, "!!!"), "company")


class UtilsTest(SimpleTestCase):
    def test_hash_ip_is_short_and_stable(self):
        self.assertEqual(len(hash_ip("10.0.0.1")), 16)
        self.assertEqual(hash_ip("10.0.0.1"), hash_ip("10.0.0.1"))
        self.assertNotEqual(hash_ip("10.0.0.1"), hash_ip("10.0.0.2"))

    def test_truncate(self):
        self.assertEqual(truncate("short", 10), "short")
        self.assertEqual(truncate("a" * 12, 10), "a" * 10 + "...")
        self.assertEqual(truncate(None), "")


class PaginationTest(SimpleTestCase):
    def test_parse_clamps_values(self):
        params = parse_pagination_params({"limit": "500", "offset": "-5", "q": "  rust "})
        self.assertEqual(params.limit, 200)
        self.assertEqual(params.offset, 0)
        self.assertEqual(params.q, "rust")

    def test_parse_bad_input_uses_defaults(self):
        params = parse_pagination_params({"limit": "abc", "offset": "x"})
        self.assertEqual((params.limit, params.offset, params.q), (50, 0, ""))
        self.assertEqual(parse_pagination_params({"limit": "0"}).limit, 50)

    def test_page_window(self):
        self.assertEqual(page_window(1, 10), [1, 2, 3, 4, 5])
        self.assertEqual(page_window(5, 10), [3, 4, 5, 6, 7])
        self.assertEqual(page_window(10, 10), [6, 7, 8, 9, 10])
        self.assertEqual(page_window(2, 3), [1, 2, 3])
        self.assertEqual(page_window(1, 0), [])

    def test_paginate_list(self):
        page = paginate(list(range(120)), PaginationParams(limit=50, offset=100))
        self.assertEqual(page.items, list(range(100, 120)))
        self.assertEqual(page.total, 120)
        self.assertFalse(page.has_more)
        self.assertEqual(page.total_pages, 3)
        self.assertEqual(page.current_page, 3)
        self.assertEqual(page.previous_offset, 50)
        self.assertIsNone(page.next_offset)
        self.assertEqual(page.as_dict(), {"total": 120, "limit": 50, "offset": 100, "hasMore": False})

    def test_link_header_first_page(self):
        header = build_link_header("http://x/api/companies", PaginationParams(limit=50), 120)
        self.assertIn('<http://x/api/companies?limit=50&offset=50>; rel="next"', header)
        self.assertIn('<http://x/api/companies?limit=50&offset=100>; rel="last"', header)
        self.assertNotIn('rel="prev"', header)

    def test_link_header_middle_page_keeps_query(self):
        header = build_link_header("http://x/api/jobs", PaginationParams(limit=10, offset=10, q="go"), 30)
        self.assertIn('<http://x/api/jobs?limit=10&offset=0&q=go>; rel="first"', header)
        self.assertIn('<http://x/api/jobs?limit=10&offset=0&q=go>; rel="prev"', header)
        self.assertIn('<http://x/api/jobs?limit=10&offset=20&q=go>; rel="next"', header)

    def test_link_header_single_page_is_empty(self):
        self.assertEqual(build_link_header("http://x/api/news", PaginationParams(), 3), "")


class ReferenceRenderingTest(SimpleTestCase):
    def setUp(self):
        self.acme = ResolvedTarget("company", 1, "acme", "Acme")
        self.resolution = {"acme": self.acme}

    def test_resolved_reference_becomes_link(self):
        self.assertEqual(
            render_references("Built at [[acme]].", self.resolution),
            "Built at [Acme](/directory/companies/acme).",
        )

    def test_unresolved_reference_becomes_bold(self):
        self.assertEqual(render_references("See [[Nobody]]", self.resolution), "See **Nobody**")

    def test_relation_syntax(self):
        self.assertEqual(
            render_references("She is [[{CEO} at {Acme}]]", self.resolution),
            "She is CEO at [Acme](/directory/companies/acme)",
        )
        self.assertEqual(
            render_references("[[{Founder} of {Initech}]]", self.resolution),
            "Founder of **Initech**",
        )

    def test_text_outside_tokens_is_untouched(self):
        text = "# Title\n\n*[x]* [[Acme]] `code [[` end"
        rendered = render_references(text, self.resolution)
        self.assertTrue(rendered.startswith("# Title\n\n*[x]* [Acme]("))
        self.assertTrue(rendered.endswith(" `code [[` end"))

    def test_extract_references(self):
        refs = extract_references("[[Acme]] and [[{CTO} at {Initech}]]")
        self.assertEqual([r.target_name for r in refs], ["Acme", "Initech"])
        self.assertEqual(refs[1].relation, "CTO")
        self.assertEqual(refs[1].preposition, "at")


class ReferenceIndexTest(TestCase):
    def setUp(self):
        self.acme = Company.objects.create(name="Acme", description="A software shop")

    def test_backlink_with_relation(self):
        jane = Person.objects.create(name="Jane Doe", bio="[[{CEO} at {Acme}]] since 2019")
        backlinks = get_backlinks(self.acme)
        self.assertEqual(len(backlinks), 1)
        self.assertEqual(backlinks[0].id, jane.pk)
        self.assertEqual(backlinks[0].relation, "CEO")
        self.assertEqual(backlinks[0].url, "/directory/people/jane-doe")

    def test_mention_before_target_exists(self):
        Person.objects.create(name="Sam", bio="Works at [[Globex]]")
        globex = Company.objects.create(name="Globex")
        self.assertEqual([b.name for b in get_backlinks(globex)], ["Sam"])

    def test_edit_removes_stale_reference(self):
        person = Person.objects.create(name="Sam", bio="Works at [[Acme]]")
        self.assertEqual(len(get_backlinks(self.acme)), 1)
        person.bio = "Freelancer"
        person.save()
        self.assertEqual(get_backlinks(self.acme), [])

    def test_rename_drops_references_to_old_name(self):
        Person.objects.create(name="Kim", bio="Works at [[Acme]]")
        self.acme.name = "Acme Labs"
        self.acme.slug = "acme-labs"
        self.acme.save()

        self.assertEqual(resolve_text("Works at [[Acme]]"), "Works at **Acme**")
        self.assertEqual(get_backlinks(self.acme), [])
        self.assertEqual(compute_backlinks(self.acme), [])

    def test_rename_picks_up_mentions_of_new_name(self):
        Person.objects.create(name="Kim", bio="Works at [[Acme Labs]]")
        self.acme.name = "Acme Labs"
        self.acme.save()
        self.assertEqual([b.name for b in get_backlinks(self.acme)], ["Kim"])

    def test_delete_drops_references(self):
        person = Person.objects.create(name="Sam", bio="Works at [[Acme]]")
        person.delete()
        self.assertFalse(Reference.objects.exists())

    def test_ambiguous_name_is_not_resolved(self):
        Company.objects.create(name="Nova")
        Project.objects.create(name="Nova")
        self.assertNotIn("nova", build_resolution_map(["Nova"]))
        self.assertIn("acme", build_resolution_map(["ACME "]))

    def test_hidden_entities_only_resolve_privately(self):
        Company.objects.create(name="Stealth", visible=False)
        self.assertNotIn("stealth", build_resolution_map(["Stealth"]))
        self.assertIn("stealth", build_resolution_map(["Stealth"], public=False))

    def test_hidden_source_is_not_a_backlink(self):
        Person.objects.create(name="Ghost", bio="[[Acme]]", visible=False)
        self.assertEqual(get_backlinks(self.acme), [])

    def test_compute_backlinks_matches_index(self):
        Person.objects.create(name="Jane", bio="[[{CTO} at {Acme}]]")
        Project.objects.create(name="Rocket", description="Sponsored by [[Acme]]")
        stored = [(b.content_type, b.id, b.relation) for b in get_backlinks(self.acme)]
        scanned = [(b.content_type, b.id, b.relation) for b in compute_backlinks(self.acme)]
        self.assertEqual(sorted(stored), sorted(scanned))

    def test_rebuild_references_command(self):
        Person.objects.create(name="Jane", bio="[[Acme]]")
        Reference.objects.all().delete()
        call_command("rebuild_references", stdout=io.StringIO())
        self.assertEqual(Reference.objects.filter(target_type="company", target_id=self.acme.pk).count(), 1)


class SiteConfigTest(TestCase):
    def test_sections_visible_by_default(self):
        self.assertTrue(SiteConfig.is_section_visible("companies"))

    def test_hidden_section_returns_404(self):
        Company.objects.create(name="Acme")
        SiteConfig.set_section_visible("companies", False)
        self.assertFalse(SiteConfig.is_section_visible("companies"))
        self.assertEqual(self.client.get("/directory/companies").status_code, 404)
        self.assertEqual(self.client.get("/directory/companies/acme").status_code, 404)
        self.assertEqual(self.client.get("/directory/companies/acme.md").status_code, 404)

        SiteConfig.set_section_visible("companies", True)
        self.assertEqual(self.client.get("/directory/companies/acme").status_code, 200)


class PublicPagesTest(TestCase):
    def setUp(self):
        self.acme = Company.objects.create(name="Acme", description="Home of [[Jane]]")
        Person.objects.create(name="Jane", bio="[[{CEO} at {Acme}]]")

    def test_home(self):
        self.assertEqual(self.client.get("/").status_code, 200)

    def test_list_and_search(self):
        Company.objects.create(name="Initech")
        response = self.client.get("/directory/companies", {"q": "acme"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual([c.name for c in response.context["page"].items], ["Acme"])

    def test_detail_shows_backlinks_and_links(self):
        response = self.client.get("/directory/companies/acme")
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'href="/directory/people/jane"')
        self.assertEqual([b.name for b in response.context["backlinks"]], ["Jane"])

    def test_hidden_entity_is_404(self):
        Company.objects.create(name="Stealth", visible=False)
        self.assertEqual(self.client.get("/directory/companies/stealth").status_code, 404)

    def test_markdown_detail(self):
        response = self.client.get("/directory/companies/acme.md")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "text/markdown; charset=utf-8")
        meta, body = split_frontmatter(response.content.decode())
        self.assertEqual(meta["type"], "company")
        self.assertEqual(meta["name"], "Acme")
        self.assertEqual(meta["url"], f"{settings.SITE_URL}/directory/companies/acme")
        self.assertIn("# Acme", body)
        self.assertIn(f"[Jane]({settings.SITE_URL}/directory/people/jane.md)", body)
        self.assertIn("## Referenced by", body)

    def test_markdown_keeps_non_entity_links(self):
        Company.objects.create(
            name="Initech",
            description="![logo](/images/cover-1.webp) see [jobs](/jobs?q=go) and [Acme](/directory/companies/acme)",
        )
        _meta, body = split_frontmatter(self.client.get("/directory/companies/initech.md").content.decode())
        self.assertIn(f"![logo]({settings.SITE_URL}/images/cover-1.webp)", body)
        self.assertIn(f"[jobs]({settings.SITE_URL}/jobs?q=go)", body)
        self.assertIn(f"[Acme]({settings.SITE_URL}/directory/companies/acme.md)", body)
        self.assertNotIn(".webp.md", body)

    def test_markdown_list(self):
        response = self.client.get("/directory/companies.md", {"limit": "1"})
        meta, body = split_frontmatter(response.content.decode())
        self.assertEqual(meta["total"], 1)
        self.assertEqual(meta["limit"], 1)
        self.assertIn("- [Acme]", body)


class FrontmatterTest(SimpleTestCase):
    def test_empty_values_are_skipped(self):
        text = format_frontmatter({"name": "Acme", "website": "", "tags": [], "founded": None})
        self.assertEqual(text, "---\nname: Acme\n---\n")

    def test_split_without_frontmatter(self):
        self.assertEqual(split_frontmatter("# Title"), ({}, "# Title"))


@patch("core.views.verify_turnstile", return_value=True)
class CommentApiTest(TestCase):
    def setUp(self):
        self.acme = Company.objects.create(name="Acme")
        self.payload = {"content_type": "company", "content_id": self.acme.pk, "content": "Great team"}

    def post(self, data):
        return self.client.post("/api/comments", data, content_type="application/json")

    def test_create_comment(self, _verify):
        response = self.post({**self.payload, "author_name": " Kim "})
        self.assertEqual(response.status_code, 201)
        comment = Comment.objects.get()
        self.assertEqual(response.json(), {"ok": True, "data": {"id": comment.pk}})
        self.assertEqual(comment.author_name, "Kim")
        self.assertEqual(comment.ip_hash, hash_ip("127.0.0.1"))

    def test_empty_content_rejected(self, _verify):
        response = self.post({**self.payload, "content": "   "})
        self.assertEqual(response.status_code, 400)
        self.assertIn("error", response.json())
        self.assertFalse(Comment.objects.exists())

    def test_failed_captcha(self, verify):
        verify.return_value = False
        response = self.post(self.payload)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json(), {"error": "CAPTCHA verification failed"})

    def test_missing_content(self, _verify):
        response = self.post({**self.payload, "content_id": 9999})
        self.assertEqual(response.status_code, 404)

    @override_settings(COMMENT_RATE_LIMIT=2)
    def test_rate_limit(self, _verify):
        self.assertEqual(self.post(self.payload).status_code, 201)
        self.assertEqual(self.post(self.payload).status_code, 201)
        self.assertEqual(self.post(self.payload).status_code, 429)
        self.assertEqual(Comment.objects.count(), 2)

    def test_private_comments_hidden_from_visitors(self, _verify):
        self.post({**self.payload, "content": "For admins", "is_private": True})
        self.post({**self.payload, "content": "For everyone"})
        response = self.client.get("/directory/companies/acme")
        self.assertEqual([c.content for c in response.context["comments"]], ["For everyone"])

    def test_delete_requires_admin(self, _verify):
        comment = Comment.objects.create(content_type="company", content_id=self.acme.pk, content="x")
        response = self.client.post("/api/comments/delete", {"id": comment.pk}, content_type="application/json")
        self.assertEqual(response.status_code, 403)

        admin = User.objects.create_user(email="admin@example.com", password="pw", role=User.Role.ADMIN)
        self.client.force_login(admin)
        response = self.client.post("/api/comments/delete", {"id": comment.pk}, content_type="application/json")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Comment.objects.exists())

        response = self.client.post("/api/comments/delete", {"id": comment.pk}, content_type="application/json")
        self.assertEqual(response.status_code, 404)


class TurnstileTest(SimpleTestCase):
    @override_settings(TURNSTILE_SECRET_KEY="", DEBUG=True)
    def test_no_secret_passes_in_debug(self):
        self.assertTrue(verify_turnstile(""))

    @override_settings(TURNSTILE_SECRET_KEY="", DEBUG=False)
    def test_no_secret_fails_closed(self):
        self.assertFalse(verify_turnstile("token"))

    @override_settings(TURNSTILE_SECRET_KEY="secret")
    @patch("core.captcha.requests.post")
    def test_remote_verification(self, post):
        post.return_value = Mock(json=Mock(return_value={"success": True}), raise_for_status=Mock())
        self.assertTrue(verify_turnstile("token", "1.2.3.4"))
        self.assertEqual(post.call_args.kwargs["data"]["remoteip"], "1.2.3.4")

        post.return_value.json.return_value = {"success": False, "error-codes": ["invalid-input-response"]}
        self.assertFalse(verify_turnstile("token"))

    @override_settings(TURNSTILE_SECRET_KEY="secret")
    def test_missing_token(self):
        self.assertFalse(verify_turnstile(""))


class ImageProcessingTest(SimpleTestCase):
    def test_decode_rejects_non_images(self):
        with self.assertRaises(ImageUploadError):
            decode_data_url("data:text/plain;base64,aGVsbG8=")
        with self.assertRaises(ImageUploadError):
            decode_data_url("not a data url")

    def test_icon_is_square(self):
        data = decode_data_url(png_data_url(size=(300, 120)))
        result = Image.open(io.BytesIO(process_image(data, kind=ICON)))
        self.assertEqual(result.format, "WEBP")
        self.assertEqual(result.size, (256, 256))

    def test_small_cover_is_not_enlarged(self):
        data = decode_data_url(png_data_url(size=(400, 200)))
        result = Image.open(io.BytesIO(process_image(data)))
        self.assertEqual(result.size, (400, 200))

    def test_large_cover_is_filled(self):
        data = decode_data_url(png_data_url(size=(2400, 1500)))
        result = Image.open(io.BytesIO(process_image(data)))
        self.assertEqual(result.size, (1200, 630))

    def test_empty_crop_is_rejected(self):
        data = decode_data_url(png_data_url())
        with self.assertRaises(ImageUploadError):
            process_image(data, kind=ICON, crop=CropArea(0, 0, 0, 0))

    def test_crop_is_applied(self):
        data = decode_data_url(png_data_url(size=(300, 300)))
        result = Image.open(io.BytesIO(process_image(data, crop=CropArea(10, 10, 100, 50))))
        self.assertEqual(result.size, (100, 50))


class ManageBackendTest(TestCase):
    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.media_override = override_settings(MEDIA_ROOT=self.media_root)
        self.media_override.enable()
        self.admin = User.objects.create_user(email="admin@example.com", password="pw", role=User.Role.ADMIN)

    def tearDown(self):
        self.media_override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def test_anonymous_redirected_to_login(self):
        response = self.client.get("/manage/companies")
        self.assertEqual(response.status_code, 302)
        self.assertTrue(response["Location"].startswith("/manage/login?next="))

    def test_regular_user_cannot_log_in(self):
        User.objects.create_user(email="kim@example.com", password="pw")
        response = self.client.post("/manage/login", {"username": "kim@example.com", "password": "pw"})
        self.assertEqual(response.status_code, 200)
        self.assertNotIn("_auth_user_id", self.client.session)

    def test_create_company_with_logo(self):
        self.client.force_login(self.admin)
        response = self.client.post(
            "/manage/companies/new",
            {
                "name": "Acme Corp",
                "description": "Makers of things",
                "website": "https://acme.example",
                "visible": "on",
                "logo_data": png_data_url(),
            },
        )
        company = Company.objects.get()
        self.assertRedirects(response, f"/manage/companies/{company.pk}", fetch_redirect_response=False)
        self.assertEqual(company.slug, "acme-corp")
        self.assertTrue(company.logo.endswith(".webp"))

        image = self.client.get(f"/images/{company.logo}")
        self.assertEqual(image.status_code, 200)
        self.assertEqual(image["Content-Type"], "image/webp")

        data = self.client.get("/api/companies/acme-corp").json()
        self.assertEqual(data["name"], "Acme Corp")
        self.assertEqual(data["slug"], "acme-corp")
        self.assertEqual(data["description"], "Makers of things")
        self.assertEqual(datetime.fromisoformat(data["createdAt"].replace("Z", "+00:00")), company.created_at)
        self.assertEqual(data["url"], f"{settings.SITE_URL}/directory/companies/acme-corp")
        self.assertEqual(data["logo"], f"{settings.SITE_URL}/images/{company.logo}")

    def test_rename_regenerates_slug_and_keeps_image(self):
        self.client.force_login(self.admin)
        self.client.post("/manage/companies/new", {"name": "Acme", "logo_data": png_data_url()})
        company = Company.objects.get()
        logo = company.logo

        self.client.post(
            f"/manage/companies/{company.pk}",
            {"name": "Acme Labs", "logo_existing": logo},
        )
        company.refresh_from_db()
        self.assertEqual(company.slug, "acme-labs")
        self.assertEqual(company.logo, logo)

    def test_clearing_image_deletes_file(self):
        self.client.force_login(self.admin)
        self.client.post("/manage/companies/new", {"name": "Acme", "logo_data": png_data_url()})
        company = Company.objects.get()
        logo = company.logo

        self.client.post(f"/manage/companies/{company.pk}", {"name": "Acme"})
        company.refresh_from_db()
        self.assertEqual(company.logo, "")
        self.assertEqual(self.client.get(f"/images/{logo}").status_code, 404)

    def test_invalid_form_shows_error(self):
        self.client.force_login(self.admin)
        response = self.client.post("/manage/companies/new", {"name": ""})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["error"], "Name is required")
        self.assertFalse(Company.objects.exists())

    def test_zero_size_crop_shows_error(self):
        self.client.force_login(self.admin)
        response = self.client.post(
            "/manage/companies/new",
            {
                "name": "Acme",
                "logo_data": png_data_url(),
                "logo_crop": '{"x": 0, "y": 0, "width": 0, "height": 40}',
            },
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["error"], "Image crop area is invalid")
        self.assertFalse(Company.objects.exists())

    def test_delete_company(self):
        self.client.force_login(self.admin)
        company = Company.objects.create(name="Acme")
        response = self.client.post(f"/manage/companies/{company.pk}/delete")
        self.assertRedirects(response, "/manage/companies", fetch_redirect_response=False)
        self.assertFalse(Company.objects.exists())

    def test_unknown_section_404(self):
        self.client.force_login(self.admin)
        self.assertEqual(self.client.get("/manage/widgets").status_code, 404)

    def test_site_settings_hide_section(self):
        self.client.force_login(self.admin)
        data = {f"section_{s}": "on" for s in ("events", "companies", "groups", "projects", "products", "people", "news", "jobs")}
        response = self.client.post("/manage/settings", data)
        self.assertRedirects(response, "/manage/settings", fetch_redirect_response=False)
        self.assertFalse(SiteConfig.is_section_visible("technologies"))
        self.assertTrue(SiteConfig.is_section_visible("companies"))
        self.assertEqual(self.client.get("/directory/technologies").status_code, 404)

    def test_comment_moderation(self):
        self.client.force_login(self.admin)
        company = Company.objects.create(name="Acme")
        comment = Comment.objects.create(content_type="company", content_id=company.pk, content="spam")
        response = self.client.get("/manage/comments")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["page"].items[0].target_url, "/directory/companies/acme")

        self.client.post("/manage/comments", {"comment_id": str(comment.pk)})
        self.assertFalse(Comment.objects.exists())
