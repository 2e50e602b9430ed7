from datetime import timedelta

from django.conf import settings
from django.test import TestCase
from django.utils import timezone

from core.models import SiteConfig
from directory.models import Company, Person, Product, Technology
from events.models import Event, EventDate, EventOccurrence
from news.models import News


class ContentApiTest(TestCase):
    def setUp(self):
        self.python = Technology.objects.create(name="Python", category=Technology.Category.LANGUAGE)
        self.acme = Company.objects.create(name="Acme", description="Software shop", website="https://acme.example")
        self.acme.technologies.add(self.python)
        for i in range(5):
            Company.objects.create(name=f"Company {i}")
        Company.objects.create(name="Stealth", visible=False)

    def test_detail(self):
        response = self.client.get("/api/companies/acme")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Access-Control-Allow-Origin"], "*")
        data = response.json()
        self.assertEqual(data["name"], "Acme")
        self.assertEqual(data["url"], f"{settings.SITE_URL}/directory/companies/acme")
        self.assertIsNone(data["logo"])
        self.assertIn("createdAt", data)
        self.assertEqual(data["technologies"], [{"id": self.python.pk, "slug": "python", "name": "Python", "category": "language"}])

    def test_not_found(self):
        response = self.client.get("/api/companies/nope")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Company not found"})

    def test_hidden_entity_not_found(self):
        self.assertEqual(self.client.get("/api/companies/stealth").status_code, 404)

    def test_list_pagination(self):
        response = self.client.get("/api/companies", {"limit": "2", "offset": "2"})
        data = response.json()
        self.assertEqual(data["pagination"], {"total": 6, "limit": 2, "offset": 2, "hasMore": True})
        self.assertEqual(len(data["data"]), 2)

        link = response["Link"]
        self.assertIn('<http://testserver/api/companies?limit=2&offset=0>; rel="first"', link)
        self.assertIn('<http://testserver/api/companies?limit=2&offset=4>; rel="next"', link)
        self.assertIn('<http://testserver/api/companies?limit=2&offset=4>; rel="last"', link)

    def test_list_defaults_and_limit_cap(self):
        response = self.client.get("/api/companies", {"limit": "500", "offset": "-5"})
        data = response.json()
        self.assertEqual(data["pagination"]["limit"], 200)
        self.assertEqual(data["pagination"]["offset"], 0)
        self.assertFalse(data["pagination"]["hasMore"])
        self.assertFalse(response.has_header("Link"))

    def test_search(self):
        data = self.client.get("/api/companies", {"q": "software"}).json()
        self.assertEqual([c["slug"] for c in data["data"]], ["acme"])

    def test_hidden_section(self):
        SiteConfig.set_section_visible("companies", False)
        response = self.client.get("/api/companies")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.client.get("/api/companies/acme").status_code, 404)

    def test_read_only(self):
        response = self.client.post("/api/companies", {"name": "New"}, content_type="application/json")
        self.assertEqual(response.status_code, 405)
        self.assertIn("error", response.json())

    def test_product_company(self):
        Product.objects.create(name="Widget", company=self.acme)
        data = self.client.get("/api/products/widget").json()
        self.assertEqual(data["company"], {"id": self.acme.pk, "slug": "acme", "name": "Acme"})

    def test_person_social_links(self):
        Person.objects.create(name="Jane", social_links={"linkedin": "https://linkedin.example/jane"})
        data = self.client.get("/api/people/jane").json()
        self.assertEqual(data["socialLinks"], {"linkedin": "https://linkedin.example/jane"})


class EventApiTest(TestCase):
    def test_one_off_dates(self):
        event = Event.objects.create(title="Conf", description="Talks", link="https://example.com/conf")
        EventDate.objects.create(event=event, start_date=timezone.now() + timedelta(days=3))
        data = self.client.get("/api/events/conf").json()
        self.assertEqual(len(data["dates"]), 1)
        self.assertEqual(set(data["dates"][0]), {"startDate", "endDate"})
        self.assertEqual(data["recurrenceRule"], "")

    def test_recurring_dates_flag_cancellations(self):
        event = Event.objects.create(
            title="Hack Night",
            description="Code",
            link="https://example.com/hack",
            recurrence_rule="FREQ=WEEKLY;BYDAY=TH",
        )
        first = event.occurrences()[0].date
        EventOccurrence.objects.create(event=event, occurrence_date=first, cancelled=True)

        data = self.client.get("/api/events/hack-night").json()
        self.assertEqual(data["recurrence"], "Every Thursday")
        self.assertTrue(data["dates"][0]["cancelled"])
        self.assertFalse(data["dates"][1]["cancelled"])


class NewsApiTest(TestCase):
    def test_drafts_hidden(self):
        News.objects.create(title="Live", content="x", published_at=timezone.now() - timedelta(hours=1))
        News.objects.create(title="Draft", content="x")
        data = self.client.get("/api/news").json()
        self.assertEqual([n["title"] for n in data["data"]], ["Live"])
        self.assertEqual(self.client.get("/api/news/draft").json(), {"error": "News not found"})
