import io

from django.core.management import CommandError, call_command
from django.test import TestCase

from accounts.models import User


class UserModelTest(TestCase):
    def test_create_user_defaults(self):
        user = User.objects.create_user(email="Kim@Example.com", password="pw")
        self.assertEqual(user.username, "Kim@example.com")
        self.assertEqual(user.role, User.Role.REGULAR)
        self.assertFalse(user.is_site_admin)

    def test_superuser_is_admin(self):
        user = User.objects.create_superuser(email="root@example.com", password="pw")
        self.assertEqual(user.role, User.Role.ADMIN)
        self.assertTrue(user.is_site_admin)


class LoginTest(TestCase):
    def test_admin_login_redirects_to_manage(self):
        User.objects.create_user(email="admin@example.com", password="pw", role=User.Role.ADMIN)
        response = self.client.post("/manage/login", {"username": "admin@example.com", "password": "pw"})
        self.assertRedirects(response, "/manage/", fetch_redirect_response=False)

    def test_login_page_renders(self):
        self.assertEqual(self.client.get("/manage/login").status_code, 200)


class CreateAdminUserCommandTest(TestCase):
    def test_creates_admin(self):
        call_command("create_admin_user", "--email", " Admin@Example.com ", "--password", "pw", stdout=io.StringIO())
        user = User.objects.get(email="admin@example.com")
        self.assertTrue(user.is_site_admin)
        self.assertTrue(user.check_password("pw"))

    def test_existing_user_needs_promote(self):
        User.objects.create_user(email="kim@example.com", password="old")
        with self.assertRaises(CommandError):
            call_command("create_admin_user", "--email", "kim@example.com", "--password", "new", stdout=io.StringIO())

        call_command(
            "create_admin_user", "--email", "kim@example.com", "--password", "new", "--promote",
            stdout=io.StringIO(),
        )
        user = User.objects.get(email="kim@example.com")
        self.assertEqual(user.role, User.Role.ADMIN)
        self.assertTrue(user.check_password("new"))
