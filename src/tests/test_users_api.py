"""Access matrix tests for account administration endpoints."""

from __future__ import annotations

from io import StringIO

from django.core.management import CommandError, call_command
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from authentication.models import User
from posts.models import Post
from tests.utils import FakeRedisMixin, auth_client, create_user


class UserAPITests(FakeRedisMixin, TestCase):
    """Admin-only administration with an ownership fallback for profile edits."""

    @classmethod
    def setUpTestData(cls):
        cls.admin = create_user("admin", role="admin")
        cls.editor = create_user("editor", role="editor")
        cls.author = create_user("author", role="author")
        cls.reader = create_user("reader")
        cls.dormant = create_user("dormant", is_active=False)

    def setUp(self):
        self.anon = APIClient()

    def test_list_is_admin_only(self):
        self.assertEqual(self.anon.get("/users/").status_code, 401)
        self.assertEqual(auth_client(self.editor).get("/users/").status_code, 403)

        response = auth_client(self.admin).get("/users/")
        body = response.json()["data"]
        self.assertEqual(response.status_code, 200)
        self.assertEqual(body["pagination"]["total"], 5)
        self.assertNotIn("password_hash", body["users"][0])

    def test_list_filters_by_role_and_activity(self):
        client = auth_client(self.admin)

        by_role = client.get("/users/", {"role": "editor"}).json()["data"]["users"]
        self.assertEqual([user["username"] for user in by_role], ["editor"])

        inactive = client.get("/users/", {"active": "false"}).json()["data"]["users"]
        self.assertEqual([user["username"] for user in inactive], ["dormant"])

        self.assertEqual(client.get("/users/", {"role": "overlord"}).status_code, 400)

    def test_list_search_and_sort(self):
        response = auth_client(self.admin).get("/users/", {"search": "AUTH", "sort": "title"})

        self.assertEqual([user["username"] for user in response.json()["data"]["users"]], ["author"])

    def test_retrieve_requires_authentication(self):
        url = f"/users/{self.author.pk}/"

        self.assertEqual(self.anon.get(url).status_code, 401)
        response = auth_client(self.reader).get(url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["username"], "author")

    def test_account_updates_own_profile(self):
        response = auth_client(self.reader).patch(
            f"/users/{self.reader.pk}/", {"bio": "Hello there"}, format="json"
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["bio"], "Hello there")

    def test_account_cannot_update_others(self):
        response = auth_client(self.editor).patch(
            f"/users/{self.reader.pk}/", {"bio": "Edited by editor"}, format="json"
        )

        self.assertEqual(response.status_code, 403)

    def test_self_promotion_is_denied(self):
        response = auth_client(self.author).patch(
            f"/users/{self.author.pk}/", {"role": "admin"}, format="json"
        )

        self.assertEqual(response.status_code, 403)
        self.author.refresh_from_db()
        self.assertEqual(self.author.role, "author")

    def test_admin_changes_role_and_status(self):
        response = auth_client(self.admin).patch(
            f"/users/{self.reader.pk}/", {"role": "author", "is_active": False}, format="json"
        )

        self.assertEqual(response.status_code, 200)
        self.reader.refresh_from_db()
        self.assertEqual(self.reader.role, "author")
        self.assertFalse(self.reader.is_active)

    def test_admin_rejects_unknown_role(self):
        response = auth_client(self.admin).patch(
            f"/users/{self.reader.pk}/", {"role": "overlord"}, format="json"
        )

        self.assertEqual(response.status_code, 400)

    def test_demoted_account_loses_access_immediately(self):
        client = auth_client(self.editor)
        self.editor.role = "user"
        self.editor.save(update_fields=["role"])

        response = client.post("/categories/", {"name": "Too Late"}, format="json")
        self.assertEqual(response.status_code, 403)

    def test_delete_is_admin_only_and_cascades_posts(self):
        Post.objects.create(title="Doomed", slug="doomed", content="Body", author=self.author)
        url = f"/users/{self.author.pk}/"

        self.assertEqual(auth_client(self.editor).delete(url).status_code, 403)
        self.assertEqual(auth_client(self.admin).delete(url).status_code, 204)
        self.assertFalse(User.objects.filter(pk=self.author.pk).exists())
        self.assertFalse(Post.objects.filter(slug="doomed").exists())

    def test_admin_cannot_delete_self(self):
        response = auth_client(self.admin).delete(f"/users/{self.admin.pk}/")

        self.assertEqual(response.status_code, 409)
        self.assertTrue(User.objects.filter(pk=self.admin.pk).exists())

    def test_accounts_cannot_be_created_here(self):
        response = auth_client(self.admin).post("/users/", {"username": "x"}, format="json")

        self.assertEqual(response.status_code, 405)

    def test_stats_are_admin_only(self):
        self.assertEqual(auth_client(self.editor).get("/users/stats/").status_code, 403)

        data = auth_client(self.admin).get("/users/stats/").json()["data"]
        self.assertEqual(data["totalUsers"], 5)
        self.assertEqual(data["activeUsers"], 4)
        self.assertEqual(data["inactiveUsers"], 1)
        self.assertEqual(data["newUsers"], 5)
        self.assertEqual(data["byRole"], {"user": 2, "author": 1, "editor": 1, "admin": 1})


class InitAdminCommandTests(TestCase):
    @override_settings(ADMIN_EMAIL="root@example.com", ADMIN_USERNAME="root", ADMIN_PASSWORD="RootPass123")
    def test_creates_admin_once(self):
        out = StringIO()
        call_command("init_admin", stdout=out)

        admin = User.objects.get(email="root@example.com")
        self.assertEqual(admin.role, "admin")
        self.assertTrue(admin.check_password("RootPass123"))

        call_command("init_admin", stdout=out)
        self.assertEqual(User.objects.filter(role="admin").count(), 1)
        self.assertIn("already exists", out.getvalue())

    @override_settings(ADMIN_PASSWORD=None)
    def test_requires_a_password(self):
        with self.assertRaises(CommandError):
            call_command("init_admin", stdout=StringIO())
