"""Access and hierarchy tests for category endpoints."""

from __future__ import annotations

from unittest import mock

from django.db import transaction
from django.test import TestCase
from rest_framework.test import APIClient

from categories import services
from categories.models import Category
from posts.models import Post
from tests.utils import FakeRedisMixin, auth_client, create_user


class CategoryAPITests(FakeRedisMixin, TestCase):
    """Public reads, editor writes, admin deletes, and parent-cycle protection."""

    @classmethod
    def setUpTestData(cls):
        cls.admin = create_user("admin", role="admin")
        cls.editor = create_user("editor", role="editor")
        cls.author = create_user("author", role="author")

        cls.tech = Category.objects.create(name="Tech", slug="tech", sort_order=2)
        cls.python = Category.objects.create(name="Python", slug="python", parent=cls.tech)
        cls.django = Category.objects.create(name="Django", slug="django", parent=cls.python)
        cls.life = Category.objects.create(name="Life", slug="life", sort_order=1)
        cls.retired = Category.objects.create(name="Retired", slug="retired", is_active=False)

    def setUp(self):
        self.anon = APIClient()

    def test_list_is_public_and_paginated(self):
        response = self.anon.get("/categories/", {"pageSize": 2})
        body = response.json()["data"]

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(body["categories"]), 2)
        self.assertEqual(body["pagination"]["total"], 5)
        self.assertEqual(body["pagination"]["totalPages"], 3)

    def test_list_filters_top_level_and_active(self):
        response = self.anon.get("/categories/", {"parent": "null", "active": "true"})
        names = [category["name"] for category in response.json()["data"]["categories"]]

        self.assertEqual(names, ["Life", "Tech"])

    def test_list_rejects_post_only_filters(self):
        self.assertEqual(self.anon.get("/categories/", {"status": "draft"}).status_code, 400)

    def test_all_returns_active_categories_unpaginated(self):
        response = self.anon.get("/categories/all/")
        names = {category["name"] for category in response.json()["data"]["categories"]}

        self.assertEqual(names, {"Tech", "Python", "Django", "Life"})

    def test_tree_nests_active_categories(self):
        response = self.anon.get("/categories/tree/")
        forest = response.json()["data"]["categories"]

        self.assertEqual(response.status_code, 200)
        self.assertEqual([root["name"] for root in forest], ["Life", "Tech"])
        tech = forest[1]
        self.assertEqual(tech["children"][0]["name"], "Python")
        self.assertEqual(tech["children"][0]["children"][0]["name"], "Django")

    def test_tree_reports_corrupted_hierarchy(self):
        # Bypass the write path to simulate a loop already present in storage.
        Category.objects.filter(pk=self.tech.pk).update(parent=self.django)

        response = self.anon.get("/categories/tree/")
        body = response.json()

        self.assertEqual(response.status_code, 500)
        self.assertEqual(body["code"], "cycle_detected")
        self.assertIsNone(body["data"])

    def test_retrieve_shows_parent_info(self):
        response = self.anon.get(f"/categories/{self.python.pk}/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["parent_info"]["slug"], "tech")

    def test_create_requires_editor(self):
        payload = {"name": "Travel"}

        self.assertEqual(self.anon.post("/categories/", payload, format="json").status_code, 401)
        self.assertEqual(auth_client(self.author).post("/categories/", payload, format="json").status_code, 403)

        response = auth_client(self.editor).post(
            "/categories/", {"name": "Travel Notes", "parent": self.life.pk}, format="json"
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["data"]["slug"], "travel-notes")
        self.assertEqual(response.json()["data"]["color"], "#3B82F6")

    def test_duplicate_name_conflicts_case_insensitively(self):
        response = auth_client(self.editor).post("/categories/", {"name": "tech"}, format="json")

        self.assertEqual(response.status_code, 409)

    def test_invalid_color_is_rejected(self):
        response = auth_client(self.editor).post(
            "/categories/", {"name": "Colorful", "color": "blue"}, format="json"
        )

        self.assertEqual(response.status_code, 400)

    def test_reparenting_under_descendant_conflicts(self):
        client = auth_client(self.editor)

        response = client.patch(f"/categories/{self.tech.pk}/", {"parent": self.django.pk}, format="json")
        self.assertEqual(response.status_code, 409)

        response = client.patch(f"/categories/{self.tech.pk}/", {"parent": self.tech.pk}, format="json")
        self.assertEqual(response.status_code, 409)

        self.tech.refresh_from_db()
        self.assertIsNone(self.tech.parent_id)

    def test_reparenting_checks_ancestry_under_row_locks(self):
        real_parent_map = services.parent_map
        calls = []

        def recording_parent_map(lock=False):
            calls.append((lock, transaction.get_connection().in_atomic_block))
            return real_parent_map(lock=lock)

        with mock.patch.object(services, "parent_map", side_effect=recording_parent_map):
            response = auth_client(self.editor).patch(
                f"/categories/{self.django.pk}/", {"parent": self.life.pk}, format="json"
            )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(calls, [(True, True)])

    def test_reparenting_elsewhere_is_allowed(self):
        response = auth_client(self.editor).patch(
            f"/categories/{self.django.pk}/", {"parent": self.life.pk, "name": "Django Life"}, format="json"
        )

        self.assertEqual(response.status_code, 200)
        self.django.refresh_from_db()
        self.assertEqual(self.django.parent, self.life)
        self.assertEqual(self.django.slug, "django-life")

    def test_delete_is_admin_only(self):
        url = f"/categories/{self.retired.pk}/"

        self.assertEqual(auth_client(self.editor).delete(url).status_code, 403)
        self.assertEqual(auth_client(self.admin).delete(url).status_code, 204)
        self.assertFalse(Category.objects.filter(pk=self.retired.pk).exists())

    def test_delete_with_children_conflicts(self):
        response = auth_client(self.admin).delete(f"/categories/{self.tech.pk}/")

        self.assertEqual(response.status_code, 409)
        self.assertTrue(Category.objects.filter(pk=self.tech.pk).exists())

    def test_delete_with_posts_conflicts(self):
        post = Post.objects.create(title="Life Update", slug="life-update", content="Body", author=self.author)
        post.categories.set([self.life])

        response = auth_client(self.admin).delete(f"/categories/{self.life.pk}/")

        self.assertEqual(response.status_code, 409)
        self.assertTrue(Category.objects.filter(pk=self.life.pk).exists())
