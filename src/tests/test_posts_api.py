"""Access matrix and lifecycle tests for post endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from django.test import SimpleTestCase, TestCase
from django.utils import timezone as dj_timezone
from rest_framework.test import APIClient

from categories.models import Category
from posts.models import Post
from posts.services import stamp_publication
from tests.utils import FakeRedisMixin, auth_client, create_user


class StampPublicationTests(SimpleTestCase):
    now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def test_first_publish_stamps_now(self):
        self.assertEqual(stamp_publication(None, "published", self.now), self.now)

    def test_draft_stays_unstamped(self):
        self.assertIsNone(stamp_publication(None, "draft", self.now))

    def test_existing_stamp_is_never_replaced_or_cleared(self):
        first = self.now - timedelta(days=3)
        self.assertEqual(stamp_publication(first, "published", self.now), first)
        self.assertEqual(stamp_publication(first, "archived", self.now), first)
        self.assertEqual(stamp_publication(first, "draft", self.now), first)


class PostAPITests(FakeRedisMixin, TestCase):
    """Validate visibility, ownership fallback, and role thresholds on /posts/."""

    @classmethod
    def setUpTestData(cls):
        """Create one account per role, categories, and baseline posts."""
        cls.admin = create_user("admin", role="admin")
        cls.editor = create_user("editor", role="editor")
        cls.author = create_user("author", role="author")
        cls.other_author = create_user("other_author", role="author")
        cls.reader = create_user("reader")

        cls.news = Category.objects.create(name="News", slug="news")
        cls.hidden = Category.objects.create(name="Hidden", slug="hidden", is_active=False)

        cls.published = Post.objects.create(
            title="Hello World",
            slug="hello-world",
            content="First post",
            author=cls.author,
            status=Post.Status.PUBLISHED,
            published_at=dj_timezone.now(),
            views=10,
        )
        cls.published.categories.set([cls.news])
        cls.draft = Post.objects.create(
            title="Work In Progress",
            slug="work-in-progress",
            content="Not ready",
            author=cls.author,
        )
        cls.archived = Post.objects.create(
            title="Old Django Notes",
            slug="old-django-notes",
            content="Archived",
            author=cls.other_author,
            status=Post.Status.ARCHIVED,
            published_at=dj_timezone.now() - timedelta(days=60),
        )

    def setUp(self):
        self.anon = APIClient()

    def test_anonymous_list_only_shows_published(self):
        response = self.anon.get("/posts/")
        body = response.json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual([post["slug"] for post in body["data"]["posts"]], ["hello-world"])
        self.assertEqual(
            body["data"]["pagination"],
            {"page": 1, "pageSize": 10, "total": 1, "totalPages": 1},
        )
        self.assertNotIn("content", body["data"]["posts"][0])

    def test_anonymous_cannot_list_drafts(self):
        response = self.anon.get("/posts/", {"status": "draft"})

        self.assertEqual(response.status_code, 400)
        self.assertIsNone(response.json()["data"])

    def test_plain_user_cannot_list_drafts(self):
        response = auth_client(self.reader).get("/posts/", {"status": "draft"})

        self.assertEqual(response.status_code, 400)

    def test_editor_lists_every_status(self):
        response = auth_client(self.editor).get("/posts/")

        self.assertEqual(response.json()["data"]["pagination"]["total"], 3)

    def test_list_search_and_status_filter(self):
        response = auth_client(self.editor).get("/posts/", {"search": "django", "status": "archived"})
        posts = response.json()["data"]["posts"]

        self.assertEqual([post["slug"] for post in posts], ["old-django-notes"])

    def test_list_filters_by_category(self):
        response = self.anon.get("/posts/", {"category": self.news.pk})

        self.assertEqual(response.json()["data"]["pagination"]["total"], 1)

    def test_list_rejects_unknown_sort(self):
        self.assertEqual(self.anon.get("/posts/", {"sort": "random"}).status_code, 400)

    def test_sort_none_keeps_insertion_order(self):
        response = auth_client(self.editor).get("/posts/", {"sort": "none"})
        slugs = [post["slug"] for post in response.json()["data"]["posts"]]

        self.assertEqual(slugs, ["hello-world", "work-in-progress", "old-django-notes"])

    def test_unreachable_page_is_rejected(self):
        response = self.anon.get("/posts/", {"page": "100000000000000000000"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.anon.get("/posts/", {"category": "99999999999"}).status_code, 400)

    def test_last_reachable_page_is_empty(self):
        response = self.anon.get("/posts/", {"page": "10001", "pageSize": "100"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["posts"], [])

    def test_draft_detail_visibility(self):
        url = f"/posts/{self.draft.pk}/"

        self.assertEqual(self.anon.get(url).status_code, 401)
        self.assertEqual(auth_client(self.reader).get(url).status_code, 403)
        self.assertEqual(auth_client(self.author).get(url).status_code, 200)
        self.assertEqual(auth_client(self.editor).get(url).status_code, 200)

    def test_published_detail_is_public(self):
        response = self.anon.get(f"/posts/{self.published.pk}/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["author"]["username"], "author")
        self.assertEqual(response.json()["data"]["category_details"][0]["slug"], "news")

    def test_missing_post_is_404(self):
        response = self.anon.get("/posts/999999/")

        self.assertEqual(response.status_code, 404)
        self.assertIsNone(response.json()["data"])

    def test_by_slug_counts_views(self):
        response = self.anon.get("/posts/slug/hello-world/")

        self.assertEqual(response.status_code, 200)
        self.published.refresh_from_db()
        self.assertEqual(self.published.views, 11)

    def test_by_slug_hides_drafts(self):
        self.assertEqual(auth_client(self.reader).get("/posts/slug/work-in-progress/").status_code, 403)
        self.draft.refresh_from_db()
        self.assertEqual(self.draft.views, 0)

    def test_create_requires_author_role(self):
        payload = {"title": "Reader Post", "content": "Nope"}

        self.assertEqual(self.anon.post("/posts/", payload, format="json").status_code, 401)
        self.assertEqual(auth_client(self.reader).post("/posts/", payload, format="json").status_code, 403)

    def test_author_creates_post_owned_by_principal(self):
        payload = {
            "title": "Fresh Take",
            "content": "Body",
            "categories": [self.news.pk],
            "tags": [" Django ", "API"],
            "status": "published",
            "author": str(self.other_author.pk),
        }
        response = auth_client(self.author).post("/posts/", payload, format="json")
        body = response.json()

        self.assertEqual(response.status_code, 201)
        self.assertEqual(body["data"]["slug"], "fresh-take")
        self.assertEqual(body["data"]["author"]["id"], str(self.author.pk))
        self.assertEqual(body["data"]["tags"], ["django", "api"])
        self.assertIsNotNone(body["data"]["published_at"])
        self.assertEqual(body["data"]["categories"], [self.news.pk])

    def test_create_draft_leaves_published_at_empty(self):
        response = auth_client(self.author).post(
            "/posts/", {"title": "Someday", "content": "Body"}, format="json"
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["data"]["status"], "draft")
        self.assertIsNone(response.json()["data"]["published_at"])

    def test_duplicate_title_conflicts(self):
        response = auth_client(self.author).post(
            "/posts/", {"title": "Hello, World!", "content": "Again"}, format="json"
        )

        self.assertEqual(response.status_code, 409)

    def test_inactive_category_is_rejected(self):
        response = auth_client(self.author).post(
            "/posts/",
            {"title": "Hidden Post", "content": "Body", "categories": [self.hidden.pk]},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertFalse(Post.objects.filter(title="Hidden Post").exists())

    def test_update_uses_ownership_fallback(self):
        url = f"/posts/{self.draft.pk}/"

        self.assertEqual(self.anon.patch(url, {"title": "X"}, format="json").status_code, 401)
        self.assertEqual(
            auth_client(self.other_author).patch(url, {"title": "Hijacked"}, format="json").status_code,
            403,
        )
        owner = auth_client(self.author).patch(url, {"title": "Nearly Ready"}, format="json")
        self.assertEqual(owner.status_code, 200)
        self.assertEqual(owner.json()["data"]["slug"], "nearly-ready")

        editor = auth_client(self.editor).patch(url, {"excerpt": "Edited"}, format="json")
        self.assertEqual(editor.status_code, 200)
        self.draft.refresh_from_db()
        self.assertEqual(self.draft.author, self.author)

    def test_unauthenticated_precedes_not_found(self):
        self.assertEqual(self.anon.patch("/posts/999999/", {"title": "X"}, format="json").status_code, 401)
        self.assertEqual(
            auth_client(self.editor).patch("/posts/999999/", {"title": "X"}, format="json").status_code,
            404,
        )

    def test_published_at_survives_unpublish_and_republish(self):
        client = auth_client(self.author)
        url = f"/posts/{self.draft.pk}/"

        client.patch(url, {"status": "published"}, format="json")
        self.draft.refresh_from_db()
        first_published_at = self.draft.published_at
        self.assertIsNotNone(first_published_at)

        client.patch(url, {"status": "draft"}, format="json")
        client.patch(url, {"status": "published"}, format="json")
        self.draft.refresh_from_db()
        self.assertEqual(self.draft.published_at, first_published_at)

    def test_delete_by_owner_and_denied_for_others(self):
        url = f"/posts/{self.draft.pk}/"

        self.assertEqual(auth_client(self.other_author).delete(url).status_code, 403)
        self.assertEqual(auth_client(self.author).delete(url).status_code, 204)
        self.assertFalse(Post.objects.filter(pk=self.draft.pk).exists())

    def test_like_requires_authentication(self):
        url = f"/posts/{self.published.pk}/like/"

        self.assertEqual(self.anon.post(url).status_code, 401)
        response = auth_client(self.reader).post(url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["likes"], 1)

    def test_stats_are_admin_only(self):
        self.assertEqual(auth_client(self.editor).get("/posts/stats/").status_code, 403)

        response = auth_client(self.admin).get("/posts/stats/")
        data = response.json()["data"]
        self.assertEqual(response.status_code, 200)
        self.assertEqual(data["totalPosts"], 3)
        self.assertEqual(data["publishedPosts"], 1)
        self.assertEqual(data["draftPosts"], 1)
        self.assertEqual(data["archivedPosts"], 1)
        self.assertEqual([post["slug"] for post in data["topPosts"]], ["hello-world"])
