"""Post model: authored content with a publication lifecycle."""

from django.conf import settings
from django.db import models


class Post(models.Model):
    """Content item owned by its author.

    ``slug`` and ``published_at`` are derived by ``posts.services`` before
    saving; ``views`` and ``likes`` only change through atomic increments.
    """

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        PUBLISHED = "published", "Published"
        ARCHIVED = "archived", "Archived"

    title = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True)
    excerpt = models.CharField(max_length=300, blank=True)
    content = models.TextField()
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="posts")
    categories = models.ManyToManyField("categories.Category", blank=True, related_name="posts")
    tags = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.DRAFT)
    published_at = models.DateTimeField(null=True, blank=True)
    views = models.PositiveIntegerField(default=0)
    likes = models.PositiveIntegerField(default=0)
    is_featured = models.BooleanField(default=False)
    allow_comments = models.BooleanField(default=True)
    seo_title = models.CharField(max_length=60, blank=True)
    seo_description = models.CharField(max_length=160, blank=True)
    seo_keywords = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="post_status_idx"),
            models.Index(fields=["-published_at"], name="post_published_at_idx"),
            models.Index(fields=["-views"], name="post_views_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.title

    @property
    def url(self) -> str:
        return f"/posts/slug/{self.slug}/"


__all__ = ["Post"]
