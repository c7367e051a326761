"""Post write path: slugs, publication stamping, category checks, counters, stats."""

import logging
from datetime import datetime, timedelta
from typing import Any, Iterable, Optional

from django.db import IntegrityError, transaction
from django.db.models import Count, F, Q
from django.utils import timezone

from core.exceptions import ConflictingState, InvalidParameter
from core.text import derive_slug, normalize_tags
from .models import Post

logger = logging.getLogger(__name__)

STATS_WINDOW_DAYS = 30
TOP_POSTS_LIMIT = 5


def stamp_publication(current_published_at: Optional[datetime], new_status: str, now: datetime) -> Optional[datetime]:
    """Return the ``published_at`` value a post should carry after a status change.

    The first transition into ``published`` stamps ``now``; once set the
    timestamp is kept, including across unpublish/republish cycles.
    """
    if current_published_at is None and new_status == Post.Status.PUBLISHED:
        return now
    return current_published_at


def _resolve_slug(title: str, exclude_id: Optional[int] = None) -> str:
    slug = derive_slug(title)
    if not slug:
        raise InvalidParameter("Title must contain at least one letter or digit.")
    clashes = Post.objects.filter(slug=slug)
    if exclude_id is not None:
        clashes = clashes.exclude(pk=exclude_id)
    if clashes.exists():
        raise ConflictingState("A post with this title already exists.")
    return slug


def _check_categories(categories: Iterable) -> None:
    inactive = [category.pk for category in categories if not category.is_active]
    if inactive:
        raise InvalidParameter("One or more categories are not available.")


def _prepare(fields: dict[str, Any]) -> tuple[dict[str, Any], Optional[list]]:
    fields = dict(fields)
    categories = fields.pop("categories", None)
    if categories is not None:
        _check_categories(categories)
    if "tags" in fields:
        fields["tags"] = normalize_tags(fields["tags"])
    return fields, categories


def create_post(author, fields: dict[str, Any]) -> Post:
    """Create a post owned by ``author`` from validated fields."""
    fields, categories = _prepare(fields)
    fields["slug"] = _resolve_slug(fields["title"])
    fields["published_at"] = stamp_publication(None, fields.get("status", Post.Status.DRAFT), timezone.now())
    try:
        with transaction.atomic():
            post = Post.objects.create(author=author, **fields)
            if categories:
                post.categories.set(categories)
    except IntegrityError as exc:
        raise ConflictingState("A post with this title already exists.") from exc
    logger.info("Post %s created by %s (status=%s)", post.pk, author.pk, post.status)
    return post


def update_post(post: Post, fields: dict[str, Any]) -> Post:
    """Apply validated changes; the author is never reassigned."""
    fields, categories = _prepare(fields)
    fields.pop("author", None)
    if "title" in fields and fields["title"] != post.title:
        fields["slug"] = _resolve_slug(fields["title"], exclude_id=post.pk)
    if "status" in fields:
        fields["published_at"] = stamp_publication(post.published_at, fields["status"], timezone.now())

    for attr, value in fields.items():
        setattr(post, attr, value)
    try:
        with transaction.atomic():
            post.save()
            if categories is not None:
                post.categories.set(categories)
    except IntegrityError as exc:
        raise ConflictingState("A post with this title already exists.") from exc
    logger.info("Post %s updated fields=%s", post.pk, sorted(fields))
    return post


def delete_post(post: Post) -> None:
    post_id = post.pk
    post.delete()
    logger.info("Post %s deleted", post_id)


def _increment(post: Post, field_name: str) -> int:
    Post.objects.filter(pk=post.pk).update(**{field_name: F(field_name) + 1})
    post.refresh_from_db(fields=[field_name])
    return getattr(post, field_name)


def record_view(post: Post) -> int:
    return _increment(post, "views")


def record_like(post: Post) -> int:
    return _increment(post, "likes")


def post_stats(now: Optional[datetime] = None) -> dict[str, Any]:
    """Counts by status, featured and recent posts, plus the most viewed published posts."""
    now = now or timezone.now()
    counts = Post.objects.aggregate(
        total=Count("id"),
        published=Count("id", filter=Q(status=Post.Status.PUBLISHED)),
        draft=Count("id", filter=Q(status=Post.Status.DRAFT)),
        archived=Count("id", filter=Q(status=Post.Status.ARCHIVED)),
        featured=Count("id", filter=Q(is_featured=True)),
        new=Count("id", filter=Q(created_at__gte=now - timedelta(days=STATS_WINDOW_DAYS))),
    )
    top_posts = (
        Post.objects.filter(status=Post.Status.PUBLISHED)
        .order_by("-views", "-likes")
        .values("id", "title", "slug", "views", "likes", "published_at")[:TOP_POSTS_LIMIT]
    )
    return {
        "totalPosts": counts["total"],
        "publishedPosts": counts["published"],
        "draftPosts": counts["draft"],
        "archivedPosts": counts["archived"],
        "featuredPosts": counts["featured"],
        "newPosts": counts["new"],
        "topPosts": list(top_posts),
    }


__all__ = [
    "create_post",
    "delete_post",
    "post_stats",
    "record_like",
    "record_view",
    "stamp_publication",
    "update_post",
]
