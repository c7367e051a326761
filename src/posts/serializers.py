"""Serializers for post CRUD with author and category summaries."""

from rest_framework import serializers

from categories.models import Category
from .models import Post


class PostSerializer(serializers.ModelSerializer):
    """Full post payload.

    ``categories`` is written as a list of ids and echoed back alongside
    ``category_details``; slug, author, counters and ``published_at`` are
    server-managed.
    """

    author = serializers.SerializerMethodField()
    categories = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(), many=True, required=False
    )
    category_details = serializers.SerializerMethodField()
    tags = serializers.ListField(
        child=serializers.CharField(max_length=50, allow_blank=True), required=False
    )
    seo_keywords = serializers.ListField(
        child=serializers.CharField(max_length=50), required=False
    )
    url = serializers.ReadOnlyField()

    class Meta:
        """Counters and derived fields are read-only."""
        model = Post
        fields = [
            "id",
            "title",
            "slug",
            "excerpt",
            "content",
            "author",
            "categories",
            "category_details",
            "tags",
            "status",
            "published_at",
            "views",
            "likes",
            "is_featured",
            "allow_comments",
            "seo_title",
            "seo_description",
            "seo_keywords",
            "url",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "slug",
            "published_at",
            "views",
            "likes",
            "created_at",
            "updated_at",
        ]

    @staticmethod
    def get_author(obj):
        author = obj.author
        return {"id": str(author.pk), "username": author.username, "full_name": author.full_name}

    @staticmethod
    def get_category_details(obj):
        return [
            {"id": category.pk, "name": category.name, "slug": category.slug, "color": category.color}
            for category in obj.categories.all()
        ]

    @staticmethod
    def validate_title(value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Title cannot be blank.")
        return value


class PostSummarySerializer(PostSerializer):
    """Listing variant without the body text."""

    class Meta(PostSerializer.Meta):
        fields = [name for name in PostSerializer.Meta.fields if name != "content"]


__all__ = ["PostSerializer", "PostSummarySerializer"]
