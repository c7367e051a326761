"""Serializers for category CRUD and tree rendering."""

from rest_framework import serializers

from .models import Category


class CategorySerializer(serializers.ModelSerializer):
    """Category payload; ``parent`` is written as an id and read back with its name/slug.

    Name uniqueness is enforced by ``categories.services`` so that clashes
    surface as 409 conflicts rather than field validation errors.
    """

    parent = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(), allow_null=True, required=False
    )
    parent_info = serializers.SerializerMethodField()

    class Meta:
        """Slug and timestamps are derived server-side."""
        model = Category
        fields = [
            "id",
            "name",
            "slug",
            "description",
            "color",
            "icon",
            "parent",
            "parent_info",
            "sort_order",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "slug", "created_at", "updated_at"]
        extra_kwargs = {"name": {"validators": []}}

    @staticmethod
    def get_parent_info(obj):
        parent = obj.parent
        if parent is None:
            return None
        return {"id": parent.pk, "name": parent.name, "slug": parent.slug}

    @staticmethod
    def validate_name(value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name cannot be blank.")
        return value


class CategoryTreeSerializer(serializers.ModelSerializer):
    """Compact category fields used inside tree nodes and dropdown lists."""

    class Meta:
        model = Category
        fields = ["id", "name", "slug", "description", "color", "icon", "parent", "sort_order"]
        read_only_fields = fields


__all__ = ["CategorySerializer", "CategoryTreeSerializer"]
