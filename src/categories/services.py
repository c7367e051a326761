"""Category write path: slug derivation, uniqueness, hierarchy, and deletion rules."""

import logging
from typing import Any, Optional

from django.db import IntegrityError, transaction

from core.exceptions import ConflictingState, InvalidParameter
from core.text import derive_slug
from .models import Category
from .tree import CategoryNode, build_tree, ensure_parent_assignable

logger = logging.getLogger(__name__)


def parent_map(lock: bool = False) -> dict[int, Optional[int]]:
    """Map every stored category id to its parent id.

    With ``lock`` the rows stay locked until the surrounding transaction ends,
    so concurrent reparenting is serialised. Call it inside ``transaction.atomic``.
    """
    rows = Category.objects.order_by("pk")
    if lock:
        rows = rows.select_for_update()
    return dict(rows.values_list("id", "parent_id"))


def _resolve_slug(name: str, exclude_id: Optional[int] = None) -> str:
    slug = derive_slug(name)
    if not slug:
        raise InvalidParameter("Category name must contain at least one letter or digit.")

    clashes = Category.objects.filter(name__iexact=name) | Category.objects.filter(slug=slug)
    if exclude_id is not None:
        clashes = clashes.exclude(pk=exclude_id)
    if clashes.exists():
        raise ConflictingState("A category with this name already exists.")
    return slug


def _check_parent(category_id: Optional[int], parent: Optional[Category], lock: bool = False) -> None:
    if parent is None:
        return
    ensure_parent_assignable(category_id, parent.pk, parent_map(lock=lock))


def create_category(fields: dict[str, Any]) -> Category:
    """Create a category from validated fields."""
    fields = dict(fields)
    fields["slug"] = _resolve_slug(fields["name"])
    _check_parent(None, fields.get("parent"))
    try:
        with transaction.atomic():
            category = Category.objects.create(**fields)
    except IntegrityError as exc:
        raise ConflictingState("A category with this name already exists.") from exc
    logger.info("Created category %s (%s)", category.pk, category.slug)
    return category


def update_category(category: Category, fields: dict[str, Any]) -> Category:
    """Apply validated changes; parent changes are re-checked against the whole tree."""
    fields = dict(fields)
    if "name" in fields and fields["name"] != category.name:
        fields["slug"] = _resolve_slug(fields["name"], exclude_id=category.pk)
    reparenting = "parent" in fields and fields["parent"] is not None and fields["parent"].pk != category.parent_id

    try:
        with transaction.atomic():
            # The ancestry check and the save share one lock on the hierarchy.
            if reparenting:
                _check_parent(category.pk, fields["parent"], lock=True)
            for attr, value in fields.items():
                setattr(category, attr, value)
            category.save()
    except IntegrityError as exc:
        raise ConflictingState("A category with this name already exists.") from exc
    logger.info("Updated category %s fields=%s", category.pk, sorted(fields))
    return category


def delete_category(category: Category) -> None:
    """Delete a category that has no child categories and no posts."""
    if category.children.exists():
        raise ConflictingState("Cannot delete a category that has child categories.")
    if category.posts.exists():
        raise ConflictingState("Cannot delete a category that is still used by posts.")
    category_id = category.pk
    category.delete()
    logger.info("Deleted category %s", category_id)


def active_tree() -> list[CategoryNode]:
    """Forest of active categories; inactive parents leave their children as roots."""
    return build_tree(Category.objects.filter(is_active=True).order_by())


__all__ = [
    "active_tree",
    "create_category",
    "delete_category",
    "parent_map",
    "update_category",
]
