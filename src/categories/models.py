"""Hierarchical content categories."""

from django.core.validators import RegexValidator
from django.db import models

hex_color_validator = RegexValidator(r"^#[0-9A-Fa-f]{6}$", "Color must be a hex code like #3B82F6.")


class Category(models.Model):
    """Category with an optional parent; the parent graph must stay acyclic.

    The slug is set by the write path (``categories.services``), not here.
    """

    name = models.CharField(max_length=50, unique=True)
    slug = models.SlugField(max_length=60, unique=True)
    description = models.CharField(max_length=200, blank=True)
    color = models.CharField(max_length=7, default="#3B82F6", validators=[hex_color_validator])
    icon = models.CharField(max_length=50, default="folder")
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="children",
    )
    sort_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["sort_order", "name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.name


__all__ = ["Category", "hex_color_validator"]
