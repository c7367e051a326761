"""System checks for access action declarations."""

from django.core.checks import Error, register

from access_control.actions import CATALOG
from access_control.permissions import ActionPermission


@register()
def views_declare_known_actions(app_configs, **kwargs):
    """Ensure ActionPermission-protected views only reference catalog actions.

    Only the project's viewsets are inspected. New protected views should be
    added to the list below.
    """
    errors: list[Error] = []

    # Import here to avoid circular imports at module load time.
    from categories.views import CategoryViewSet
    from posts.views import PostViewSet
    from users.views import UserViewSet

    protected_views = [CategoryViewSet, PostViewSet, UserViewSet]

    for view_cls in protected_views:
        if ActionPermission not in getattr(view_cls, "permission_classes", []):
            continue
        mapping = getattr(view_cls, "access_actions", None)
        if not mapping:
            errors.append(
                Error(
                    f"{view_cls.__name__} uses ActionPermission but does not define access_actions.",
                    obj=view_cls,
                    id="access_control.E001",
                )
            )
            continue
        for operation, action_name in mapping.items():
            if action_name is not None and action_name not in CATALOG:
                errors.append(
                    Error(
                        f"{view_cls.__name__}.{operation} references unknown action '{action_name}'.",
                        obj=view_cls,
                        id="access_control.E002",
                    )
                )

    return errors
