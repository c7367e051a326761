"""Static action catalog: minimum role and ownership fallback per action.

Every protected operation declares its threshold here, once. Views refer to
actions by name; the ``access_control.E001`` system check rejects names that
are not in the catalog.
"""

from dataclasses import dataclass

from .roles import Role


@dataclass(frozen=True)
class Action:
    name: str
    minimum_role: Role
    ownership_fallback: bool = False


CONTENT_CREATE = Action("content.create", Role.AUTHOR)
CONTENT_UPDATE = Action("content.update", Role.EDITOR, ownership_fallback=True)
CONTENT_DELETE = Action("content.delete", Role.EDITOR, ownership_fallback=True)
CONTENT_VIEW_UNPUBLISHED = Action("content.view_unpublished", Role.AUTHOR, ownership_fallback=True)
CONTENT_LIKE = Action("content.like", Role.USER)

ACCOUNT_VIEW = Action("account.view", Role.USER)
ACCOUNT_UPDATE = Action("account.update", Role.ADMIN, ownership_fallback=True)
ACCOUNT_ADMINISTER = Action("account.administer", Role.ADMIN)
ACCOUNT_DELETE = Action("account.delete", Role.ADMIN)
ACCOUNT_LIST = Action("account.list", Role.ADMIN)

STATS_VIEW = Action("stats.view", Role.ADMIN)

CATEGORY_CREATE = Action("category.create", Role.EDITOR)
CATEGORY_UPDATE = Action("category.update", Role.EDITOR)
CATEGORY_DELETE = Action("category.delete", Role.ADMIN)

CATALOG: dict[str, Action] = {
    action.name: action
    for action in (
        CONTENT_CREATE,
        CONTENT_UPDATE,
        CONTENT_DELETE,
        CONTENT_VIEW_UNPUBLISHED,
        CONTENT_LIKE,
        ACCOUNT_VIEW,
        ACCOUNT_UPDATE,
        ACCOUNT_ADMINISTER,
        ACCOUNT_DELETE,
        ACCOUNT_LIST,
        STATS_VIEW,
        CATEGORY_CREATE,
        CATEGORY_UPDATE,
        CATEGORY_DELETE,
    )
}


def get_action(name: str) -> Action:
    """Look up a catalog action; unknown names are programming errors (KeyError)."""
    return CATALOG[name]


__all__ = [
    "ACCOUNT_ADMINISTER",
    "ACCOUNT_DELETE",
    "ACCOUNT_LIST",
    "ACCOUNT_UPDATE",
    "ACCOUNT_VIEW",
    "CATALOG",
    "CATEGORY_CREATE",
    "CATEGORY_DELETE",
    "CATEGORY_UPDATE",
    "CONTENT_CREATE",
    "CONTENT_DELETE",
    "CONTENT_LIKE",
    "CONTENT_UPDATE",
    "CONTENT_VIEW_UNPUBLISHED",
    "STATS_VIEW",
    "Action",
    "get_action",
]
