"""Account administration: updates, deletion, and statistics."""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from django.contrib.auth import get_user_model
from django.db.models import Count, Q
from django.utils import timezone

from access_control.principal import Principal
from access_control.roles import Role
from core.exceptions import ConflictingState

User = get_user_model()

logger = logging.getLogger(__name__)

STATS_WINDOW_DAYS = 30


def update_account(account, fields: dict[str, Any]):
    for attr, value in fields.items():
        setattr(account, attr, value)
    account.save()
    logger.info("Account %s updated fields=%s", account.pk, sorted(fields))
    return account


def delete_account(account, principal: Principal) -> None:
    """Hard-delete ``account``; its posts go with it. Self-deletion is refused."""
    if str(account.pk) == principal.id:
        raise ConflictingState("An account cannot delete itself.")
    account_id = account.pk
    account.delete()
    logger.info("Account %s deleted by %s", account_id, principal.id)


def account_stats(now: Optional[datetime] = None) -> dict[str, Any]:
    now = now or timezone.now()
    by_role = {f"role_{role.label}": Count("id", filter=Q(role=role.label)) for role in Role}
    counts = User.objects.aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(is_active=True)),
        new=Count("id", filter=Q(date_joined__gte=now - timedelta(days=STATS_WINDOW_DAYS))),
        **by_role,
    )
    return {
        "totalUsers": counts["total"],
        "activeUsers": counts["active"],
        "inactiveUsers": counts["total"] - counts["active"],
        "newUsers": counts["new"],
        "byRole": {role.label: counts[f"role_{role.label}"] for role in Role},
    }


__all__ = ["account_stats", "delete_account", "update_account"]
