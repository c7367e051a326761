"""Role taxonomy: a single total order over the four account roles."""

from enum import IntEnum

from core.exceptions import InvalidParameter


class Role(IntEnum):
    """Account roles ordered by privilege (``USER < AUTHOR < EDITOR < ADMIN``)."""

    USER = 0
    AUTHOR = 1
    EDITOR = 2
    ADMIN = 3

    @property
    def label(self) -> str:
        """Lower-case name as stored on the account and sent over the wire."""
        return self.name.lower()

    @classmethod
    def parse(cls, value: "str | Role") -> "Role":
        """Resolve a stored/wire role name into a Role, rejecting unknown names."""
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise InvalidParameter(f"Unknown role '{value}'.") from None

    @classmethod
    def choices(cls) -> list[tuple[str, str]]:
        """Django field choices in privilege order."""
        return [(role.label, role.label.capitalize()) for role in cls]


DEFAULT_ROLE = Role.USER


def meets_minimum(role: Role, threshold: Role) -> bool:
    """Return True if ``role`` is at least as privileged as ``threshold``."""
    return Role.parse(role) >= threshold


__all__ = ["DEFAULT_ROLE", "Role", "meets_minimum"]
