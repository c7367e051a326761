"""The acting principal attached to a request after credential verification."""

from dataclasses import dataclass

from .roles import Role


@dataclass(frozen=True)
class Principal:
    """Immutable identity for the remainder of a request.

    Built once by the identity verifier from the stored account; never
    rebuilt from client-supplied fields.
    """

    id: str
    role: Role
    active: bool = True

    @classmethod
    def from_account(cls, account) -> "Principal":
        """Snapshot an account record (anything with id/role/is_active)."""
        return cls(
            id=str(account.id),
            role=Role.parse(account.role),
            active=bool(account.is_active),
        )


__all__ = ["Principal"]
