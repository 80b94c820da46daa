"""
Acting identity handed to the engine by the auth collaborator.

The engine never authenticates; it only checks the role it is given and,
for owner operations, re-checks establishment ownership inside the
admission transaction.
"""

from dataclasses import dataclass
from typing import Optional

from ..models.user import UserRole
from .exceptions import ForbiddenException


@dataclass(frozen=True)
class Principal:
    id: str
    role: UserRole
    name: Optional[str] = None
    email: Optional[str] = None

    def require_role(self, *roles: UserRole) -> None:
        if self.role not in roles:
            allowed = ", ".join(role.value for role in roles)
            raise ForbiddenException(
                f"This action requires role {allowed}",
                details={"role": self.role.value},
            )

    def require_customer(self) -> None:
        self.require_role(UserRole.CUSTOMER)

    def require_owner_of(self, owner_id: Optional[str]) -> None:
        """ADMIN role and ownership of the establishment."""
        self.require_role(UserRole.ADMIN)
        if owner_id != self.id:
            raise ForbiddenException("You do not own this establishment")
