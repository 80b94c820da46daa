# backend/courtside/models/user.py
"""
User model.

Identity itself is owned by the auth collaborator; the engine only keeps
what it needs to route permissions and notifications: role, name, email.
"""

from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class UserRole(str, Enum):
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"  # establishment owner
    SYSADMIN = "SYSADMIN"


class User(Base):
    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(200), nullable=True)
    email = Column(String(255), nullable=True, unique=True, index=True)
    phone = Column(String(40), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.CUSTOMER.value)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    establishments = relationship("Establishment", back_populates="owner")

    __table_args__ = (
        CheckConstraint("role IN ('CUSTOMER', 'ADMIN', 'SYSADMIN')", name="ck_users_role"),
    )

    @property
    def display_name(self) -> str:
        return self.name or self.email or "Customer"

    def __repr__(self) -> str:
        return f"<User {self.id}: role={self.role}>"
