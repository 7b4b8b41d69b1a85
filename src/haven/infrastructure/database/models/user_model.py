"""
User Database Model

SQLAlchemy ORM model for portal accounts. The primary key is the
stable subject identifier issued by the external identity provider.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from haven.domain.clock import utc_now
from haven.infrastructure.database.connection import Base


class UserModel(Base):
    """
    User table ORM model.

    Table: users
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "role in ('therapist', 'office_admin', 'client')",
            name="ck_users_role",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        doc="Identity provider subject"
    )
    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        unique=True,
        nullable=True,
        index=True,
        doc="User email address"
    )
    first_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    profile_image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    role: Mapped[str] = mapped_column(
        String(20),
        default="client",
        nullable=False,
        index=True,
        doc="therapist, office_admin or client"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, role='{self.role}')>"

    @property
    def display_name(self) -> str:
        """Full name, falling back to email."""
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or (self.email or self.id)
