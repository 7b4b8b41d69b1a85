"""
Compliance Database Models

Append-only tables (audit logs, login attempts, data disclosures) and
the per-session activity tracker used for idle timeouts.

PRIVACY: Audit rows reference subjects by id only. Never store
clinical content in the details column.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from haven.domain.clock import utc_now
from haven.infrastructure.database.connection import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")
EMAIL_MAX_LENGTH = 255


class AuditLogModel(Base):
    """
    Audit log ORM model. Write-once.

    Table: audit_logs
    """

    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        index=True,
        doc="Actor, null for unattributable failed logins"
    )
    action: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    resource_type: Mapped[str] = mapped_column(String(64), nullable=False)
    resource_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    target_user_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        index=True,
        doc="Subject whose data was touched"
    )
    ip_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    details: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<AuditLogModel(id={self.id}, action='{self.action}', resource_type='{self.resource_type}')>"


class LoginAttemptModel(Base):
    """
    Login attempt ORM model. Write-once.

    Table: login_attempts
    """

    __tablename__ = "login_attempts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[Optional[str]] = mapped_column(String(EMAIL_MAX_LENGTH), nullable=True, index=True)
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    failure_reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<LoginAttemptModel(id={self.id}, success={self.success})>"


class SessionActivityModel(Base):
    """
    Last-seen tracker for a portal session.

    Table: session_activity
    """

    __tablename__ = "session_activity"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
        doc="Session id carried in the session token"
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    last_activity: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    terminated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="Set once the session is ended by logout or timeout"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<SessionActivityModel(session_id={self.session_id}, user_id={self.user_id})>"

    @property
    def is_terminated(self) -> bool:
        return self.terminated_at is not None


class DataDisclosureModel(Base):
    """
    Record of PHI released to a third party. Write-once.

    Table: data_disclosures
    """

    __tablename__ = "data_disclosures"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    client_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    disclosed_by: Mapped[str] = mapped_column(String(64), nullable=False)
    recipient: Mapped[str] = mapped_column(String(255), nullable=False)
    purpose: Mapped[str] = mapped_column(Text, nullable=False)
    data_types: Mapped[List[str]] = mapped_column(JSONType, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<DataDisclosureModel(id={self.id}, client_id={self.client_id})>"
