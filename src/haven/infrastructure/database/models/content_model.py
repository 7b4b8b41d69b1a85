"""
Therapeutic Content Database Models

Journaling prompts and self-help resources. A null client_id makes
the record global; otherwise it is scoped to one client.
"""

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from haven.infrastructure.database.connection import Base


class PromptModel(Base):
    """
    Journaling prompt ORM model.

    Table: prompts
    """

    __tablename__ = "prompts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    client_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
        doc="Scoped client, null for global prompts"
    )

    def __repr__(self) -> str:
        return f"<PromptModel(id={self.id}, client_id={self.client_id})>"


class ResourceModel(Base):
    """
    Self-help resource ORM model.

    Table: resources
    """

    __tablename__ = "resources"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(50), default="general", nullable=False)
    client_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
        doc="Scoped client, null for global resources"
    )

    def __repr__(self) -> str:
        return f"<ResourceModel(id={self.id}, category='{self.category}')>"
