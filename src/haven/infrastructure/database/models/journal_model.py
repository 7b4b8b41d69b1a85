"""
Journal Database Model

PRIVACY: Journal content is PHI once shared with a therapist.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from haven.domain.clock import utc_now
from haven.infrastructure.database.connection import Base


class JournalModel(Base):
    """
    Journal entry ORM model.

    Table: journals
    """

    __tablename__ = "journals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="Author"
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    is_shared: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        doc="Visible to the therapist when true"
    )

    def __repr__(self) -> str:
        return f"<JournalModel(id={self.id}, user_id={self.user_id}, shared={self.is_shared})>"
