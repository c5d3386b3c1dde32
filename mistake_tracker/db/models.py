"""
Table models for durable mistake and retest storage.

Column names follow Python naming; the camelCase wire names live in the
API schemas.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class MistakeRow(Base):
    """A logged mistake."""

    __tablename__ = "mistakes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    root_cause: Mapped[str | None] = mapped_column(Text)
    corrected_principle: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    retest_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    mastered: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    retests: Mapped[list[RetestRow]] = relationship(
        back_populates="mistake",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class RetestRow(Base):
    """A scheduled retest for one mistake."""

    __tablename__ = "retests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    mistake_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("mistakes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    scheduled_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    result: Mapped[str | None] = mapped_column(String(10))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    mistake: Mapped[MistakeRow] = relationship(back_populates="retests")
