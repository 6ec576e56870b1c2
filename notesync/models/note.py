"""
Note Model.

Database model for the local copy of a note.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from notesync.models.base import Base


class Note(Base):
    """
    Note database model.

    The id is generated client side when the note is created and is
    never rewritten. `synced` is true only while the stored version is
    known to match the remote service as of `updated_at`;
    `remote_known` records that some version reached the remote service.
    """

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        index=True,
    )
    synced: Mapped[bool] = mapped_column(
        default=False,
        nullable=False,
        index=True,
    )
    remote_known: Mapped[bool] = mapped_column(
        default=False,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title={self.title!r}, synced={self.synced})>"
