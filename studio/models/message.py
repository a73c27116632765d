import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from studio.db.base import Base

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"


class Message(Base):
    """A conversation turn attached to a gallery entry."""

    __tablename__ = "message"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=lambda: str(uuid.uuid4()))
    gallery_id: Mapped[str] = mapped_column(
        Text, ForeignKey("gallery.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)  # user | assistant
    content: Mapped[str] = mapped_column(Text, nullable=False)
    tokens_used: Mapped[int | None] = mapped_column(Integer, nullable=True)  # assistant messages only
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    gallery: Mapped["Gallery"] = relationship("Gallery", back_populates="messages")  # noqa: F821
