import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from studio.db.base import Base


class Gallery(Base):
    """One edit request: the uploaded image, the result, and its token totals."""

    __tablename__ = "gallery"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=lambda: str(uuid.uuid4()))
    origin_image: Mapped[str] = mapped_column(Text, nullable=False)
    effect_image: Mapped[str] = mapped_column(Text, nullable=False)  # == origin_image until the call succeeds
    total_input_tokens: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_output_tokens: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True
    )

    # Relationships
    messages: Mapped[list["Message"]] = relationship(  # noqa: F821
        "Message", back_populates="gallery", cascade="all, delete-orphan", order_by="Message.created_at"
    )

    @property
    def total_tokens(self) -> int:
        return self.total_input_tokens + self.total_output_tokens
