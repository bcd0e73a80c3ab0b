"""SQLAlchemy model for uploaded speeches."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, DateTime, String, Text, func
from sqlalchemy.orm import relationship

from speechcoach.models.base import Base


class Speech(Base):
    __tablename__ = "speeches"

    id = Column(
        String(64),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        nullable=False,
    )
    user_id = Column(
        String(64),
        nullable=False,
        index=True,
    )
    title = Column(String(255), nullable=False, default="")
    audio_url = Column(Text, nullable=False)
    prompt_used = Column(Text, nullable=True)
    # Filled in once by the analysis pipeline.
    transcript = Column(Text, nullable=True)
    is_assessment = Column(Boolean, nullable=False, default=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # relationships
    feedback = relationship(
        "Feedback",
        back_populates="speech",
        order_by="Feedback.created_at.desc()",
    )


__all__ = ["Speech"]
