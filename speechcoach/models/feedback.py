"""SQLAlchemy model and rating enums for AI coaching feedback."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from speechcoach.models.base import Base

_JSON_LIST = JSON().with_variant(JSONB(), "postgresql")


class _ParsableEnum(str, Enum):
    @classmethod
    def parse(cls, value: object):
        """Return the matching member, or None for values the model invented."""

        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return None
        return None


class PaceRating(_ParsableEnum):
    """Speaking pace as judged by the language model."""

    TOO_FAST = "too_fast"
    GOOD = "good"
    TOO_SLOW = "too_slow"


class ClarityRating(_ParsableEnum):
    """Clarity of message as judged by the language model."""

    POOR = "poor"
    FAIR = "fair"
    GOOD = "good"
    EXCELLENT = "excellent"


class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(
        String(64),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        nullable=False,
    )
    speech_id = Column(
        ForeignKey("speeches.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(
        String(64),
        nullable=False,
        index=True,
    )
    confidence_score = Column(Integer, nullable=True)
    # Ratings stay plain strings so unrecognized model values are kept verbatim.
    pace_rating = Column(String(32), nullable=True)
    clarity_rating = Column(String(32), nullable=True)
    filler_words_count = Column(Integer, nullable=False, default=0)
    strengths = Column(_JSON_LIST, nullable=False, default=list)
    improvements = Column(_JSON_LIST, nullable=False, default=list)
    ai_summary = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        # Stamped in Python so rows written within the same second still order.
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    # relationships
    speech = relationship("Speech", back_populates="feedback")


__all__ = ["Feedback", "PaceRating", "ClarityRating"]
