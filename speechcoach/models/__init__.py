"""SQLAlchemy models for the speech coaching backend."""

from .base import Base
from .feedback import ClarityRating, Feedback, PaceRating  # noqa: F401
from .speech import Speech  # noqa: F401

__all__ = [
    "Base",
    "Speech",
    "Feedback",
    "PaceRating",
    "ClarityRating",
]
