"""Pydantic model for validating the coaching model's JSON reply.

The model is asked for bare JSON but frequently wraps it in prose or a
Markdown fence, so decoding goes through :func:`extract_json_payload` first.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from speechcoach.errors import UnparsableAnalysis
from speechcoach.models.feedback import ClarityRating, PaceRating

logger = logging.getLogger("speechcoach.pipeline")

_FENCED_JSON_BLOCK = re.compile(r"```json\n?(.*?)\n?```", re.DOTALL)
_BRACED_OBJECT = re.compile(r"\{[\s\S]*\}")


def extract_json_payload(reply: str) -> str:
    """Pick the substring of a model reply that should hold the JSON object.

    Order matters: a ```json fence wins, then the greedy first-``{``-to-last-``}``
    span, then the raw reply unchanged.
    """

    fenced = _FENCED_JSON_BLOCK.search(reply)
    if fenced:
        return fenced.group(1)
    braced = _BRACED_OBJECT.search(reply)
    if braced:
        return braced.group(0)
    return reply


class FeedbackAnalysis(BaseModel):
    confidence_score: int | float
    pace_rating: str
    clarity_rating: str
    filler_words_count: Optional[int] = 0
    strengths: list[str]
    improvements: list[str]
    ai_summary: str

    model_config = {"extra": "ignore"}

    @field_validator("filler_words_count", mode="before")
    @classmethod
    def default_filler_count(cls, value: Any) -> Any:
        # Missing, null and zero-ish counts all collapse to 0.
        return value or 0

    @model_validator(mode="after")
    def flag_out_of_contract_values(self) -> "FeedbackAnalysis":
        # Values are kept as returned; consumers fall back to a neutral rendering.
        if not 0 <= self.confidence_score <= 100:
            logger.warning("confidence_score out of range: %s", self.confidence_score)
        if PaceRating.parse(self.pace_rating) is None:
            logger.warning("Unrecognized pace_rating: %r", self.pace_rating)
        if ClarityRating.parse(self.clarity_rating) is None:
            logger.warning("Unrecognized clarity_rating: %r", self.clarity_rating)
        return self

    @classmethod
    def from_model_reply(cls, reply: str) -> "FeedbackAnalysis":
        """Decode a raw completion into feedback, or raise UnparsableAnalysis."""

        payload = extract_json_payload(reply or "")
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise UnparsableAnalysis("Invalid AI response format") from exc

        if not isinstance(data, dict):
            raise UnparsableAnalysis("Invalid AI response format: expected a JSON object")

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise UnparsableAnalysis(
                f"Invalid AI response format: {exc.error_count()} invalid field(s)"
            ) from exc


__all__ = ["FeedbackAnalysis", "extract_json_payload"]
