"""Prompt construction stage for the speech analysis pipeline.

The JSON shape requested here is the contract that
``speechcoach.services.response_contract.FeedbackAnalysis`` decodes.
"""

from __future__ import annotations

from .types import FeedbackPrompt

DEFAULT_PROMPT_TOPIC = "General speaking practice"

SYSTEM_PROMPT = (
    "You are an expert public speaking coach. Always respond with valid JSON only."
)

_USER_PROMPT_TEMPLATE = """You are an expert public speaking coach analyzing a speech transcript. The speaker was responding to this prompt: "{topic}"

Transcript:
"{transcript}"

Analyze this speech and provide detailed feedback in the following JSON structure:
{{
  "confidence_score": <number 0-100>,
  "pace_rating": "<too_fast|good|too_slow>",
  "clarity_rating": "<poor|fair|good|excellent>",
  "filler_words_count": <number>,
  "strengths": [<array of 2-4 specific strengths as strings>],
  "improvements": [<array of 2-4 actionable improvements as strings>],
  "ai_summary": "<2-3 sentence encouraging summary of overall performance>"
}}

Focus on:
- Confidence and tone
- Speaking pace and rhythm
- Clarity of message
- Use of filler words ("um", "uh", "like", etc.)
- Structure and flow
- Engagement and delivery

Be specific, encouraging, and actionable in your feedback."""


def build_feedback_prompt(transcript: str, prompt_used: str | None) -> FeedbackPrompt:
    """Render the system/user prompts for one transcript. Pure and deterministic."""

    topic = prompt_used if prompt_used and prompt_used.strip() else DEFAULT_PROMPT_TOPIC
    return FeedbackPrompt(
        system_prompt=SYSTEM_PROMPT,
        user_prompt=_USER_PROMPT_TEMPLATE.format(topic=topic, transcript=transcript),
    )


__all__ = ["DEFAULT_PROMPT_TOPIC", "SYSTEM_PROMPT", "build_feedback_prompt"]
