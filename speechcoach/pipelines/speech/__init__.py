"""Speech analysis pipeline package.

Modules are organised by the order in which `/analyze-speech` executes:

1. `locator` – turn the audio URL into a blob-store object key.
2. `prompts` – assemble the coaching system/user prompts.
3. `flow` – the state machine that sequences download, transcription,
   prompting, parsing and persistence.

`types` holds the request/result containers and collaborator protocols.
"""

from .flow import PipelineStage, SpeechAnalysisPipeline
from .locator import resolve_object_key
from .prompts import build_feedback_prompt
from .types import AnalysisRequest, AnalysisResult, AnalysisStage, FeedbackPrompt

__all__ = [
    "AnalysisRequest",
    "AnalysisResult",
    "AnalysisStage",
    "FeedbackPrompt",
    "PipelineStage",
    "SpeechAnalysisPipeline",
    "build_feedback_prompt",
    "resolve_object_key",
]
