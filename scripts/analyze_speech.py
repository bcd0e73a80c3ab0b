import asyncio
import json
import os
import sys

# Add project root to path so we can import speechcoach
sys.path.append(os.getcwd())

from speechcoach.controllers.dependencies import get_analysis_pipeline, get_feedback_repository
from speechcoach.errors import AnalysisError
from speechcoach.pipelines.speech import AnalysisRequest
from speechcoach.views import AnalyzeSpeechResponse


async def main():
    if len(sys.argv) < 3:
        print("Usage: python scripts/analyze_speech.py <audio_url> <speech_id> [prompt]")
        return 1

    request = AnalysisRequest(
        audio_url=sys.argv[1],
        speech_id=sys.argv[2],
        prompt_used=sys.argv[3] if len(sys.argv) > 3 else None,
    )

    try:
        pipeline = get_analysis_pipeline(get_feedback_repository())
    except AnalysisError as exc:
        print(f"Cannot build pipeline: {exc}")
        return 1

    print(f"Analyzing speech {request.speech_id}...")
    result = await pipeline.run(request)
    print("Stages: " + " -> ".join(stage.value for stage in result.history))

    if not result.succeeded:
        print(f"Failed ({result.error.kind}): {result.error}")
        if result.transcript is not None:
            print(f"Transcript was saved: {result.transcript}")
        return 1

    response = AnalyzeSpeechResponse.from_result(result)
    print(json.dumps(response.model_dump(mode="json"), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
