import json
import google.generativeai as genai
from typing import Any, Dict

from loguru import logger

from cortex.config import ANALYSIS_TIMEOUT, GEMINI_API_KEY, GEMINI_MODEL
from cortex.models import TopicAnalysis
from cortex.scheduler import clamp_complexity

genai.configure(api_key=GEMINI_API_KEY)
model = genai.GenerativeModel(GEMINI_MODEL)

DEFAULT_CONTEXT = "General study"
MAX_SUBTOPICS = 5

FALLBACK_ANALYSIS = TopicAnalysis(
    complexity=5,
    subtopics=["Core Concepts", "Advanced Theory", "Practical Application"],
    summary="Data packet analysis failed. Standard protocol initiated.",
    fallback=True
)

def _build_prompt(topic_name: str, context: str) -> str:
    return f"""Analyze the learning topic: "{topic_name}". Context: {context}.
        Return JSON only, following this model:
        {{
            "complexity": 7,
            "subtopics": ["sub-concept 1", "sub-concept 2", "sub-concept 3"],
            "summary": "one sentence"
        }}

        complexity: estimated complexity of the topic on a scale of 1 to 10, where 10 is extremely dense academic material.
        subtopics: a list of 3-5 key sub-concepts or chapters within this topic that should be reviewed.
        summary: a very brief, one-sentence sci-fi style description of the data packet.
        """

def parse_analysis(generated_text: str) -> TopicAnalysis:
    """
    Converts the model output into a TopicAnalysis.

    Raises ValueError (json.JSONDecodeError included) or KeyError/TypeError
    when the payload does not have the expected shape.
    """

    json_str = generated_text.strip()
    if json_str.startswith('```'):
        json_str = json_str.split('\n', 1)[1].rsplit('\n', 1)[0]

    parsed_data: Dict[str, Any] = json.loads(json_str)

    subtopics = parsed_data["subtopics"]
    if not isinstance(subtopics, list):
        raise TypeError(f"subtopics must be a list, got {type(subtopics).__name__}")

    summary = parsed_data["summary"]
    if not isinstance(summary, str):
        raise TypeError(f"summary must be a string, got {type(summary).__name__}")

    return TopicAnalysis(
        complexity=clamp_complexity(parsed_data["complexity"]),
        subtopics=[str(subtopic) for subtopic in subtopics][:MAX_SUBTOPICS],
        summary=summary
    )

async def analyze_topic(topic_name: str, context: str | None = None) -> TopicAnalysis:
    """
    Asks Gemini for the complexity and sub-concepts of a topic.

    Never raises: any API or parsing failure returns FALLBACK_ANALYSIS so
    that a schedule can still be generated.
    """

    try:
        response = await model.generate_content_async(
            _build_prompt(topic_name, context or DEFAULT_CONTEXT),
            generation_config={"response_mime_type": "application/json"},
            request_options={"timeout": ANALYSIS_TIMEOUT}
        )
        generated_text = response.text
        if not generated_text:
            raise ValueError("Empty response from the analysis model.")

    except Exception as e:
        logger.warning(f"Topic analysis failed for '{topic_name}': {e}")
        return FALLBACK_ANALYSIS.model_copy(deep=True)

    try:
        return parse_analysis(generated_text)
    except (ValueError, KeyError, TypeError) as e:
        logger.warning(f"Invalid analysis payload for '{topic_name}': {e}")
        return FALLBACK_ANALYSIS.model_copy(deep=True)
