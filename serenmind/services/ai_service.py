import re
import json
import logging
from functools import lru_cache
from typing import List, Optional

import httpx
import google.generativeai as genai
from pydantic import ValidationError

from serenmind import config
from serenmind.config import ConfigurationError
from serenmind.models.chat import (
    AnalysisPayload, CompletionOutcome, CompletionResponse, CompletionResult
)
from serenmind.models.metrics import MentalMetricCreate, DEFAULT_TOPIC

logger = logging.getLogger(__name__)

system_instruction = """
    You are SerenMind, a warm, understanding and non-judgmental wellness companion.
    1. Always listen and acknowledge the user's feelings before offering suggestions.
    2. Use a gentle, caring tone and keep replies short, never a lecture.
    3. If the user is sad or stressed, you may suggest a calming song, a breathing exercise or a short activity.
    4. If the user shows signs of severe distress or wants to harm themselves, gently encourage them to reach out to a professional or a crisis line right away.
    """

FALLBACK_MESSAGES = {
    CompletionOutcome.BAD_REQUEST: "I'm sorry, I couldn't understand that request. Could you try rephrasing it?",
    CompletionOutcome.ACCESS_DENIED: (
        "I'm sorry, I can't reach my AI service right now because access was denied. "
        "Please let the app administrator know."
    ),
    CompletionOutcome.TRANSIENT: "Sorry, there was an issue connecting to the AI. Please try again in a moment.",
    CompletionOutcome.MALFORMED: "I'm sorry, I couldn't process your request.",
}

HARM_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)

_config_reported = set()


def report_configuration_error(e: ConfigurationError) -> None:
    if e.setting not in _config_reported:
        _config_reported.add(e.setting)
        logger.error("%s", e)


def clean_json_string(json_str: str) -> str:
    # First {...} block, across lines; drops ```json fences and chatter
    match = re.search(r'\{.*\}', json_str, re.DOTALL)
    if match:
        return match.group(0)
    return json_str.strip()


# ==========================================
# CHAT COMPLETION (REST generateContent)
# ==========================================

class GenerationClient:
    """Client for the Gemini ``generateContent`` endpoint.

    Every call returns a ``CompletionResult``; transport failures, non-2xx
    statuses and payloads that don't match ``CompletionResponse`` become
    typed outcomes instead of exceptions.
    """

    def __init__(
        self,
        api_key: str,
        model: str = config.GEMINI_CHAT_MODEL,
        base_url: str = config.GEMINI_API_BASE,
        timeout: float = config.CHAT_TIMEOUT_SECONDS,
        temperature: float = config.CHAT_TEMPERATURE,
        max_tokens: int = config.CHAT_MAX_TOKENS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"x-goog-api-key": api_key, "Content-Type": "application/json"},
        )

    def build_payload(self, contents: List[dict]) -> dict:
        return {
            "systemInstruction": {"parts": [{"text": system_instruction.strip()}]},
            "contents": contents,
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_tokens,
                "topK": 40,
                "topP": 0.95,
            },
            "safetySettings": [
                {"category": category, "threshold": config.SAFETY_THRESHOLD}
                for category in HARM_CATEGORIES
            ],
        }

    async def generate(self, contents: List[dict]) -> CompletionResult:
        try:
            response = await self._client.post(
                f"/models/{self.model}:generateContent",
                json=self.build_payload(contents),
            )
        except httpx.TimeoutException:
            logger.warning("Completion request timed out")
            return CompletionResult(outcome=CompletionOutcome.TRANSIENT, detail="timeout")
        except httpx.HTTPError as e:
            logger.warning("Completion request failed: %s", e)
            return CompletionResult(outcome=CompletionOutcome.TRANSIENT, detail=str(e))

        status_code = response.status_code
        if status_code == 400:
            outcome = CompletionOutcome.BAD_REQUEST
        elif status_code in (401, 403):
            outcome = CompletionOutcome.ACCESS_DENIED
        elif not response.is_success:
            outcome = CompletionOutcome.TRANSIENT
        else:
            outcome = None

        if outcome is not None:
            logger.warning("Completion endpoint returned %s: %s", status_code, response.text[:500])
            return CompletionResult(outcome=outcome, status_code=status_code)

        try:
            parsed = CompletionResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning("Malformed completion response: %s", e)
            return CompletionResult(outcome=CompletionOutcome.MALFORMED, status_code=status_code)

        text = parsed.first_text()
        if text is None:
            logger.warning("Completion response had no text (finish reason %s)", parsed.candidates[0].finish_reason)
            return CompletionResult(outcome=CompletionOutcome.MALFORMED, status_code=status_code)

        return CompletionResult(outcome=CompletionOutcome.OK, text=text, status_code=status_code)

    async def aclose(self) -> None:
        await self._client.aclose()


_generation_client: Optional[GenerationClient] = None


def get_generation_client() -> GenerationClient:
    global _generation_client
    if _generation_client is None:
        api_key = config.require(config.GOOGLE_API_KEY, "GOOGLE_API_KEY", "AI chat")
        _generation_client = GenerationClient(api_key)
    return _generation_client


def set_generation_client(client: Optional[GenerationClient]) -> None:
    global _generation_client
    _generation_client = client


async def close_generation_client() -> None:
    global _generation_client
    if _generation_client is not None:
        await _generation_client.aclose()
        _generation_client = None


def fallback_message(result: CompletionResult) -> str:
    return FALLBACK_MESSAGES.get(result.outcome, FALLBACK_MESSAGES[CompletionOutcome.TRANSIENT])


# ==========================================
# SIDE-CHANNEL ANALYSIS (SDK, JSON mode)
# ==========================================

ANALYSIS_PROMPT = """Analyze the following message and provide a JSON response with:
1. A mood score from 1-10 (1 being very negative, 10 being very positive)
2. The overall sentiment (positive, negative, or neutral)
3. Key topics mentioned (as an array of short lowercase strings)

Message: "{message}"

Respond with ONLY a JSON object in this exact format:
{{
  "moodScore": number,
  "sentiment": string,
  "topics": string[]
}}"""


@lru_cache(maxsize=1)
def get_analysis_model():
    api_key = config.require(config.GOOGLE_API_KEY, "GOOGLE_API_KEY", "message analysis")
    genai.configure(api_key=api_key)
    return genai.GenerativeModel(
        f"models/{config.GEMINI_ANALYSIS_MODEL}",
        generation_config={
            "response_mime_type": "application/json",
            "temperature": 0.1,
            "top_k": 1,
            "top_p": 0.1,
            "max_output_tokens": 200,
        },
    )


def analyze_message(message: str) -> MentalMetricCreate:
    """Score a chat message. Falls back to keyword matching when the model
    is unavailable or answers with something that isn't the expected JSON."""
    try:
        response = get_analysis_model().generate_content(ANALYSIS_PROMPT.format(message=message))
        data = json.loads(clean_json_string(response.text))
        payload = AnalysisPayload.model_validate(data)
        return MentalMetricCreate(
            mood_score=payload.mood_score,
            sentiment=payload.sentiment,
            topics=payload.topics,
        )
    except ConfigurationError as e:
        report_configuration_error(e)
    except (ValueError, ValidationError) as e:
        logger.warning("Analysis returned an unexpected payload: %s", e)
    except Exception as e:
        logger.warning("Analysis request failed: %s", e)

    return analyze_response_metrics(message)


SENTIMENT_KEYWORDS = {
    "positive": (1, [
        "happy", "joy", "great", "wonderful", "excellent", "amazing", "fantastic", "good", "positive",
        "better", "improve", "help", "support", "encourage", "hope", "relief", "calm", "peace",
        "grateful", "thankful",
    ]),
    "negative": (-1, [
        "sad", "angry", "upset", "terrible", "awful", "bad", "negative", "worse", "hurt", "pain",
        "anxiety", "stress", "worry", "fear", "scared", "depressed", "lonely", "tired", "exhausted",
    ]),
    "neutral": (0, [
        "okay", "fine", "alright", "neutral", "normal", "average", "moderate", "balanced", "stable",
    ]),
}

TOPIC_KEYWORDS = {
    "work": ["work", "job", "career", "office", "business", "project", "deadline", "meeting", "colleague", "boss"],
    "family": ["family", "parent", "child", "sibling", "spouse", "partner", "marriage", "relationship", "home",
               "household"],
    "health": ["health", "exercise", "fitness", "diet", "sleep", "rest", "energy", "physical", "mental", "wellness"],
    "social": ["friend", "social", "party", "gathering", "event", "group", "community", "network", "connection"],
    "personal": ["personal", "hobby", "interest", "passion", "goal", "dream", "aspiration", "growth", "development"],
    "stress": ["stress", "anxiety", "pressure", "tension", "worry", "concern", "overwhelm", "burnout"],
    "emotions": ["emotion", "feeling", "mood", "happiness", "sadness", "anger", "fear", "joy", "love", "hate"],
}


def analyze_response_metrics(text: str) -> MentalMetricCreate:
    """Keyword scoring: base score 5, moved one point per sentiment hit."""
    text = text.lower()

    score = 0
    hits = 0
    for weight, words in SENTIMENT_KEYWORDS.values():
        for word in words:
            if word in text:
                score += weight
                hits += 1

    if score > 0:
        sentiment = "positive"
    elif score < 0:
        sentiment = "negative"
    else:
        sentiment = "neutral"

    mood_score = 5 + score if hits else 5
    topics = [
        topic for topic, keywords in TOPIC_KEYWORDS.items()
        if any(keyword in text for keyword in keywords)
    ]

    return MentalMetricCreate(
        mood_score=mood_score,
        sentiment=sentiment,
        topics=topics or [DEFAULT_TOPIC],
    )
