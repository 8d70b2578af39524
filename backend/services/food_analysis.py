"""
food_analysis.py — LLM-backed macro estimation.
Tries each configured model in order; the first reply that contains a JSON object wins.
"""

import json
import logging

from config import OPENROUTER_API_KEY, OPENROUTER_TEXT_MODELS
from providers.base import BaseProvider
from providers.openrouter_provider import OpenRouterProvider
from services.errors import AnalysisUnavailableError, ValidationError

logger = logging.getLogger(__name__)

FOOD_PROMPT = """
You are a nutrition expert. Estimate the total macros of the food the user describes.
Reply with pure JSON, no markdown:
{"name": string, "calories": number, "protein": number, "carbs": number, "fat": number, "fiber": number}
"""

MACRO_CHAT_PROMPT = """
Act as an expert nutritionist. Extract age, weight, height, gender and goal from the conversation.
RULES:
1. If you have ALL the data: compute TDEE, adjust it to the goal, split macros 30/40/30.
   Return JSON: {"type": "final", "data": {"calories": number, "protein": number, "carbs": number, "fat": number, "fiber": number, "message": "Summary..."}}
2. If something is MISSING: return JSON: {"type": "question", "message": "Ask for what is missing..."}
PURE JSON, NO MARKDOWN.
"""

MACRO_KEYS = ("calories", "protein", "carbs", "fat", "fiber")


def extract_json(text: str | None) -> dict | None:
    """Parse the outermost {...} block of a model reply."""
    if not text:
        return None
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end <= start:
        return None
    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def round_macros(data: dict) -> dict:
    rounded = dict(data)
    for k in MACRO_KEYS:
        try:
            rounded[k] = int(round(float(data.get(k) or 0)))
        except (TypeError, ValueError):
            rounded[k] = 0
    return rounded


class FoodAnalysisService:
    def __init__(self, provider: BaseProvider | None = None, models: list[str] | None = None):
        self.provider = provider or (OpenRouterProvider(OPENROUTER_API_KEY) if OPENROUTER_API_KEY else None)
        self.models = models or OPENROUTER_TEXT_MODELS

    async def _cascade(self, messages: list[dict]) -> dict:
        if self.provider is None:
            raise AnalysisUnavailableError("Food analysis is not configured")
        for model in self.models:
            resp = await self.provider.chat(messages, model=model)
            if resp.get("status") != "success":
                logger.warning(f"Model {model} failed: {resp.get('error')}")
                continue
            data = extract_json(resp.get("text"))
            if data is None:
                logger.warning(f"Model {model} returned no usable JSON")
                continue
            return data
        raise AnalysisUnavailableError("Could not calculate it. Try entering it manually.")

    async def analyze_text(self, text: str) -> dict:
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("Describe the food to analyze")
        data = await self._cascade([
            {"role": "system", "content": FOOD_PROMPT},
            {"role": "user", "content": text.strip()},
        ])
        data.setdefault("name", text.strip())
        return round_macros(data)

    async def macro_chat(self, history: list[dict]) -> dict:
        if not isinstance(history, list) or not history:
            raise ValidationError("Conversation history is required")
        data = await self._cascade([{"role": "system", "content": MACRO_CHAT_PROMPT}, *history])
        if data.get("type") == "final" and isinstance(data.get("data"), dict):
            data["data"] = round_macros(data["data"])
        elif data.get("type") != "question":
            data = {"type": "question", "message": data.get("message") or "Could you tell me more about yourself?"}
        return data


def get_food_analysis() -> FoodAnalysisService:
    """FastAPI dependency, overridable in tests."""
    return FoodAnalysisService()
