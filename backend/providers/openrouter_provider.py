import logging

import httpx
from providers.base import BaseProvider

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "meta-llama/llama-3.3-70b-instruct:free"


class OpenRouterProvider(BaseProvider):
    """OpenRouter chat completions, tuned for short JSON nutrition replies."""

    def __init__(self, api_key: str, timeout: float = 30.0, max_tokens: int = 1024):
        self.api_key = api_key
        self.timeout = timeout
        self.max_tokens = max_tokens

    @property
    def name(self) -> str:
        return "openrouter"

    async def chat(self, messages: list[dict], model: str | None = None) -> dict:
        used_model = model or DEFAULT_MODEL
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "X-Title": "NoteGym App",
        }
        body = {
            "model": used_model,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": 0.2,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(OPENROUTER_URL, headers=headers, json=body)
                response.raise_for_status()
                choices = response.json().get("choices") or []
        except httpx.TimeoutException:
            return self.result(used_model, error="Timeout")
        except (httpx.HTTPError, ValueError) as e:
            return self.result(used_model, error=str(e))

        if not choices:
            return self.result(used_model, error="Empty response")
        text = (choices[0].get("message") or {}).get("content")
        if not text:
            return self.result(used_model, error="Empty response")
        logger.debug(f"OpenRouter {used_model} replied with {len(text)} chars")
        return self.result(used_model, text=text)
