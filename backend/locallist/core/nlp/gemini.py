"""
Thin client for the Gemini generateContent REST endpoint.

Only the text of the first candidate is returned; callers own parsing.
Any transport problem surfaces as a requests exception, anything wrong with
the configuration or the response envelope as GeminiError.
"""
import logging
from typing import Optional

import requests

from locallist.core.settings import Settings

logger = logging.getLogger(__name__)


class GeminiError(RuntimeError):
    pass


class GeminiClient:
    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta/models",
        timeout: float = 10.0,
        temperature: float = 0.3,
        max_output_tokens: int = 300,
        http: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.http = http or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiClient":
        return cls(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            base_url=settings.GEMINI_BASE_URL,
            timeout=settings.GEMINI_TIMEOUT_SECONDS,
            temperature=settings.GEMINI_TEMPERATURE,
            max_output_tokens=settings.GEMINI_MAX_OUTPUT_TOKENS,
        )

    def generate_json(self, prompt: str) -> str:
        """Ask for a JSON-only completion and return its raw text."""
        if not self.api_key:
            raise GeminiError("Gemini API key missing")

        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_output_tokens,
                "responseMimeType": "application/json",
            },
        }
        url = f"{self.base_url}/{self.model}:generateContent"
        r = self.http.post(url, params={"key": self.api_key}, json=body, timeout=self.timeout)
        r.raise_for_status()

        try:
            text = r.json()["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise GeminiError(f"Unexpected Gemini response shape: {e}") from e

        logger.debug("Gemini completion received (%d chars)", len(text or ""))
        return text or "{}"
