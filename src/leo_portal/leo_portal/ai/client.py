from __future__ import annotations

import json
import logging
from typing import Any, Optional

import requests

from ..core.exceptions import IntegrationError

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiClient:
    """Minimal Gemini REST client that asks for JSON output."""

    def __init__(
        self,
        api_key: Optional[str],
        *,
        model: str = "gemini-1.5-flash",
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _extract_text(self, data: dict) -> str:
        return data.get("candidates", [{}])[0].get("content", {}).get("parts", [{}])[0].get("text", "")

    def generate_json(self, prompt: str) -> Any:
        if not self.configured:
            raise IntegrationError("The AI assistant is not configured")

        url = f"{GEMINI_API_BASE}/{self._model}:generateContent"
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"responseMimeType": "application/json", "temperature": 0.7},
        }
        try:
            r = self._session.post(url, params={"key": self._api_key}, json=payload, timeout=self._timeout)
            r.raise_for_status()
            text = self._extract_text(r.json())
        except requests.RequestException as e:
            logger.exception("Gemini request failed")
            raise IntegrationError("Could not reach the AI assistant, please try again") from e
        except (ValueError, IndexError, AttributeError) as e:
            logger.exception("Unexpected Gemini response")
            raise IntegrationError("The AI assistant returned an unexpected response") from e

        if not text:
            raise IntegrationError("The AI assistant returned an empty response")

        try:
            return json.loads(_strip_code_fence(text))
        except json.JSONDecodeError as e:
            logger.warning("Gemini returned non-JSON text: %.200s", text)
            raise IntegrationError("The AI assistant returned an unreadable response") from e


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()
