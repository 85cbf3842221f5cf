from __future__ import annotations

import logging
from typing import Any, Dict

import httpx

from studymate.core.errors import GenerationError

logger = logging.getLogger(__name__)


class GeminiClient:
    """
    Minimal Gemini REST client (generateContent, no streaming).
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = "gemini-2.0-flash",
        base_url: str = "https://generativelanguage.googleapis.com",
        timeout_s: float = 60.0,
        max_output_tokens: int = 1024,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.max_output_tokens = max_output_tokens

    def generate(self, prompt: str, temperature: float = 0.2) -> str:
        if not self.api_key:
            logger.error("Gemini API key is not set")
            raise GenerationError("API key configuration error", status_code=500)

        url = f"{self.base_url}/v1/models/{self.model}:generateContent"
        payload: Dict[str, Any] = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "topK": 40,
                "topP": 0.95,
                "maxOutputTokens": self.max_output_tokens,
            },
        }

        logger.info("Calling Gemini API (model=%s, prompt length=%d)", self.model, len(prompt))
        try:
            timeout = httpx.Timeout(self.timeout_s, connect=10.0)
            with httpx.Client(timeout=timeout) as client:
                r = client.post(url, json=payload, headers={"x-goog-api-key": self.api_key})
        except httpx.HTTPError as e:
            logger.error("Error calling Gemini API: %s", e)
            raise GenerationError(f"Error calling Gemini API: {e}", status_code=502) from e

        logger.info("Gemini API response status: %s", r.status_code)
        try:
            data = r.json()
        except ValueError:
            data = {}

        if r.status_code >= 400:
            detail = (data.get("error") or {}).get("message") if isinstance(data, dict) else None
            logger.error("Gemini API error: %s", data or r.text[:200])
            raise GenerationError(f"Gemini API error: {detail or r.text[:200]}", status_code=502)

        text = _candidate_text(data)
        if not text:
            logger.error("No content generated from Gemini API")
            raise GenerationError("No content generated", status_code=422)
        return text


def _candidate_text(data: Any) -> str:
    # {"candidates":[{"content":{"parts":[{"text":"..."}]}}]}
    if not isinstance(data, dict):
        return ""
    candidates = data.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    if not parts or not isinstance(parts[0], dict):
        return ""
    return (parts[0].get("text") or "").strip()
