from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from studymate.core.errors import GenerationError


class OllamaClient:
    """
    Minimal Ollama client for local generation.

    Uses /api/generate (simple) to keep integration stable.
    """

    def __init__(self, base_url: str, model: str, timeout_s: float = 120.0, system: Optional[str] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout_s = timeout_s
        self.system = system

    def generate(self, prompt: str, temperature: float = 0.2) -> str:
        url = f"{self.base_url}/api/generate"

        payload: Dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": temperature,
            },
        }
        if self.system:
            payload["system"] = self.system

        try:
            with httpx.Client(timeout=self.timeout_s) as client:
                r = client.post(url, json=payload)
                r.raise_for_status()
                data = r.json()
        except httpx.HTTPError as e:
            raise GenerationError(f"Error calling Ollama: {e}", status_code=502) from e
        except ValueError as e:
            raise GenerationError("Ollama returned a malformed response", status_code=502) from e

        # Ollama returns {"response": "...", ...}
        if not isinstance(data, dict):
            raise GenerationError("Ollama returned a malformed response", status_code=502)
        text = str(data.get("response") or "").strip()
        if not text:
            raise GenerationError("No content generated", status_code=422)
        return text
