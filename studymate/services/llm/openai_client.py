from __future__ import annotations

import os

from studymate.core.errors import GenerationError


def _build_openai_client(timeout_sec: float):
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise GenerationError("API key configuration error", status_code=500)

    # OpenAI SDK v1+; the proxy itself never retries
    from openai import OpenAI  # type: ignore

    return OpenAI(api_key=api_key, timeout=timeout_sec, max_retries=0)


class OpenAIChatClient:
    def __init__(self, model: str = "gpt-4o-mini", timeout_s: float = 60.0, max_output_tokens: int = 1024) -> None:
        self.model = model
        self.timeout_s = timeout_s
        self.max_output_tokens = max_output_tokens
        self._client = None

    def generate(self, prompt: str, temperature: float = 0.2) -> str:
        if self._client is None:
            self._client = _build_openai_client(self.timeout_s)

        from openai import OpenAIError  # type: ignore

        try:
            chat = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=self.max_output_tokens,
            )
        except OpenAIError as e:
            raise GenerationError(f"OpenAI API error: {e}", status_code=502) from e

        text = (chat.choices[0].message.content or "").strip() if chat.choices else ""
        if not text:
            raise GenerationError("No content generated", status_code=422)
        return text
