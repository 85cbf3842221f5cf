from __future__ import annotations

from typing import Protocol

from studymate.core.config import Settings, settings
from studymate.services.llm.gemini_client import GeminiClient
from studymate.services.llm.ollama_client import OllamaClient
from studymate.services.llm.openai_client import OpenAIChatClient


class LLMClient(Protocol):
    def generate(self, prompt: str, temperature: float = 0.2) -> str: ...


def build_llm_client(cfg: Settings = settings) -> LLMClient:
    provider = (cfg.generation_provider or "gemini").strip().lower()
    if provider == "gemini":
        return GeminiClient(
            api_key=cfg.gemini_api_key,
            model=cfg.gemini_model,
            base_url=cfg.gemini_base_url,
            timeout_s=cfg.generation_timeout_sec,
            max_output_tokens=cfg.generation_max_output_tokens,
        )
    if provider == "openai":
        return OpenAIChatClient(
            model=cfg.openai_model,
            timeout_s=cfg.generation_timeout_sec,
            max_output_tokens=cfg.generation_max_output_tokens,
        )
    if provider == "ollama":
        return OllamaClient(base_url=cfg.ollama_base_url, model=cfg.ollama_model, timeout_s=cfg.generation_timeout_sec)
    raise ValueError(f"Unsupported GENERATION_PROVIDER: {cfg.generation_provider!r}")


__all__ = ["LLMClient", "GeminiClient", "OllamaClient", "OpenAIChatClient", "build_llm_client"]
