import logging
from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from bio_generator.collector.prompts import SYSTEM_PROMPT
from bio_generator.config import Settings, get_settings

logger = logging.getLogger(__name__)
ERROR_LOG_LIMIT = 1000
PROMPT_LOG_LIMIT = 600


class EmptyCompletionError(RuntimeError):
    """The provider answered without any text."""


class GroqChatClient:
    """Single-shot chat completion against Groq's OpenAI-compatible endpoint."""

    def __init__(self, settings: Settings | None = None, system_prompt: str = SYSTEM_PROMPT) -> None:
        self.settings = settings or get_settings()
        self.system_prompt = system_prompt
        self._llm: Any | None = None

    async def generate(self, prompt_text: str, temperature: float, model_id: str) -> str:
        llm = self._get_llm()
        messages = [SystemMessage(content=self.system_prompt), HumanMessage(content=prompt_text)]
        logger.info(
            "llm.request model=%s temperature=%.2f prompt=%s",
            model_id,
            temperature,
            self._clip(prompt_text, PROMPT_LOG_LIMIT),
        )
        try:
            response = await llm.bind(model=model_id, temperature=temperature).ainvoke(messages)
        except Exception as exc:
            logger.error(
                "llm.error model=%s type=%s detail=%s",
                model_id,
                exc.__class__.__name__,
                self._error_detail(exc),
            )
            raise
        text = self._message_text(getattr(response, "content", response))
        if not text.strip():
            raise EmptyCompletionError(f"model {model_id} returned an empty completion")
        logger.info("llm.response model=%s chars=%d", model_id, len(text))
        return text

    def _get_llm(self):
        if self._llm is None:
            self._llm = ChatOpenAI(
                model=self.settings.default_model,
                api_key=self.settings.groq_api_key or None,
                base_url=self.settings.groq_base_url,
                timeout=self.settings.llm_timeout_seconds,
                max_retries=self.settings.llm_num_retries,
            )
        return self._llm

    @staticmethod
    def _message_text(content: Any) -> str:
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            parts: list[str] = []
            for item in content:
                if isinstance(item, dict):
                    parts.append(str(item.get("text", "")))
                else:
                    parts.append(str(item))
            return "\n".join(part for part in parts if part)
        if content is None:
            return ""
        return str(content)

    @staticmethod
    def _clip(text: str, limit: int) -> str:
        normalized = " ".join(text.split())
        if len(normalized) <= limit:
            return normalized
        return f"{normalized[:limit]}...(truncated)"

    def _error_detail(self, exc: Exception) -> str:
        status_code = getattr(exc, "status_code", None)
        detail = str(exc)
        if status_code is not None:
            detail = f"status_code={status_code} {detail}"
        return self._clip(detail, ERROR_LOG_LIMIT)
