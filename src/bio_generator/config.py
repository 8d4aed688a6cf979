from functools import lru_cache
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ModelOption(BaseModel):
    id: str
    label: str
    size: str = ""
    vendor: str = ""


def _default_model_catalog() -> list[ModelOption]:
    return [
        ModelOption(id="llama3-8b-8192", label="Llama 3", size="8B", vendor="Meta"),
        ModelOption(id="deepseek-r1-distill-llama-70b", label="Deepseek R1", size="70B", vendor="Hugging Face"),
        ModelOption(id="gemma2-9b-it", label="Gemma 2", size="9B", vendor="Google"),
    ]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        protected_namespaces=(),
    )

    groq_api_key: str = Field(default="", alias="GROQ_API_KEY")
    groq_base_url: str = Field(default="https://api.groq.com/openai/v1", alias="GROQ_BASE_URL")
    default_model: str = Field(default="llama3-8b-8192", alias="DEFAULT_MODEL")
    llm_timeout_seconds: float | None = Field(default=None, alias="LLM_TIMEOUT_SECONDS")
    llm_num_retries: int = Field(default=0, alias="LLM_NUM_RETRIES")

    max_sessions: int = Field(default=1000, alias="MAX_SESSIONS")
    model_catalog: list[ModelOption] = Field(default_factory=_default_model_catalog, alias="MODEL_CATALOG")

    def model_post_init(self, __context: Any) -> None:  # type: ignore[override]
        seen: set[str] = set()
        catalog: list[ModelOption] = []
        for option in self.model_catalog:
            model_id = option.id.strip()
            if not model_id or model_id in seen:
                continue
            seen.add(model_id)
            catalog.append(option.model_copy(update={"id": model_id}))
        self.model_catalog = catalog or _default_model_catalog()
        self.default_model = self.default_model.strip() or self.model_catalog[0].id
        self.max_sessions = max(1, self.max_sessions)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
