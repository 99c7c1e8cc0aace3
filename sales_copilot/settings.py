import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .llm_scorer import LLMClient

logger = logging.getLogger(__name__)

# Placeholder shipped in example .env files
PLACEHOLDER_API_KEY = "sua_chave_aqui_quando_tiver"


class Settings(BaseModel):
    use_llm: bool = Field(False, description="Call the language model instead of the local fallbacks")
    openai_api_key: Optional[str] = None
    llm_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.3
    llm_max_tokens: int = 1000
    llm_timeout_seconds: float = 60.0
    environment: str = "development"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings once from the process environment and an optional .env file"""
        load_dotenv()

        api_key = os.getenv("OPENAI_API_KEY")
        if api_key == PLACEHOLDER_API_KEY:
            api_key = None

        return cls(
            use_llm=os.getenv("USE_REAL_AI", "false").strip().lower() == "true",
            openai_api_key=api_key or None,
            llm_model=os.getenv("DEFAULT_LLM_MODEL", "gpt-4o-mini"),
            llm_temperature=float(os.getenv("LLM_TEMPERATURE", "0.3")),
            llm_max_tokens=int(os.getenv("LLM_MAX_TOKENS", "1000")),
            llm_timeout_seconds=float(os.getenv("LLM_TIMEOUT_SECONDS", "60")),
            environment=os.getenv("ENVIRONMENT", "development"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def llm_enabled(self) -> bool:
        return self.use_llm and bool(self.openai_api_key)


def build_llm_client(settings: Settings) -> Optional[LLMClient]:
    """Create the model client, or None when model calls are disabled or no key is configured"""
    if not settings.use_llm:
        logger.warning("USE_REAL_AI is not enabled, classifiers will use local fallbacks")
        return None
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set, classifiers will use local fallbacks")
        return None

    return LLMClient(
        api_key=settings.openai_api_key,
        model=settings.llm_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        timeout=settings.llm_timeout_seconds,
    )
