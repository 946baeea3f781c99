"""Configuration management for the multi-source agent service."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AnyHttpUrl, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

_REPO_ROOT = Path(__file__).resolve().parents[2]
_PACKAGE_DIR = Path(__file__).resolve().parents[1]
# The repository .env wins, with the package directory and cwd as fallbacks.
_ENV_FILE_CANDIDATES: tuple[str, ...] = (
    str(_REPO_ROOT / ".env"),
    str(_PACKAGE_DIR / ".env"),
    ".env",
)

DEFAULT_STOP_WORDS: tuple[str, ...] = (
    "qual",
    "como",
    "onde",
    "quando",
    "porque",
    "para",
    "sobre",
)


class AgentSettings(BaseSettings):
    """Centralised configuration derived from environment variables."""

    app_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_file: str | None = Field(
        str(_REPO_ROOT / "log" / "agent.log"),
        description="Log file path; None or an empty string disables file output",
    )

    agent_host: str = Field("0.0.0.0", description="FastAPI bind host")
    agent_port: int = Field(3000, description="FastAPI bind port")
    agent_name: str = Field("MultiSourceAgent", description="Name used in the system prompt")

    openai_api_key: SecretStr | None = Field(None, description="OpenAI API key")
    openai_api_base: AnyHttpUrl = Field(
        "https://api.openai.com/v1", description="OpenAI-compatible API endpoint"
    )
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = Field(0.1, ge=0.0, le=2.0)
    openai_max_tokens: int = Field(1500, gt=0)

    max_iterations: int = Field(10, gt=0, description="Decision loop iteration cap")
    enable_bash_commands: bool = Field(False, description="Allow the bash_command tool to run")
    response_locale: Literal["pt-BR", "en"] = "pt-BR"

    sqlite_path: Path = Path("./data/sqlite")
    documents_path: Path = Path("./data/documents")

    history_file: Path = Path("./data/conversation_history.json")
    max_history_entries: int = Field(50, gt=0)
    export_dir: Path = Path("./data")
    history_stop_words: list[str] = Field(default_factory=lambda: list(DEFAULT_STOP_WORDS))

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_CANDIDATES,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> AgentSettings:
    """Return a cached AgentSettings instance."""

    return AgentSettings()


def require_llm_credentials(settings: AgentSettings) -> str:
    """Return the LLM API key or fail when it is not configured."""

    if settings.openai_api_key is None or not settings.openai_api_key.get_secret_value():
        raise ConfigurationError("OPENAI_API_KEY is required in the environment or .env file")
    return settings.openai_api_key.get_secret_value()


def resolved_env_file() -> str | None:
    """Return the first readable .env file from the candidate list."""

    for candidate in _ENV_FILE_CANDIDATES:
        path = Path(candidate).expanduser()
        if path.is_file():
            return str(path)
    return None


def env_file_candidates() -> tuple[str, ...]:
    """Expose configured env file search order for diagnostics."""

    return _ENV_FILE_CANDIDATES
