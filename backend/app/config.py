"""Application configuration using pydantic-settings."""

import warnings
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


# Find .env file: check backend dir first, then project root
_BACKEND_DIR = Path(__file__).parent.parent
_PROJECT_ROOT = _BACKEND_DIR.parent
_ENV_FILE = _BACKEND_DIR / ".env" if (_BACKEND_DIR / ".env").exists() else _PROJECT_ROOT / ".env"

DEFAULT_PROFILES_DIR = _PROJECT_ROOT / "profiles"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Credentials are optional at startup. Features that need them fail with a
    "not configured" error when they are used, so the wizard can still
    generate and validate profiles without any external account.
    """

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LLM (OpenAI Responses API)
    openai_api_key: str = ""
    llm_model: str = "gpt-5-mini"
    llm_max_output_tokens: int = 4096
    spec_max_output_tokens: int = 8192

    # Outbound call window shared by the LLM and catalog clients
    upstream_timeout_seconds: float = 55.0

    # Simplifier.net catalog
    simplifier_api_key: str = ""
    simplifier_base_url: str = "https://api.simplifier.net"

    # CORS: "*" or a comma-separated list of origins
    frontend_url: str = "*"

    # Profile persistence: "download" returns content to the client,
    # "filesystem" writes into profiles_dir
    profile_storage: Literal["download", "filesystem"] = "filesystem"
    profiles_dir: Path = DEFAULT_PROFILES_DIR

    # Generated StructureDefinition defaults
    canonical_base_url: str = "http://example.org/fhir"
    default_publisher: str = "FHIRSquire"

    # Application
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3001

    @property
    def cors_origins(self) -> list[str]:
        """Parsed CORS origin list."""
        return [origin.strip() for origin in self.frontend_url.split(",") if origin.strip()] or ["*"]

    def model_post_init(self, __context) -> None:
        """Warn about unconfigured credentials."""
        if not self.openai_api_key:
            warnings.warn(
                "OPENAI_API_KEY not configured! Use-case analysis will be unavailable.",
                UserWarning,
                stacklevel=2,
            )
        if not self.simplifier_api_key:
            warnings.warn(
                "SIMPLIFIER_API_KEY not configured! Simplifier upload will be unavailable.",
                UserWarning,
                stacklevel=2,
            )


settings = Settings()
