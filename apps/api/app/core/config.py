from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from agent_runner_sdk.builder import AgentDefaults
from agent_runner_sdk.types import CallbackConfig

BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    app_name: str = "agent-runner-callbacks"
    app_env: str = "development"
    app_port: int = 8000

    agent_runner_url: str = "http://localhost:8080"
    agent_runner_hmac_secret: str = ""
    agent_runner_client_id: str = "agent-runner-client"
    allow_unsigned_callbacks: bool = False

    callback_base_url: str = ""
    callback_timeout_seconds: int = 30

    default_model: str = "gpt-4o-mini"
    default_max_turns: int = 30
    default_max_tokens: int = 0
    default_temperature: float | None = None

    http_timeout_seconds: float = 30.0
    http_connect_timeout_seconds: float = 5.0
    sse_timeout_seconds: float = 600.0

    route_prefix: str = "/api/agent-runner"

    nonce_store_backend: str = "memory"
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0

    log_level: str = "INFO"

    cors_allow_origins: str = "http://localhost:5173,http://127.0.0.1:5173"

    model_config = SettingsConfigDict(
        env_file=(str(BASE_DIR / ".env"), ".env"),
        env_file_encoding="utf-8",
    )

    @property
    def redis_url(self) -> str:
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]

    @property
    def callback_config(self) -> CallbackConfig | None:
        if not self.callback_base_url:
            return None
        return {
            "base_url": self.callback_base_url.rstrip("/"),
            "timeout_sec": self.callback_timeout_seconds,
        }

    @property
    def agent_defaults(self) -> AgentDefaults:
        return AgentDefaults(
            model=self.default_model,
            max_turns=self.default_max_turns,
            max_tokens=self.default_max_tokens,
            temperature=self.default_temperature,
        )


settings = Settings()
