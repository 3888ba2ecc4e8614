from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ---- App ----
    app_env: str = "local"  # local|dev|prod
    database_url: str = "sqlite:///./unicensus.db"
    store_backend: str = "sql"  # sql|memory

    # ---- CORS (used by main.py) ----
    cors_allow_origins: list[str] | str = ["*"]

    # ---- Tickets ----
    default_note_author: str = "Staff"

    # ---- Draft ticket generator (OpenAI-compatible chat completions) ----
    # Disabled unless an API key or a base URL is set; the deterministic
    # fallback draft is used otherwise.
    draft_api_key: str | None = None
    draft_base_url: str | None = None
    draft_api_path: str = "/v1"
    draft_model: str = "local-model"
    draft_timeout_seconds: float = 20.0
    draft_temperature: float = 0.2

    def model_post_init(self, __context) -> None:
        backend = (self.store_backend or "sql").strip().lower()
        if backend not in ("sql", "memory"):
            raise ValueError(f"store_backend must be sql or memory, got {self.store_backend!r}")
        object.__setattr__(self, "store_backend", backend)

        env = (self.app_env or "local").strip().lower()
        is_prod = env in ("prod", "production")

        if is_prod:
            # Demo data lives only in memory; prod must persist.
            if backend == "memory":
                raise ValueError("CONFIG: store_backend=memory is not allowed in prod")

            origins = self.cors_allow_origins
            if origins == "*" or origins == ["*"] or (isinstance(origins, str) and "*" in origins):
                raise ValueError("SECURITY: cors_allow_origins wildcard is not allowed in prod")

    @property
    def draft_generator_enabled(self) -> bool:
        return bool(self.draft_api_key or self.draft_base_url)


settings = Settings()
