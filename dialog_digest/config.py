"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from dialog_digest.summarizer.remote import RemoteConfig


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """Dialogue digest configuration. All values come from environment variables."""

    # Storage
    data_dir: Path = Field(default=Path("data"))
    dialogues_file: Path | None = Field(default=None)
    summaries_dir: Path | None = Field(default=None)

    # Remote summarization (Anthropic-compatible endpoint)
    anthropic_api_key: str = Field(default="")
    anthropic_base_url: str = Field(default="")
    summary_model: str = Field(default="claude-sonnet-4-5-20250929")
    summary_min_length: int = Field(default=200)

    # Scheduler
    daily_summary_hour: int = Field(default=8, ge=0, le=23)
    daily_summary_minute: int = Field(default=0, ge=0, le=59)
    scheduler_timezone: str = Field(default="UTC")
    reconcile_on_startup: bool = Field(default=True)

    # HTTP
    http_host: str = Field(default="127.0.0.1")
    http_port: int = Field(default=3001)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_file=_env_file(), env_file_encoding="utf-8", extra="ignore"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    def get_dialogues_file(self) -> Path:
        """Path of the JSON file holding the full message log."""
        return self.dialogues_file or self.data_dir / "dialogues" / "current.json"

    def get_summaries_dir(self) -> Path:
        """Directory holding one ``<date>.md`` file per summarized day."""
        return self.summaries_dir or self.data_dir / "summaries"

    def remote_config(self) -> RemoteConfig | None:
        """Resolve the remote summarization endpoint, or None when unconfigured."""
        if not self.anthropic_api_key.strip():
            return None
        return RemoteConfig(
            api_key=self.anthropic_api_key.strip(),
            model=self.summary_model,
            base_url=self.anthropic_base_url.strip(),
        )


settings = Settings()
