"""Environment and settings (Pydantic Settings)."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Default data directory: ~/.studylibrary/
_data_dir = Path.home() / ".studylibrary"


class Settings(BaseSettings):
    """Study library settings loaded from environment and .env."""

    model_config = SettingsConfigDict(
        env_prefix="STUDYLIB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage (one JSON document per collection)
    data_dir: Path = _data_dir
    items_file: str = "library-items.json"
    categories_file: str = "categories.json"

    # Search: values above 1 evaluate criteria on a thread pool
    search_workers: int = Field(default=1, ge=1)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_file: Optional[Path] = None

    @model_validator(mode="after")
    def _default_log_file(self) -> "Settings":
        if self.log_file is None:
            self.log_file = self.data_dir / "studylib.log"
        return self


def get_settings() -> Settings:
    """Return application settings (singleton-like)."""
    return Settings()
