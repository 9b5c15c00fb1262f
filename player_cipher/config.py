from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    host: str = "0.0.0.0"
    port: int = 7652
    debug: bool = False

    request_timeout: int = 30
    max_retries: int = 3
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/131.0.0.0 Safari/537.36"
    )
    # Relative player identifiers ("/s/player/.../base.js") are joined onto this.
    player_base_url: str = "https://www.youtube.com"
    # Directory for raw player bodies. Empty = keep them in memory only.
    debug_dump_dir: str = ""
    # Comma-separated origins for CORS (e.g. "https://app.example.com"). Empty = allow "*" with no credentials.
    cors_origins: str = ""

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def get_dump_dir() -> Path | None:
    settings = get_settings()
    if not settings.debug_dump_dir:
        return None
    dump_path = Path(settings.debug_dump_dir)
    dump_path.mkdir(parents=True, exist_ok=True)
    return dump_path
