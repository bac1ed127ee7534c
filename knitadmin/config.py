"""
Configuration for the Knit Pattern Admin service
"""
import os
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Admin service settings from environment variables."""

    # Database (in-memory SQLite unless pointed elsewhere)
    database_url: str = os.getenv("DATABASE_URL", "sqlite://")
    seed_sample_data: bool = os.getenv("SEED_SAMPLE_DATA", "true").lower() == "true"

    # Chart geometry editor
    coord_scale: int = int(os.getenv("COORD_SCALE", "1000"))
    base_size: str = os.getenv("BASE_SIZE", "74-79")
    curve_control_offset: int = int(os.getenv("CURVE_CONTROL_OFFSET", "50"))
    default_line_type: str = os.getenv("DEFAULT_LINE_TYPE", "straight")
    canvas_width: float = float(os.getenv("CANVAS_WIDTH", "1600"))
    canvas_height: float = float(os.getenv("CANVAS_HEIGHT", "800"))
    editor_session_idle_minutes: int = int(os.getenv("EDITOR_SESSION_IDLE_MINUTES", "60"))

    # App settings
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    return Settings()
