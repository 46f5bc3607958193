"""Configuration management using Pydantic settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Monster Spawner API"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "127.0.0.1"
    port: int = 8080

    # Tick loop (headless mode)
    tick_hz: float = 60.0

    # Spawning
    spawn_radius: int = 5               # tiles either side of the actor
    max_spawn_quantity: int = 100
    name_match_radius: float = 2.0      # tiles between pending spot and creature

    # Effect defaults (applied when a field is missing or non-positive)
    default_effect_source: str = "API"
    default_effect_duration_ms: int = 5000
    default_effect_value: float = 50.0

    # Headless grid world
    world_location: str = "Farm"
    world_width: int = 80
    world_height: int = 65


settings = Settings()
