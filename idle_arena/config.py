from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Idle Arena"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    # Combat engine
    combat_max_turns: int = 1000

    # Combat log storage
    combat_max_sessions_per_player: int = 50
    combat_max_logs_per_session: int = 1000
    combat_log_retention_days: int = 30


settings = Settings()
