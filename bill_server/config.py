from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite:///data/invoices.sqlite"
    exports_dir: Path = Path("exports")
    host: str = "127.0.0.1"
    port: int = 3001
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]
    max_body_bytes: int = 1024 * 1024

    model_config = SettingsConfigDict(env_file=".env", env_prefix="")


settings = Settings()
