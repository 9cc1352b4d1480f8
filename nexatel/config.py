from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    APP_NAME: str = "NexaTel Customer Analytics"
    APP_VERSION: str = "0.1.0"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    ROSTER_PATH: str = "data/customers.csv"
    EXPORT_DIR: str = "data"
    EXPORT_PREFIX: str = "NexaTel_Export"
    TREND_MONTHS: int = 6
    RANDOM_SEED: Optional[int] = None   # set to make API randomness reproducible

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

settings = Settings()
