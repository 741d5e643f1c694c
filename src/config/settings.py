from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_env: str = "local"

    # temporary storage
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "lap_temp"
    db_user: str = "lap_user"
    db_password: str = "lap_password"

    # CSV extracts: <input_dir>/personal.csv, course.csv, ...
    input_dir: Path = Path("data/input")
    # None -> bundled sample extracts
    sample_dir: Optional[Path] = None
    csv_encoding: str = "utf-8"

    # pipeline descriptors (*.yml / *.yaml / *.json)
    pipelines_dir: Path = Path("pipelines")

    @property
    def database_url(self) -> str:
        # asyncpg + SQLAlchemy 2.x
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    model_config = SettingsConfigDict(env_prefix="LAP_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
