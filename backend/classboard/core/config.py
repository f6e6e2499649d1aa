from functools import lru_cache
import json
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    # backend/.env, independent of the working directory
    model_config = SettingsConfigDict(
        env_file=str(BACKEND_ENV_FILE),
        env_file_encoding="utf-8",
        env_prefix="CLASSBOARD_",
    )

    step_duration_minutes: int = 30
    min_duration_minutes: int = 30
    required_gap_minutes: int = 0
    max_start_minutes: int = 23 * 60

    submit_time: str = "09:00"
    default_location: str = "Beach"
    duration_cap_one: int = 60
    duration_cap_two: int = 90
    duration_cap_three: int = 120

    location_options: list[str] = [
        "Beach",
        "Bay",
        "Lake",
        "River",
        "Pool",
        "Indoor",
    ]

    @field_validator("location_options", mode="before")
    @classmethod
    def split_location_options(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                try:
                    parsed = json.loads(stripped)
                    if isinstance(parsed, list):
                        return [str(item).strip() for item in parsed if str(item).strip()]
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
