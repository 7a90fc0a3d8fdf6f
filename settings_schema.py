from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from config import YamlConfig


class SettingsSchema(BaseModel):
    db_path: str = "fitness.db"
    bundle_path: Optional[str] = None
    lock_timeout: float = Field(default=30.0, gt=0)
    page_size: int = Field(default=20, ge=1)
    log_level: str = "INFO"


def validate_settings(data: dict) -> None:
    try:
        SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))


def load_settings(config: YamlConfig) -> SettingsSchema:
    data = config.load()
    validate_settings(data)
    return SettingsSchema(**data)
