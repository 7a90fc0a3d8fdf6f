import os
import yaml

APP_VERSION = "1.0.0"


class YamlConfig:
    """Load and save settings to a YAML file."""

    ENV_OVERRIDES = {
        "db_path": "FITNESS_DB_PATH",
        "bundle_path": "FITNESS_BUNDLE_PATH",
    }

    def __init__(self, path: str = "settings.yaml") -> None:
        self.path = path

    def load(self) -> dict:
        data: dict = {}
        if os.path.exists(self.path):
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        for key, env in self.ENV_OVERRIDES.items():
            value = os.environ.get(env)
            if value:
                data[key] = value
        return data

    def save(self, data: dict) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(dict(data), f)
