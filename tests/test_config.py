import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from config import YamlConfig
from settings_schema import SettingsSchema, load_settings, validate_settings
from store import FitnessStore


class YamlConfigTest(unittest.TestCase):
    def setUp(self) -> None:
        self.path = "test_fitness_settings.yaml"
        if os.path.exists(self.path):
            os.remove(self.path)
        os.environ.pop("FITNESS_DB_PATH", None)

    def tearDown(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)
        os.environ.pop("FITNESS_DB_PATH", None)

    def test_missing_file_loads_defaults(self) -> None:
        cfg = YamlConfig(self.path)
        self.assertEqual(cfg.load(), {})
        settings = load_settings(cfg)
        self.assertEqual(settings, SettingsSchema())
        self.assertEqual(settings.db_path, "fitness.db")
        self.assertEqual(settings.page_size, 20)

    def test_save_and_load(self) -> None:
        cfg = YamlConfig(self.path)
        cfg.save({"db_path": "data/store.db", "lock_timeout": 2.5, "page_size": 50})
        settings = load_settings(cfg)
        self.assertEqual(settings.db_path, "data/store.db")
        self.assertEqual(settings.lock_timeout, 2.5)
        self.assertEqual(settings.page_size, 50)

    def test_env_override(self) -> None:
        cfg = YamlConfig(self.path)
        cfg.save({"db_path": "from_file.db"})
        os.environ["FITNESS_DB_PATH"] = "from_env.db"
        self.assertEqual(cfg.load()["db_path"], "from_env.db")

    def test_invalid_values(self) -> None:
        with self.assertRaises(ValueError):
            validate_settings({"page_size": 0})
        with self.assertRaises(ValueError):
            validate_settings({"lock_timeout": -1})
        cfg = YamlConfig(self.path)
        cfg.save({"page_size": "many"})
        with self.assertRaises(ValueError):
            load_settings(cfg)

    def test_store_from_config(self) -> None:
        cfg = YamlConfig(self.path)
        cfg.save({"db_path": "x.db", "bundle_path": "bundle.db", "lock_timeout": 3})
        store = FitnessStore.from_config(cfg)
        self.assertEqual(store.manager.db_path, "x.db")
        self.assertEqual(store.manager.bundle_path, "bundle.db")
        self.assertEqual(store.manager.timeout, 3)
        self.assertFalse(store.manager.is_open)


if __name__ == "__main__":
    unittest.main()
