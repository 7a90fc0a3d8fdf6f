from typing import Optional

import aiosqlite

from config import YamlConfig
from db import ConnectionManager, ExerciseRepository, RoutineRepository, WorkoutRepository
from settings_schema import SettingsSchema, load_settings


class FitnessStore:
    """Groups the connection manager with the catalog, routine and workout repositories."""

    def __init__(
        self,
        db_path: str = "fitness.db",
        bundle_path: Optional[str] = None,
        timeout: float = 30.0,
        page_size: int = 20,
    ) -> None:
        self.manager = ConnectionManager(db_path, bundle_path, timeout)
        self.page_size = page_size
        self.exercises = ExerciseRepository(self.manager)
        self.routines = RoutineRepository(self.manager)
        self.workouts = WorkoutRepository(self.manager)

    @classmethod
    def from_settings(cls, settings: SettingsSchema) -> "FitnessStore":
        return cls(
            db_path=settings.db_path,
            bundle_path=settings.bundle_path,
            timeout=settings.lock_timeout,
            page_size=settings.page_size,
        )

    @classmethod
    def from_config(cls, config: YamlConfig) -> "FitnessStore":
        return cls.from_settings(load_settings(config))

    async def init(self) -> aiosqlite.Connection:
        return await self.manager.init()

    async def close(self) -> None:
        await self.manager.close()

    async def __aenter__(self) -> "FitnessStore":
        await self.init()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()
