from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI, HTTPException

from config import YamlConfig
from errors import NotFound, ValidationError
from schemas import (
    ExerciseListPayload,
    RoutinePayload,
    RoutineUpdatePayload,
    WorkoutPayload,
)
from store import FitnessStore


class FitnessAPI:
    """Provides REST endpoints over the routine and workout store."""

    def __init__(
        self,
        store: Optional[FitnessStore] = None,
        yaml_path: str = "settings.yaml",
    ) -> None:
        self.store = store or FitnessStore.from_config(YamlConfig(yaml_path))

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            await self.store.init()
            try:
                yield
            finally:
                await self.store.close()

        self.app = FastAPI(
            title="Fitness API",
            description="REST API for routines, workouts and the exercise catalog",
            lifespan=lifespan,
        )
        self._setup_routes()

    def _setup_routes(self) -> None:
        exercises_router = APIRouter(prefix="/exercises", tags=["Exercises"])
        routines_router = APIRouter(prefix="/routines", tags=["Routines"])
        workouts_router = APIRouter(prefix="/workouts", tags=["Workouts"])
        store = self.store

        @self.app.get(
            "/health",
            summary="Health check",
            description="Verify API and database connectivity.",
        )
        async def health():
            await store.exercises.fetch_equipment()
            return {"status": "ok"}

        @exercises_router.get("")
        async def search_exercises(
            q: str = "",
            equipment: Optional[str] = None,
            body_part: Optional[str] = None,
            skip: int = 0,
            limit: Optional[int] = None,
        ):
            try:
                return await store.exercises.search(
                    q,
                    equipment,
                    body_part,
                    skip,
                    limit if limit is not None else store.page_size,
                )
            except ValidationError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @exercises_router.get("/equipment")
        async def list_equipment():
            return await store.exercises.fetch_equipment()

        @exercises_router.get("/body_parts")
        async def list_body_parts():
            return await store.exercises.fetch_body_parts()

        @exercises_router.get("/{exercise_id}")
        async def get_exercise(exercise_id: str):
            try:
                return await store.exercises.get(exercise_id)
            except NotFound as e:
                raise HTTPException(status_code=404, detail=str(e))

        @routines_router.post("")
        async def create_routine(payload: RoutinePayload):
            try:
                rid = await store.routines.create(
                    payload.name, payload.description, payload.exercise_ids
                )
            except ValidationError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"id": rid}

        @routines_router.get("")
        async def list_routines():
            return await store.routines.fetch_all()

        @routines_router.get("/{routine_id}")
        async def get_routine(routine_id: str):
            try:
                return await store.routines.fetch_detail(routine_id)
            except NotFound as e:
                raise HTTPException(status_code=404, detail=str(e))

        @routines_router.put("/{routine_id}")
        async def update_routine(routine_id: str, payload: RoutineUpdatePayload):
            try:
                await store.routines.update(
                    routine_id, payload.name, payload.description
                )
            except NotFound as e:
                raise HTTPException(status_code=404, detail=str(e))
            except ValidationError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"status": "updated"}

        @routines_router.delete("/{routine_id}")
        async def delete_routine(routine_id: str):
            try:
                await store.routines.delete(routine_id)
            except NotFound as e:
                raise HTTPException(status_code=404, detail=str(e))
            return {"status": "deleted"}

        @routines_router.get("/{routine_id}/exercises")
        async def routine_exercises(routine_id: str):
            try:
                return await store.routines.fetch_exercises(routine_id)
            except NotFound as e:
                raise HTTPException(status_code=404, detail=str(e))

        @routines_router.post("/{routine_id}/exercises")
        async def add_routine_exercises(routine_id: str, payload: ExerciseListPayload):
            try:
                await store.routines.add_exercises(routine_id, payload.exercise_ids)
            except NotFound as e:
                raise HTTPException(status_code=404, detail=str(e))
            except ValidationError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"status": "added"}

        @routines_router.put("/{routine_id}/exercises")
        async def replace_routine_exercises(
            routine_id: str, payload: ExerciseListPayload
        ):
            try:
                await store.routines.replace_exercises(routine_id, payload.exercise_ids)
            except NotFound as e:
                raise HTTPException(status_code=404, detail=str(e))
            except ValidationError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"status": "updated"}

        @workouts_router.post("")
        async def record_workout(payload: WorkoutPayload):
            try:
                wid = await store.workouts.record(
                    payload.routine_id,
                    [s.model_dump() for s in payload.exercise_sessions],
                    duration=payload.duration,
                    notes=payload.notes,
                    date=payload.date,
                )
            except NotFound as e:
                raise HTTPException(status_code=404, detail=str(e))
            except ValidationError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"id": wid}

        @workouts_router.get("")
        async def list_workouts(
            routine_id: Optional[str] = None,
            limit: Optional[int] = None,
            offset: Optional[int] = None,
        ):
            return await store.workouts.fetch_all(routine_id, limit, offset)

        @workouts_router.get("/{workout_id}")
        async def get_workout(workout_id: str):
            try:
                return await store.workouts.fetch_detail(workout_id)
            except NotFound as e:
                raise HTTPException(status_code=404, detail=str(e))

        @workouts_router.delete("/{workout_id}")
        async def delete_workout(workout_id: str):
            try:
                await store.workouts.delete(workout_id)
            except NotFound as e:
                raise HTTPException(status_code=404, detail=str(e))
            return {"status": "deleted"}

        self.app.include_router(exercises_router)
        self.app.include_router(routines_router)
        self.app.include_router(workouts_router)
