import requests
from typing import List, Optional


class FitnessClient:
    """Simple REST client for the fitness API."""

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def search_exercises(
        self,
        q: str = "",
        equipment: Optional[str] = None,
        body_part: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> dict:
        params = {"q": q, "skip": skip, "limit": limit}
        if equipment:
            params["equipment"] = equipment
        if body_part:
            params["body_part"] = body_part
        resp = requests.get(f"{self.base_url}/exercises", params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def create_routine(
        self, name: str, description: Optional[str] = None, exercise_ids: Optional[List[str]] = None
    ) -> str:
        resp = requests.post(
            f"{self.base_url}/routines",
            json={"name": name, "description": description, "exercise_ids": exercise_ids},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()["id"]

    def list_routines(self) -> list:
        resp = requests.get(f"{self.base_url}/routines", timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def routine_exercises(self, routine_id: str) -> list:
        resp = requests.get(f"{self.base_url}/routines/{routine_id}/exercises", timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def record_workout(
        self,
        routine_id: str,
        exercise_sessions: list,
        duration: int = 0,
        notes: Optional[str] = None,
    ) -> str:
        resp = requests.post(
            f"{self.base_url}/workouts",
            json={
                "routine_id": routine_id,
                "exercise_sessions": exercise_sessions,
                "duration": duration,
                "notes": notes,
            },
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()["id"]

    def workout_detail(self, workout_id: str) -> dict:
        resp = requests.get(f"{self.base_url}/workouts/{workout_id}", timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def delete_workout(self, workout_id: str) -> None:
        resp = requests.delete(f"{self.base_url}/workouts/{workout_id}", timeout=self.timeout)
        resp.raise_for_status()
