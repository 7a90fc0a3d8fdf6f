from typing import List, Optional, Union

import pydantic
from pydantic import BaseModel, Field, field_validator

from errors import ValidationError
from tools import SQLITE_INT_MAX, MathTools

Numeric = Union[float, int, str, None]


class RoutinePayload(BaseModel):
    name: str
    description: Optional[str] = None
    exercise_ids: Optional[List[str]] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("routine name must not be empty")
        return value

    @field_validator("exercise_ids")
    @classmethod
    def _ids_not_empty(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is not None and not value:
            raise ValueError("exercise list must not be empty")
        return value


class RoutineUpdatePayload(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("routine name must not be empty")
        return value


class ExerciseListPayload(BaseModel):
    exercise_ids: List[str] = Field(min_length=1)


class SetPayload(BaseModel):
    weight: Numeric = None
    repetitions: Numeric = None
    duration: Numeric = None

    @field_validator("repetitions", "duration")
    @classmethod
    def _integer_in_range(cls, value: Numeric) -> Numeric:
        number = MathTools.parse_int(value)
        if number is not None and abs(number) > SQLITE_INT_MAX:
            raise ValueError("value is too large to store")
        return value


class ExerciseSessionPayload(BaseModel):
    exercise_id: str
    sets: List[SetPayload] = []


class WorkoutPayload(BaseModel):
    routine_id: str
    duration: int = Field(default=0, ge=0, le=SQLITE_INT_MAX)
    notes: Optional[str] = None
    date: Optional[str] = None
    exercise_sessions: List[ExerciseSessionPayload] = Field(min_length=1)


def validate_payload(model: type[BaseModel], data: dict) -> BaseModel:
    """Build ``model`` from ``data`` raising :class:`errors.ValidationError`."""
    try:
        return model(**data)
    except pydantic.ValidationError as e:
        raise ValidationError(str(e)) from e
