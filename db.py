import asyncio
import datetime
import json
import logging
import os
import shutil
import sqlite3
import uuid
from contextlib import asynccontextmanager
from typing import Iterable, List, Optional, Tuple

import aiosqlite

from errors import (
    NotFound,
    NotInitialized,
    OperationTimeout,
    PersistenceError,
    ReadError,
    ValidationError,
    WriteError,
)
from schemas import (
    ExerciseListPayload,
    RoutinePayload,
    RoutineUpdatePayload,
    WorkoutPayload,
    validate_payload,
)
from tools import MathTools

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
ALL_SENTINELS = {"all", "all equipment", "all body parts"}


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


def _now() -> str:
    return datetime.datetime.now().isoformat(timespec="microseconds")


class Database:
    """Holds the table layout of the fitness store."""

    _TABLE_DEFINITIONS = {
        "exercises": (
            """CREATE TABLE exercises (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    body_part TEXT NOT NULL,
                    equipment TEXT NOT NULL,
                    target TEXT NOT NULL,
                    media_path TEXT,
                    instructions TEXT NOT NULL DEFAULT '[]'
                );""",
            [
                "id",
                "name",
                "body_part",
                "equipment",
                "target",
                "media_path",
                "instructions",
            ],
        ),
        "routines": (
            """CREATE TABLE routines (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    description TEXT,
                    created_at TEXT NOT NULL
                );""",
            ["id", "name", "description", "created_at"],
        ),
        "routine_exercises": (
            """CREATE TABLE routine_exercises (
                    routine_id TEXT NOT NULL,
                    exercise_id TEXT NOT NULL,
                    exercise_order INTEGER NOT NULL,
                    PRIMARY KEY (routine_id, exercise_id, exercise_order),
                    FOREIGN KEY(routine_id) REFERENCES routines(id) ON DELETE CASCADE
                );""",
            ["routine_id", "exercise_id", "exercise_order"],
        ),
        "workouts": (
            """CREATE TABLE workouts (
                    id TEXT PRIMARY KEY,
                    routine_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    duration INTEGER NOT NULL DEFAULT 0,
                    volume REAL NOT NULL DEFAULT 0,
                    notes TEXT,
                    FOREIGN KEY(routine_id) REFERENCES routines(id) ON DELETE CASCADE
                );""",
            ["id", "routine_id", "date", "duration", "volume", "notes"],
        ),
        "exercise_sessions": (
            """CREATE TABLE exercise_sessions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    workout_id TEXT NOT NULL,
                    exercise_id TEXT NOT NULL,
                    session_order INTEGER NOT NULL,
                    FOREIGN KEY(workout_id) REFERENCES workouts(id) ON DELETE CASCADE
                );""",
            ["id", "workout_id", "exercise_id", "session_order"],
        ),
        "sets": (
            """CREATE TABLE sets (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    exercise_session_id INTEGER NOT NULL,
                    weight REAL,
                    repetitions INTEGER,
                    duration INTEGER,
                    series_order INTEGER NOT NULL,
                    FOREIGN KEY(exercise_session_id) REFERENCES exercise_sessions(id) ON DELETE CASCADE
                );""",
            [
                "id",
                "exercise_session_id",
                "weight",
                "repetitions",
                "duration",
                "series_order",
            ],
        ),
    }

    _INDEX_DEFINITIONS = [
        "CREATE INDEX IF NOT EXISTS idx_exercises_equipment ON exercises(equipment);",
        "CREATE INDEX IF NOT EXISTS idx_exercises_body_part ON exercises(body_part);",
        "CREATE INDEX IF NOT EXISTS idx_routine_exercises_routine ON routine_exercises(routine_id);",
        "CREATE INDEX IF NOT EXISTS idx_workouts_routine ON workouts(routine_id);",
        "CREATE INDEX IF NOT EXISTS idx_sessions_workout ON exercise_sessions(workout_id);",
        "CREATE INDEX IF NOT EXISTS idx_sets_session ON sets(exercise_session_id);",
    ]

    @classmethod
    def schema_statements(cls) -> List[str]:
        """Return every statement needed to build an empty store."""
        tables = [sql for sql, _ in cls._TABLE_DEFINITIONS.values()]
        return tables + list(cls._INDEX_DEFINITIONS)

    async def _ensure_schema(self, conn: aiosqlite.Connection) -> None:
        cursor = await conn.execute("PRAGMA user_version;")
        (version,) = await cursor.fetchone()
        if version > SCHEMA_VERSION:
            raise PersistenceError(
                f"store schema version {version} is newer than supported {SCHEMA_VERSION}"
            )
        await conn.execute("BEGIN;")
        try:
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                await self._ensure_table(conn, table, sql, columns)
            for sql in self._INDEX_DEFINITIONS:
                await conn.execute(sql)
            await conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION};")
            await conn.execute("COMMIT;")
        except BaseException:
            await conn.execute("ROLLBACK;")
            raise

    async def _ensure_table(
        self, conn: aiosqlite.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cursor = await conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if await cursor.fetchone() is None:
            await conn.execute(sql)
            return
        cursor = await conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in await cursor.fetchall()]
        if existing_cols != columns:
            raise PersistenceError(
                f"table {table} has columns {existing_cols}, expected {columns}"
            )


class ConnectionManager(Database):
    """Owns the single shared aiosqlite connection of the application.

    ``init`` copies the bundled store into ``db_path`` when no writable copy
    exists yet, opens the connection and prepares the schema. Every statement
    batch runs under one lock so write transactions never interleave; waiting
    for that lock is bounded by ``timeout``.
    """

    def __init__(
        self,
        db_path: str = "fitness.db",
        bundle_path: Optional[str] = None,
        timeout: float = 30.0,
    ) -> None:
        self.db_path = db_path
        self.bundle_path = bundle_path
        self.timeout = timeout
        self._conn: Optional[aiosqlite.Connection] = None
        self._init_lock = asyncio.Lock()
        self._lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise NotInitialized("store is not initialized")
        return self._conn

    async def init(self) -> aiosqlite.Connection:
        async with self._init_lock:
            if self._conn is not None:
                return self._conn
            await asyncio.to_thread(self._copy_bundle)
            conn = await aiosqlite.connect(
                self.db_path, timeout=self.timeout, isolation_level=None
            )
            try:
                await conn.execute("PRAGMA foreign_keys=ON;")
                await conn.create_function("casefold", 1, _casefold, deterministic=True)
                await self._ensure_schema(conn)
            except sqlite3.Error as e:
                await conn.close()
                raise WriteError(f"could not prepare store: {e}") from e
            except BaseException:
                await conn.close()
                raise
            self._conn = conn
            logger.info("opened store %s", self.db_path)
            return conn

    def _copy_bundle(self) -> None:
        if self.db_path == ":memory:" or os.path.exists(self.db_path):
            return
        os.makedirs(os.path.dirname(os.path.abspath(self.db_path)), exist_ok=True)
        if self.bundle_path and os.path.exists(self.bundle_path):
            shutil.copyfile(self.bundle_path, self.db_path)
            logger.info("copied bundled store %s to %s", self.bundle_path, self.db_path)
        elif self.bundle_path:
            logger.warning(
                "bundled store %s not found, starting with an empty catalog",
                self.bundle_path,
            )

    async def close(self) -> None:
        """Close the connection once the running statement batch has finished."""
        async with self._init_lock:
            if self._conn is None:
                return
            await self._acquire()
            try:
                conn, self._conn = self._conn, None
                await conn.close()
            finally:
                self._lock.release()
            logger.info("closed store %s", self.db_path)

    async def _acquire(self) -> None:
        # A cancelled acquire() task never ends up holding the lock, which
        # wait_for does not guarantee before Python 3.12.
        acquire = asyncio.ensure_future(self._lock.acquire())
        try:
            done, _ = await asyncio.wait({acquire}, timeout=self.timeout)
        except asyncio.CancelledError:
            if not acquire.cancel():
                self._lock.release()
            raise
        if not done and acquire.cancel():
            raise OperationTimeout(
                f"store stayed busy for more than {self.timeout} seconds"
            )

    @asynccontextmanager
    async def _locked(self):
        if self._conn is None:
            raise NotInitialized("store is not initialized")
        await self._acquire()
        try:
            if self._conn is None:
                raise NotInitialized("store was closed while waiting")
            yield self._conn
        finally:
            self._lock.release()

    @asynccontextmanager
    async def read(self):
        """Yield the connection for a batch of read statements."""
        async with self._locked() as conn:
            try:
                yield conn
            except (sqlite3.Error, OverflowError) as e:
                raise ReadError(str(e)) from e

    @asynccontextmanager
    async def transaction(self):
        """Run the enclosed statements as one all-or-nothing transaction."""
        async with self._locked() as conn:
            try:
                await conn.execute("BEGIN IMMEDIATE;")
            except sqlite3.Error as e:
                raise WriteError(str(e)) from e
            try:
                yield conn
            except BaseException as e:
                await self._rollback(conn, e)
                if isinstance(e, (sqlite3.Error, OverflowError)):
                    raise WriteError(str(e)) from e
                raise
            try:
                await conn.execute("COMMIT;")
            except sqlite3.Error as e:
                await self._rollback(conn, e)
                raise WriteError(str(e)) from e

    async def _rollback(self, conn: aiosqlite.Connection, cause: BaseException) -> None:
        logger.warning("rolling back transaction: %s", cause)
        try:
            await conn.execute("ROLLBACK;")
        except (sqlite3.Error, ValueError) as e:
            # SQLite already rolled back on some errors; aiosqlite raises
            # ValueError once the connection is gone.
            logger.warning("rollback failed: %s", e)


class AsyncBaseRepository:
    """Base class for repositories sharing one ConnectionManager."""

    def __init__(self, manager: ConnectionManager) -> None:
        self.manager = manager

    async def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        async with self.manager.read() as conn:
            cursor = await conn.execute(query, params)
            return await cursor.fetchall()

    async def fetch_one(self, query: str, params: Tuple = ()) -> Optional[Tuple]:
        rows = await self.fetch_all(query, params)
        return rows[0] if rows else None


_EXERCISE_COLUMNS = (
    "e.id, e.name, e.body_part, e.equipment, e.target, e.media_path, e.instructions"
)


def _exercise_from_row(row: Tuple) -> dict:
    ex_id, name, body_part, equipment, target, media_path, instructions = row
    return {
        "id": ex_id,
        "name": name,
        "body_part": body_part,
        "equipment": equipment,
        "target": target,
        "media_path": media_path,
        "media_file_name": os.path.basename(media_path) if media_path else None,
        "instructions": json.loads(instructions) if instructions else [],
    }


async def _missing_exercises(
    conn: aiosqlite.Connection, exercise_ids: Iterable[str]
) -> List[str]:
    unique = list(dict.fromkeys(exercise_ids))
    if not unique:
        return []
    placeholders = ",".join("?" for _ in unique)
    cursor = await conn.execute(
        f"SELECT id FROM exercises WHERE id IN ({placeholders});", tuple(unique)
    )
    found = {row[0] for row in await cursor.fetchall()}
    return [ex_id for ex_id in unique if ex_id not in found]


async def _require_exercises(
    conn: aiosqlite.Connection, exercise_ids: Iterable[str]
) -> None:
    missing = await _missing_exercises(conn, exercise_ids)
    if missing:
        raise ValidationError(f"unknown exercise ids: {', '.join(missing)}")


async def _require_routine(conn: aiosqlite.Connection, routine_id: str) -> None:
    cursor = await conn.execute("SELECT id FROM routines WHERE id = ?;", (routine_id,))
    if await cursor.fetchone() is None:
        raise NotFound("routine not found")


class ExerciseQuery:
    """Parameterized filter over the exercise catalog.

    Only ``name``, ``equipment`` and ``body_part`` can be filtered and values
    are always bound, never interpolated into the statement.
    """

    def __init__(
        self,
        search_query: str = "",
        equipment: Optional[str] = None,
        body_part: Optional[str] = None,
    ) -> None:
        self.search_query = (search_query or "").strip()
        self.equipment = self._category(equipment)
        self.body_part = self._category(body_part)

    @staticmethod
    def _category(value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value or value.lower() in ALL_SENTINELS:
            return None
        return value

    def where(self) -> Tuple[str, List[str]]:
        clauses: List[str] = []
        params: List[str] = []
        if self.search_query:
            clauses.append("instr(casefold(name), ?) > 0")
            params.append(self.search_query.casefold())
        for column, value in (
            ("equipment", self.equipment),
            ("body_part", self.body_part),
        ):
            if value is not None:
                clauses.append(f"{column} = ?")
                params.append(value)
        if not clauses:
            return "", params
        return " WHERE " + " AND ".join(clauses), params

    def count_statement(self) -> Tuple[str, Tuple]:
        where, params = self.where()
        return f"SELECT COUNT(*) FROM exercises{where};", tuple(params)

    def page_statement(self, skip: int, limit: int) -> Tuple[str, Tuple]:
        where, params = self.where()
        query = (
            f"SELECT {_EXERCISE_COLUMNS} FROM exercises e{where} "
            "ORDER BY e.id LIMIT ? OFFSET ?;"
        )
        return query, tuple(params) + (limit, skip)


class ExerciseRepository(AsyncBaseRepository):
    """Read access to the exercise catalog."""

    async def search(
        self,
        search_query: str = "",
        equipment: Optional[str] = None,
        body_part: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> dict:
        if isinstance(skip, bool) or not isinstance(skip, int) or skip < 0:
            raise ValidationError("skip must be a non-negative integer")
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValidationError("limit must be a positive integer")
        query = ExerciseQuery(search_query, equipment, body_part)
        count_sql, count_params = query.count_statement()
        page_sql, page_params = query.page_statement(skip, limit)
        async with self.manager.read() as conn:
            cursor = await conn.execute(count_sql, count_params)
            (total_count,) = await cursor.fetchone()
            cursor = await conn.execute(page_sql, page_params)
            rows = await cursor.fetchall()
        return {
            "rows": [_exercise_from_row(r) for r in rows],
            "total_count": total_count,
            "has_more": total_count > skip + limit,
        }

    async def get(self, exercise_id: str) -> dict:
        row = await self.fetch_one(
            f"SELECT {_EXERCISE_COLUMNS} FROM exercises e WHERE e.id = ?;",
            (exercise_id,),
        )
        if row is None:
            raise NotFound("exercise not found")
        return _exercise_from_row(row)

    async def fetch_equipment(self) -> List[str]:
        rows = await self.fetch_all(
            "SELECT DISTINCT equipment FROM exercises ORDER BY equipment;"
        )
        return [r[0] for r in rows]

    async def fetch_body_parts(self) -> List[str]:
        rows = await self.fetch_all(
            "SELECT DISTINCT body_part FROM exercises ORDER BY body_part;"
        )
        return [r[0] for r in rows]


class RoutineRepository(AsyncBaseRepository):
    """Routines and their ordered exercise links."""

    _LINK_INSERT = (
        "INSERT OR REPLACE INTO routine_exercises (routine_id, exercise_id, exercise_order) "
        "VALUES (?, ?, ?);"
    )

    async def create(
        self,
        name: str,
        description: Optional[str] = None,
        exercise_ids: Optional[List[str]] = None,
    ) -> str:
        payload = validate_payload(
            RoutinePayload,
            {"name": name, "description": description, "exercise_ids": exercise_ids},
        )
        routine_id = str(uuid.uuid4())
        async with self.manager.transaction() as conn:
            await conn.execute(
                "INSERT INTO routines (id, name, description, created_at) VALUES (?, ?, ?, ?);",
                (routine_id, payload.name, payload.description, _now()),
            )
            if payload.exercise_ids:
                await self._insert_links(conn, routine_id, payload.exercise_ids, 0)
        logger.info(
            "created routine %s with %d exercises",
            routine_id,
            len(payload.exercise_ids or []),
        )
        return routine_id

    async def _insert_links(
        self,
        conn: aiosqlite.Connection,
        routine_id: str,
        exercise_ids: List[str],
        start: int,
    ) -> None:
        await conn.executemany(
            self._LINK_INSERT,
            [(routine_id, ex_id, start + i) for i, ex_id in enumerate(exercise_ids)],
        )
        await _require_exercises(conn, exercise_ids)

    async def add_exercises(self, routine_id: str, exercise_ids: List[str]) -> None:
        """Append ``exercise_ids`` after the routine's current last exercise."""
        payload = validate_payload(ExerciseListPayload, {"exercise_ids": exercise_ids})
        async with self.manager.transaction() as conn:
            await _require_routine(conn, routine_id)
            cursor = await conn.execute(
                "SELECT COALESCE(MAX(exercise_order), -1) + 1 FROM routine_exercises WHERE routine_id = ?;",
                (routine_id,),
            )
            (start,) = await cursor.fetchone()
            await self._insert_links(conn, routine_id, payload.exercise_ids, start)
        logger.info("added %d exercises to routine %s", len(payload.exercise_ids), routine_id)

    async def replace_exercises(self, routine_id: str, exercise_ids: List[str]) -> None:
        payload = validate_payload(ExerciseListPayload, {"exercise_ids": exercise_ids})
        async with self.manager.transaction() as conn:
            await _require_routine(conn, routine_id)
            await conn.execute(
                "DELETE FROM routine_exercises WHERE routine_id = ?;", (routine_id,)
            )
            await self._insert_links(conn, routine_id, payload.exercise_ids, 0)
        logger.info("replaced exercises of routine %s", routine_id)

    async def update(
        self,
        routine_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> None:
        payload = validate_payload(
            RoutineUpdatePayload, {"name": name, "description": description}
        )
        fields = {
            k: v for k, v in payload.model_dump().items() if v is not None
        }
        if not fields:
            raise ValidationError("nothing to update")
        assignments = ", ".join(f"{column} = ?" for column in fields)
        async with self.manager.transaction() as conn:
            await _require_routine(conn, routine_id)
            await conn.execute(
                f"UPDATE routines SET {assignments} WHERE id = ?;",
                tuple(fields.values()) + (routine_id,),
            )

    async def delete(self, routine_id: str) -> None:
        """Delete the routine together with its links and workout history."""
        async with self.manager.transaction() as conn:
            await _require_routine(conn, routine_id)
            cursor = await conn.execute(
                "DELETE FROM workouts WHERE routine_id = ?;", (routine_id,)
            )
            removed_workouts = cursor.rowcount
            await conn.execute("DELETE FROM routines WHERE id = ?;", (routine_id,))
        logger.info(
            "deleted routine %s and %d workouts", routine_id, removed_workouts
        )

    async def fetch_all(self) -> List[dict]:
        rows = await super().fetch_all(
            "SELECT r.id, r.name, r.description, r.created_at, COUNT(re.exercise_id), "
            "(SELECT p.exercise_id FROM routine_exercises p WHERE p.routine_id = r.id "
            "ORDER BY p.exercise_order LIMIT 1) "
            "FROM routines r LEFT JOIN routine_exercises re ON re.routine_id = r.id "
            "GROUP BY r.id ORDER BY r.created_at DESC, r.rowid DESC;"
        )
        return [
            {
                "id": rid,
                "name": name,
                "description": description,
                "created_at": created_at,
                "exercise_count": count,
                "preview_exercise_id": preview,
            }
            for rid, name, description, created_at, count, preview in rows
        ]

    async def fetch_detail(self, routine_id: str) -> dict:
        rows = await super().fetch_all(
            "SELECT r.id, r.name, r.description, r.created_at, re.exercise_order, "
            f"{_EXERCISE_COLUMNS} "
            "FROM routines r "
            "LEFT JOIN routine_exercises re ON re.routine_id = r.id "
            "LEFT JOIN exercises e ON e.id = re.exercise_id "
            "WHERE r.id = ? ORDER BY re.exercise_order;",
            (routine_id,),
        )
        if not rows:
            raise NotFound("routine not found")
        rid, name, description, created_at = rows[0][:4]
        exercises = [_exercise_from_row(row[5:]) for row in rows if row[5] is not None]
        return {
            "routine": {
                "id": rid,
                "name": name,
                "description": description,
                "created_at": created_at,
            },
            "exercises": exercises,
        }

    async def fetch_exercises(self, routine_id: str) -> List[dict]:
        detail = await self.fetch_detail(routine_id)
        return detail["exercises"]


def _fold_workout(rows: Iterable[Tuple]) -> Optional[dict]:
    """Fold joined workout/session/set rows into one nested workout."""
    metadata = None
    exercises: List[dict] = []
    current_session = None
    for row in rows:
        if metadata is None:
            wid, routine_id, routine_name, date, duration, volume, notes = row[:7]
            metadata = {
                "id": wid,
                "routine_id": routine_id,
                "routine_name": routine_name,
                "date": date,
                "duration": duration,
                "volume": volume,
                "notes": notes,
            }
        session_id, session_order, exercise_id = row[7:10]
        if session_id is None:
            continue
        if session_id != current_session:
            current_session = session_id
            if row[10] is not None:
                exercise = _exercise_from_row(row[10:17])
            else:
                exercise = {"id": exercise_id}
            exercises.append(
                {"session_order": session_order, "exercise": exercise, "sets": []}
            )
        set_id, series_order, weight, repetitions, duration = row[17:22]
        if set_id is not None:
            exercises[-1]["sets"].append(
                {
                    "series_order": series_order,
                    "weight": weight,
                    "repetitions": repetitions,
                    "duration": duration,
                }
            )
    if metadata is None:
        return None
    return {"metadata": metadata, "exercises": exercises}


class WorkoutRepository(AsyncBaseRepository):
    """Finished workouts with their exercise sessions and sets."""

    async def record(
        self,
        routine_id: str,
        exercise_sessions: List[dict],
        duration: int = 0,
        notes: Optional[str] = None,
        date: Optional[str] = None,
    ) -> str:
        payload = validate_payload(
            WorkoutPayload,
            {
                "routine_id": routine_id,
                "exercise_sessions": exercise_sessions,
                "duration": duration,
                "notes": notes,
                "date": date,
            },
        )
        sessions = [s.model_dump() for s in payload.exercise_sessions]
        volume = MathTools.workout_volume(sessions)
        workout_id = str(uuid.uuid4())
        date = payload.date or datetime.datetime.now().isoformat(timespec="seconds")
        async with self.manager.transaction() as conn:
            await _require_routine(conn, payload.routine_id)
            await conn.execute(
                "INSERT INTO workouts (id, routine_id, date, duration, volume, notes) VALUES (?, ?, ?, ?, ?, ?);",
                (workout_id, payload.routine_id, date, payload.duration, volume, payload.notes),
            )
            for session_order, session in enumerate(sessions):
                cursor = await conn.execute(
                    "INSERT INTO exercise_sessions (workout_id, exercise_id, session_order) VALUES (?, ?, ?);",
                    (workout_id, session["exercise_id"], session_order),
                )
                session_id = cursor.lastrowid
                await conn.executemany(
                    "INSERT INTO sets (exercise_session_id, weight, repetitions, duration, series_order) "
                    "VALUES (?, ?, ?, ?, ?);",
                    [
                        (
                            session_id,
                            MathTools.parse_float(entry["weight"]),
                            MathTools.parse_int(entry["repetitions"]),
                            MathTools.parse_int(entry["duration"]),
                            series_order,
                        )
                        for series_order, entry in enumerate(session["sets"])
                    ],
                )
            await _require_exercises(conn, [s["exercise_id"] for s in sessions])
        logger.info(
            "recorded workout %s for routine %s with %d exercises, volume %.1f",
            workout_id,
            payload.routine_id,
            len(sessions),
            volume,
        )
        return workout_id

    async def fetch_all(
        self,
        routine_id: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[dict]:
        query = (
            "SELECT w.id, w.routine_id, r.name, w.date, w.duration, w.volume, w.notes, "
            "(SELECT COUNT(*) FROM exercise_sessions s WHERE s.workout_id = w.id), "
            "(SELECT COUNT(*) FROM sets st JOIN exercise_sessions s "
            "ON s.id = st.exercise_session_id WHERE s.workout_id = w.id) "
            "FROM workouts w LEFT JOIN routines r ON r.id = w.routine_id"
        )
        params: list[str | int] = []
        if routine_id is not None:
            query += " WHERE w.routine_id = ?"
            params.append(routine_id)
        query += " ORDER BY w.date DESC, w.rowid DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        if offset is not None:
            if limit is None:
                query += " LIMIT -1"
            query += " OFFSET ?"
            params.append(offset)
        query += ";"
        rows = await super().fetch_all(query, tuple(params))
        return [
            {
                "id": wid,
                "routine_id": rid,
                "routine_name": routine_name,
                "date": date,
                "duration": duration,
                "volume": volume,
                "notes": notes,
                "exercise_count": exercise_count,
                "set_count": set_count,
            }
            for (
                wid,
                rid,
                routine_name,
                date,
                duration,
                volume,
                notes,
                exercise_count,
                set_count,
            ) in rows
        ]

    async def fetch_detail(self, workout_id: str) -> dict:
        rows = await super().fetch_all(
            "SELECT w.id, w.routine_id, r.name, w.date, w.duration, w.volume, w.notes, "
            f"s.id, s.session_order, s.exercise_id, {_EXERCISE_COLUMNS}, "
            "st.id, st.series_order, st.weight, st.repetitions, st.duration "
            "FROM workouts w "
            "LEFT JOIN routines r ON r.id = w.routine_id "
            "LEFT JOIN exercise_sessions s ON s.workout_id = w.id "
            "LEFT JOIN exercises e ON e.id = s.exercise_id "
            "LEFT JOIN sets st ON st.exercise_session_id = s.id "
            "WHERE w.id = ? ORDER BY s.session_order, st.series_order;",
            (workout_id,),
        )
        detail = _fold_workout(rows)
        if detail is None:
            raise NotFound("workout not found")
        return detail

    async def delete(self, workout_id: str) -> None:
        async with self.manager.transaction() as conn:
            cursor = await conn.execute(
                "SELECT id FROM workouts WHERE id = ?;", (workout_id,)
            )
            if await cursor.fetchone() is None:
                raise NotFound("workout not found")
            await conn.execute("DELETE FROM workouts WHERE id = ?;", (workout_id,))
        logger.info("deleted workout %s", workout_id)
