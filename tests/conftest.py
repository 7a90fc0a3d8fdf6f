import json
import os
import sqlite3
import sys

import pytest
import pytest_asyncio

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import Database
from store import FitnessStore


def make_catalog() -> list[dict]:
    """25 barbell, 6 dumbbell and 4 body weight exercises."""
    catalog = []
    for i in range(25):
        catalog.append(
            {
                "id": f"b{i:03d}",
                "name": f"Barbell Lift {i}",
                "body_part": "upper legs" if i % 2 else "chest",
                "equipment": "barbell",
                "target": "quads" if i % 2 else "pectorals",
                "media_path": f"/mp4s/b{i:03d}.mp4",
                "instructions": [f"step one of {i}", "step two"],
            }
        )
    for i in range(6):
        catalog.append(
            {
                "id": f"d{i:03d}",
                "name": f"Dumbbell Curl {i}" if i < 3 else f"Dumbbell Press {i}",
                "body_part": "upper arms" if i < 3 else "chest",
                "equipment": "dumbbell",
                "target": "biceps" if i < 3 else "pectorals",
                "media_path": None,
                "instructions": [],
            }
        )
    for i, name in enumerate(["Push-Up", "Pull-Up", "Plank", "Air Squat"]):
        catalog.append(
            {
                "id": f"w{i:03d}",
                "name": name,
                "body_part": "waist" if name == "Plank" else "chest",
                "equipment": "body weight",
                "target": "abs" if name == "Plank" else "pectorals",
                "media_path": f"/mp4s/w{i:03d}.mp4",
                "instructions": ["keep your core tight"],
            }
        )
    return catalog


def build_bundle(path: str, catalog: list[dict]) -> None:
    conn = sqlite3.connect(path)
    for sql in Database.schema_statements():
        conn.execute(sql)
    conn.executemany(
        "INSERT INTO exercises (id, name, body_part, equipment, target, media_path, instructions) "
        "VALUES (?, ?, ?, ?, ?, ?, ?);",
        [
            (
                e["id"],
                e["name"],
                e["body_part"],
                e["equipment"],
                e["target"],
                e["media_path"],
                json.dumps(e["instructions"]),
            )
            for e in catalog
        ],
    )
    conn.commit()
    conn.close()


@pytest.fixture
def catalog():
    return make_catalog()


@pytest.fixture
def bundle_path(tmp_path, catalog):
    path = str(tmp_path / "bundle" / "prepopulated.db")
    os.makedirs(os.path.dirname(path))
    build_bundle(path, catalog)
    return path


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "data" / "fitness.db")


@pytest_asyncio.fixture
async def store(db_path, bundle_path):
    fitness_store = FitnessStore(db_path, bundle_path, timeout=5.0)
    await fitness_store.init()
    yield fitness_store
    await fitness_store.close()
