import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import ExerciseQuery
from errors import NotFound, ValidationError


def matching_ids(catalog, search_query="", equipment=None, body_part=None):
    needle = search_query.strip().casefold()
    return sorted(
        e["id"]
        for e in catalog
        if (not needle or needle in e["name"].casefold())
        and (equipment is None or e["equipment"] == equipment)
        and (body_part is None or e["body_part"] == body_part)
    )


@pytest.mark.asyncio
async def test_barbell_pages(store):
    first = await store.exercises.search(equipment="barbell", skip=0, limit=20)
    assert len(first["rows"]) == 20
    assert first["total_count"] == 25
    assert first["has_more"] is True

    second = await store.exercises.search(equipment="barbell", skip=20, limit=20)
    assert len(second["rows"]) == 5
    assert second["total_count"] == 25
    assert second["has_more"] is False


@pytest.mark.asyncio
async def test_exactly_full_last_page_has_no_more(store):
    page = await store.exercises.search(equipment="barbell", skip=20, limit=5)
    assert len(page["rows"]) == 5
    assert page["has_more"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "filters",
    [
        {},
        {"equipment": "barbell"},
        {"body_part": "chest"},
        {"search_query": "curl"},
        {"search_query": "  PRESS ", "body_part": "chest"},
        {"equipment": "dumbbell", "body_part": "upper arms"},
        {"search_query": "up", "equipment": "body weight"},
    ],
)
@pytest.mark.parametrize("limit", [1, 3, 7, 50])
async def test_pagination_walks_every_match_once(store, catalog, filters, limit):
    seen = []
    skip = 0
    while True:
        page = await store.exercises.search(skip=skip, limit=limit, **filters)
        assert page["total_count"] == len(matching_ids(catalog, **filters))
        seen.extend(row["id"] for row in page["rows"])
        if not page["has_more"]:
            break
        skip += limit
    assert seen == matching_ids(catalog, **filters)


@pytest.mark.asyncio
async def test_all_sentinels_impose_no_filter(store, catalog):
    page = await store.exercises.search(
        equipment="All Equipment", body_part="All Body Parts", limit=100
    )
    assert page["total_count"] == len(catalog)
    page = await store.exercises.search(equipment="all", body_part="", limit=100)
    assert page["total_count"] == len(catalog)


@pytest.mark.asyncio
async def test_search_is_substring_and_case_insensitive(store):
    page = await store.exercises.search(search_query="LIFT 1", limit=100)
    names = [row["name"] for row in page["rows"]]
    assert "Barbell Lift 1" in names
    assert "Barbell Lift 12" in names
    assert all("lift 1" in n.lower() for n in names)


@pytest.mark.asyncio
async def test_like_wildcards_are_literal(store):
    page = await store.exercises.search(search_query="%")
    assert page["total_count"] == 0
    page = await store.exercises.search(search_query="_")
    assert page["total_count"] == 0


@pytest.mark.asyncio
async def test_rows_carry_full_exercise(store):
    page = await store.exercises.search(search_query="Barbell Lift 3", limit=1)
    row = page["rows"][0]
    assert row["id"] == "b003"
    assert row["media_path"] == "/mp4s/b003.mp4"
    assert row["media_file_name"] == "b003.mp4"
    assert row["instructions"] == ["step one of 3", "step two"]


@pytest.mark.asyncio
async def test_invalid_paging_arguments(store):
    with pytest.raises(ValidationError):
        await store.exercises.search(skip=-1)
    with pytest.raises(ValidationError):
        await store.exercises.search(limit=0)


@pytest.mark.asyncio
async def test_get_and_distinct_values(store):
    exercise = await store.exercises.get("w002")
    assert exercise["name"] == "Plank"
    with pytest.raises(NotFound):
        await store.exercises.get("nope")
    assert await store.exercises.fetch_equipment() == ["barbell", "body weight", "dumbbell"]
    assert await store.exercises.fetch_body_parts() == [
        "chest",
        "upper arms",
        "upper legs",
        "waist",
    ]


def test_query_binds_values():
    query = ExerciseQuery("x' OR 1=1 --", "barbell", "All Body Parts")
    where, params = query.where()
    assert where == " WHERE instr(casefold(name), ?) > 0 AND equipment = ?"
    assert params == ["x' or 1=1 --", "barbell"]
    sql, page_params = query.page_statement(40, 20)
    assert sql.endswith("ORDER BY e.id LIMIT ? OFFSET ?;")
    assert page_params == ("x' or 1=1 --", "barbell", 20, 40)


def test_query_without_filters():
    assert ExerciseQuery().where() == ("", [])
    assert ExerciseQuery().count_statement() == ("SELECT COUNT(*) FROM exercises;", ())
