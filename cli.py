import argparse
import asyncio
import json
import logging
import shutil
from typing import Optional

from config import YamlConfig
from settings_schema import load_settings
from store import FitnessStore


def backup_db(db_path: str, backup_path: str) -> None:
    shutil.copy(db_path, backup_path)


def restore_db(backup_path: str, db_path: str) -> None:
    shutil.copy(backup_path, db_path)


async def init_store(store: FitnessStore) -> dict:
    async with store:
        page = await store.exercises.search(limit=1)
    return {"db_path": store.manager.db_path, "exercises": page["total_count"]}


async def search(
    store: FitnessStore,
    q: str,
    equipment: Optional[str],
    body_part: Optional[str],
    skip: int,
    limit: Optional[int],
) -> dict:
    async with store:
        return await store.exercises.search(
            q, equipment, body_part, skip, limit or store.page_size
        )


async def list_routines(store: FitnessStore) -> list:
    async with store:
        return await store.routines.fetch_all()


async def list_workouts(store: FitnessStore, routine_id: Optional[str] = None) -> list:
    async with store:
        return await store.workouts.fetch_all(routine_id)


async def export_workout(store: FitnessStore, workout_id: str, out_path: str) -> None:
    """Write the nested detail of one workout to ``out_path`` as JSON."""
    async with store:
        detail = await store.workouts.fetch_detail(workout_id)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(detail, f, indent=2)


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(description="Fitness store utility commands")
    parser.add_argument("--config", default="settings.yaml")
    parser.add_argument("--db", help="override the configured database path")
    parser.add_argument("--log-level", help="override the configured log level")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("init")

    srch = sub.add_parser("search")
    srch.add_argument("--q", default="")
    srch.add_argument("--equipment")
    srch.add_argument("--body-part")
    srch.add_argument("--skip", type=int, default=0)
    srch.add_argument("--limit", type=int)

    sub.add_parser("routines")

    wk = sub.add_parser("workouts")
    wk.add_argument("--routine")

    exp = sub.add_parser("export")
    exp.add_argument("--workout", required=True)
    exp.add_argument("--out", default="workout.json")

    bkp = sub.add_parser("backup")
    bkp.add_argument("--out", default="backup.db")

    rst = sub.add_parser("restore")
    rst.add_argument("--in", dest="src", default="backup.db")

    args = parser.parse_args(argv)

    settings = load_settings(YamlConfig(args.config))
    if args.db:
        settings.db_path = args.db
    logging.basicConfig(
        level=(args.log_level or settings.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    store = FitnessStore.from_settings(settings)

    if args.cmd == "init":
        print(json.dumps(asyncio.run(init_store(store))))
    elif args.cmd == "search":
        result = asyncio.run(
            search(store, args.q, args.equipment, args.body_part, args.skip, args.limit)
        )
        print(json.dumps(result, indent=2))
    elif args.cmd == "routines":
        print(json.dumps(asyncio.run(list_routines(store)), indent=2))
    elif args.cmd == "workouts":
        print(json.dumps(asyncio.run(list_workouts(store, args.routine)), indent=2))
    elif args.cmd == "export":
        asyncio.run(export_workout(store, args.workout, args.out))
    elif args.cmd == "backup":
        backup_db(settings.db_path, args.out)
    elif args.cmd == "restore":
        restore_db(args.src, settings.db_path)


if __name__ == "__main__":
    main()
