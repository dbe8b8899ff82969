"""
Operator CLI for the recurring task engine.

Usage:
    python -m taskcycle init-db
    python -m taskcycle dispatch 42 complete
    python -m taskcycle dispatch 42 delete --user-id u-1
    python -m taskcycle maintenance
    python -m taskcycle run-scheduler
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from pydantic import BaseModel

from taskcycle.core.exceptions import TaskCycleError
from taskcycle.deps import get_lifecycle_facade, get_sequence_allocator
from taskcycle.infrastructure.local.database import init_db
from taskcycle.models.enums import LifecycleOperation


def _dump(value: Any) -> str:
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    elif isinstance(value, list):
        value = [v.model_dump(mode="json") if isinstance(v, BaseModel) else v for v in value]
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


async def _run_scheduler() -> None:
    from taskcycle.services.background_scheduler import (
        start_background_scheduler,
        stop_background_scheduler,
    )

    await start_background_scheduler(run_immediately=True)
    try:
        await asyncio.Event().wait()
    finally:
        await stop_background_scheduler()


async def run(args: argparse.Namespace) -> Any:
    await init_db()
    if args.command == "init-db":
        return {"initialized": True}

    facade = get_lifecycle_facade()
    if args.command == "dispatch":
        return await facade.dispatch(args.task_id, args.operation, args.user_id)
    if args.command == "health":
        return await facade.health()
    if args.command == "maintenance":
        return await facade.maintenance()
    if args.command == "stats":
        return await facade.detailed_stats(args.user_id)
    if args.command == "counters":
        return await get_sequence_allocator().list_counters()
    if args.command == "run-scheduler":
        await _run_scheduler()
    return None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskcycle", description="Recurring task lifecycle engine."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create database tables.")

    dispatch = sub.add_parser("dispatch", help="Process a task lifecycle event.")
    dispatch.add_argument("task_id")
    dispatch.add_argument("operation", choices=[op.value for op in LifecycleOperation])
    dispatch.add_argument("--user-id", default=None)

    sub.add_parser("health", help="Report engine health.")
    sub.add_parser("maintenance", help="Sweep orphans and reconcile windows.")

    stats = sub.add_parser("stats", help="Show recurring task statistics.")
    stats.add_argument("--user-id", default=None)

    sub.add_parser("counters", help="List sequence counters.")
    sub.add_parser("run-scheduler", help="Run the daily maintenance scheduler.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        result = asyncio.run(run(args))
    except TaskCycleError as e:
        print(_dump({"success": False, "error": e.message}), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0
    if result is not None:
        print(_dump(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
