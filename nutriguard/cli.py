"""CLI commands for NutriGuard."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import uvicorn

from nutriguard.config import settings
from nutriguard.database import SessionLocal, init_db
from nutriguard.services.ai_service import ClaudeService
from nutriguard.services.exceptions import InferenceError
from nutriguard.services.file_service import file_service
from nutriguard.services.guidelines import build_guidance_text, format_condition_names
from nutriguard.services.history_service import history_service
from nutriguard.services.rule_store import Locale, get_rule_store
from nutriguard.services.scan_service import scan_food


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def list_conditions() -> None:
    """Print the catalogue as an indented tree."""
    for category in get_rule_store().list_catalogue():
        print(category.name)
        for group in category.groups:
            print(f"  {group.name}")
            for condition in group.conditions:
                print(f"    {condition.id:<24} {condition.name}")


def show_guidance(condition_ids: list[str]) -> None:
    print(f"Conditions: {format_condition_names(condition_ids)}")
    print()
    print(build_guidance_text(condition_ids))


def _read_image(path: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as e:
        print(f"Error: Cannot read image '{path}': {e}")
        sys.exit(1)


async def scan(image_path: str, condition_ids: list[str], locale: Locale) -> None:
    image_bytes = _read_image(image_path)
    init_db()
    db = SessionLocal()
    try:
        record = await scan_food(
            db=db,
            ai=ClaudeService(),
            image_bytes=image_bytes,
            condition_ids=condition_ids,
            locale=locale,
        )
    finally:
        db.close()
    _print_json(record.model_dump(mode="json"))


async def plan(condition_ids: list[str], locale: Locale) -> None:
    result = await ClaudeService().generate_diet_plan(condition_ids, locale)
    _print_json(result.model_dump(mode="json"))


async def recipes(image_paths: list[str], condition_ids: list[str], locale: Locale) -> None:
    images = [file_service.prepare_image(_read_image(p)) for p in image_paths]
    result = await ClaudeService().generate_recipes(images, condition_ids, locale)
    _print_json(result.model_dump(mode="json"))


def show_history(limit: int | None = None) -> None:
    init_db()
    db = SessionLocal()
    try:
        records = history_service.list_recent(db, limit=limit)
    finally:
        db.close()
    _print_json([r.model_dump(mode="json") for r in records])


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description="NutriGuard CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_condition_args(p):
        p.add_argument(
            "-c",
            "--condition",
            dest="conditions",
            action="append",
            default=[],
            help="Condition id or free text (repeatable)",
        )
        p.add_argument(
            "--locale",
            choices=[loc.value for loc in Locale],
            default=settings.default_locale,
            help="Output language",
        )

    subparsers.add_parser("conditions", help="List the condition catalogue")

    guidance_parser = subparsers.add_parser(
        "guidance", help="Show the clinical guidance text for conditions"
    )
    add_condition_args(guidance_parser)

    scan_parser = subparsers.add_parser("scan", help="Assess a food photo")
    scan_parser.add_argument("image", help="Path to the food photo")
    add_condition_args(scan_parser)

    plan_parser = subparsers.add_parser("plan", help="Generate a care plan")
    add_condition_args(plan_parser)

    recipes_parser = subparsers.add_parser(
        "recipes", help="Generate recipes from ingredient photos"
    )
    recipes_parser.add_argument("images", nargs="+", help="Paths to ingredient photos")
    add_condition_args(recipes_parser)

    history_parser = subparsers.add_parser("history", help="Show recent scans")
    history_parser.add_argument("--limit", type=int, help="Maximum records to show")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "conditions":
            list_conditions()
        elif args.command == "guidance":
            show_guidance(args.conditions)
        elif args.command == "scan":
            asyncio.run(scan(args.image, args.conditions, Locale(args.locale)))
        elif args.command == "plan":
            asyncio.run(plan(args.conditions, Locale(args.locale)))
        elif args.command == "recipes":
            asyncio.run(recipes(args.images, args.conditions, Locale(args.locale)))
        elif args.command == "history":
            show_history(args.limit)
        elif args.command == "serve":
            uvicorn.run("nutriguard.main:app", host=args.host, port=args.port)
        else:
            parser.print_help()
            sys.exit(1)
    except (InferenceError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
