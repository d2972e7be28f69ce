from __future__ import annotations

import argparse
import json
import logging

from plantmanager.config import load_config, setup_logging
from plantmanager.domain.exceptions import (
    ConfigurationError,
    CorruptStoreError,
    NotFoundError,
    NotificationError,
    PersistenceError,
    ValidationError,
)
from plantmanager.domain.plant_record import PlantRecord, RepeatEvery, WateringFrequency
from plantmanager.services.container import ServiceContainer

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="plantmanager-reminders", description="Manage plant watering reminders")
    parser.add_argument("--store-dir", help="Directory holding the reminder store (overrides PLANTMANAGER_STORE_DIR)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="Print every reminder, soonest first")
    commands.add_parser("next", help="Print the plant to water next")

    save = commands.add_parser("save", help="Create or replace a reminder")
    save.add_argument("--id", required=True, dest="plant_id")
    save.add_argument("--name", required=True)
    save.add_argument("--at", required=True, help="Next watering time (ISO-8601, e.g. 2026-10-20T08:30:00Z)")
    save.add_argument("--photo", default="")
    save.add_argument("--about", default="")
    save.add_argument("--tips", default="", dest="water_tips")
    save.add_argument("--times", type=_positive_int, default=None, help="Waterings per period")
    save.add_argument("--every", choices=[r.value for r in RepeatEvery], default=RepeatEvery.DAY.value)

    watered = commands.add_parser("watered", help="Mark a plant watered and move its reminder forward")
    watered.add_argument("plant_id")

    remove = commands.add_parser("remove", help="Delete a reminder (no error if it is already gone)")
    remove.add_argument("plant_id")

    commands.add_parser("reset", help="Discard every reminder, including an unreadable store")
    return parser


def _print_records(records: list[PlantRecord]) -> None:
    print(json.dumps([record.to_dict() for record in records], indent=2, ensure_ascii=False))


def main(argv: list[str] | None = None) -> int:
    """Inspect and edit the reminder store without starting the web server."""
    args = _build_parser().parse_args(argv)

    overrides = {"store_dir": args.store_dir} if args.store_dir else {}
    try:
        config = load_config(**overrides)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}")
        return 2
    setup_logging(debug=args.debug or config.DEBUG, level=config.log_level)

    container = ServiceContainer.build(config)
    service = container.reminder_service

    try:
        if args.command == "list":
            _print_records(service.list_plants())
        elif args.command == "next":
            spotlight = service.spotlight()
            if spotlight.is_empty:
                print("No reminders added yet.")
            else:
                _print_records([spotlight.next_plant])
                if spotlight.overdue:
                    print(f"{spotlight.next_plant.name} is overdue for watering")
        elif args.command == "save":
            frequency = WateringFrequency(args.times, RepeatEvery(args.every)) if args.times else None
            plant = PlantRecord(
                id=args.plant_id,
                name=args.name,
                next_watering_at=None,
                photo_ref=args.photo,
                about=args.about,
                water_tips=args.water_tips,
                frequency=frequency,
            )
            record = service.schedule_plant(plant, args.at)
            print(f"Saved {record.id}: next watering at {record.next_watering_at.isoformat()}")
        elif args.command == "watered":
            record = service.complete_watering(args.plant_id)
            print(f"Watered {record.id}: next watering at {record.next_watering_at.isoformat()}")
        elif args.command == "remove":
            service.remove_plant(args.plant_id)
            print(f"Removed {args.plant_id}")
        elif args.command == "reset":
            container.reminder_store.reset()
            print("Reminder store reset")
    except ValidationError as exc:
        print(f"Invalid input: {exc}")
        return 2
    except NotFoundError as exc:
        print(str(exc))
        return 2
    except CorruptStoreError as exc:
        print(f"Reminder store is unreadable: {exc}. Run 'plantmanager-reminders reset' to start over.")
        return 1
    except (PersistenceError, NotificationError) as exc:
        logger.error("Command %s failed: %s", args.command, exc)
        print(f"Failed: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    import sys

    raise SystemExit(main(sys.argv[1:]))
