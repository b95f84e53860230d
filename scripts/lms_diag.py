"""LMS companion diagnostics CLI."""

from __future__ import annotations

import argparse
import json

from lms_companion.catalog import CatalogLoader, CatalogLoadError
from lms_companion.companion import CompanionSyncReceiver
from lms_companion.config import CompanionSettings
from lms_companion.links import destination_from_search_identifier, destination_from_url
from lms_companion.search import ChromaSearchIndex, SearchIndexUnavailableError
from lms_companion.storage import FileDefaultsStore


def load_index(settings: CompanionSettings) -> ChromaSearchIndex:
    try:
        index = ChromaSearchIndex(settings.search_index_path)
        index.ping()
        return index
    except SearchIndexUnavailableError as exc:
        print(f"Search index unavailable: {exc}")
        raise SystemExit(1)


def load_receiver(settings: CompanionSettings) -> CompanionSyncReceiver:
    return CompanionSyncReceiver(FileDefaultsStore(settings.defaults_path))


def cmd_parse(args: argparse.Namespace) -> None:
    settings = CompanionSettings()
    destination = destination_from_url(args.link, scheme=settings.url_scheme)
    if destination is None:
        destination = destination_from_search_identifier(args.link)
    if destination is None:
        print(f"No destination for {args.link}")
        raise SystemExit(1)
    print(json.dumps(destination.to_dict(), indent=2))


def cmd_snapshot(args: argparse.Namespace) -> None:
    settings = CompanionSettings()
    receiver = load_receiver(settings)
    if args.json:
        payload = {
            **receiver.status(),
            "assignments": [item.model_dump(mode="json") for item in receiver.assignments],
            "schedule": [item.model_dump(mode="json") for item in receiver.schedule],
            "grades": [item.model_dump(mode="json") for item in receiver.grades],
        }
        print(json.dumps(payload, indent=2))
        return
    status = receiver.status()
    print(f"last sync: {status['last_sync'] or 'never'}")
    for assignment in receiver.assignments:
        print(f"assignment {assignment.title} ({assignment.course_name}) due {assignment.due_date.isoformat()}")
    for entry in receiver.schedule:
        print(f"class {entry.course_name} {entry.start_time:%H:%M}-{entry.end_time:%H:%M} room {entry.room_number}")
    for grade in receiver.grades:
        print(f"grade {grade.course_name}: {grade.letter_grade} ({grade.numeric_grade:.1f}%)")


def cmd_search(args: argparse.Namespace) -> None:
    settings = CompanionSettings()
    index = load_index(settings)
    hits = index.search(args.query, limit=args.limit)
    print(json.dumps([hit.to_dict() for hit in hits], indent=2))


def cmd_catalog(args: argparse.Namespace) -> None:
    settings = CompanionSettings()
    try:
        catalog = CatalogLoader(settings.catalog_paths).load()
    except CatalogLoadError as exc:
        print(f"Catalog error: {exc}")
        raise SystemExit(1)
    print(json.dumps(catalog.summary(), indent=2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="LMS companion diagnostics")
    sub = parser.add_subparsers(dest="cmd")

    p_parse = sub.add_parser("parse", help="Resolve a deep-link URL or search identifier")
    p_parse.add_argument("link")
    p_parse.set_defaults(func=cmd_parse)

    p_snapshot = sub.add_parser("snapshot", help="Show persisted companion data")
    p_snapshot.add_argument("--json", action="store_true", help="Output JSON")
    p_snapshot.set_defaults(func=cmd_snapshot)

    p_search = sub.add_parser("search", help="Search indexed content")
    p_search.add_argument("query")
    p_search.add_argument(
        "--limit",
        type=int,
        default=None,
        help="If provided, show only the first N hits",
    )
    p_search.set_defaults(func=cmd_search)

    p_catalog = sub.add_parser("catalog", help="Summarize the loaded catalog")
    p_catalog.set_defaults(func=cmd_catalog)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()
