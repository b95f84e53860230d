"""FastMCP server bootstrap exposing deep links and companion sync as shortcuts."""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from fastmcp import Context, FastMCP

from . import __version__
from .app import AppController
from .catalog import CatalogLoader, CatalogLoadError
from .companion import CompanionSender, CompanionSession, CompanionSyncReceiver
from .config import CompanionSettings, get_settings
from .search import ChromaSearchIndex, SearchIndexUnavailableError
from .storage import FileDefaultsStore
from .tools import register_tools


def configure_logging(level: str) -> None:
    """Configure root logging for the companion server."""

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def create_server(
    settings: Optional[CompanionSettings] = None,
    *,
    session: CompanionSession | None = None,
    search_index: ChromaSearchIndex | None = None,
) -> FastMCP:
    """Instantiate the FastMCP server wired to an app controller and companion pair."""

    settings = settings or get_settings()

    app = AppController(scheme=settings.url_scheme)
    catalog_loader = CatalogLoader(settings.catalog_paths)

    # the receiver restores persisted data before the session activates
    receiver = CompanionSyncReceiver(FileDefaultsStore(settings.defaults_path))
    session = session or CompanionSession()
    session.activate()
    session.connect_receiver(receiver)
    sender = CompanionSender(session, assignment_limit=settings.watch_assignment_limit)

    index_metadata = {
        "available": False,
        "path": str(settings.search_index_path),
        "error": None,
    }
    if search_index is None:
        try:
            search_index = ChromaSearchIndex(settings.search_index_path)
            search_index.ping()
        except SearchIndexUnavailableError as exc:
            index_metadata["error"] = str(exc)
            search_index = None
    index_metadata["available"] = search_index is not None

    server = FastMCP(
        name="LMS Companion",
        version=__version__,
        instructions=(
            "Open LMS deep links, continue search results, and inspect the companion "
            "device's synchronized assignments, schedule and grades."
        ),
    )

    handles = register_tools(
        server,
        settings=settings,
        app=app,
        receiver=receiver,
        sender=sender,
        catalog_loader=catalog_loader,
        search_index=search_index,
    )

    @server.resource(
        "resource://lms-companion/status",
        name="lms_companion_status",
        title="LMS Companion Status",
        description="Provides the current routing and companion-sync status.",
        mime_type="application/json",
        tags={"status", "health"},
    )
    def status_resource(context: Context) -> str:
        """Return a JSON string summarizing basic runtime state."""

        try:
            catalog_summary = catalog_loader.load().summary()
            catalog_error: str | None = None
        except CatalogLoadError as exc:
            catalog_summary = {}
            catalog_error = str(exc)

        indexed_count = None
        if search_index is not None:
            try:
                indexed_count = search_index.indexed_count()
            except Exception as exc:  # pragma: no cover - chroma runtime errors
                index_metadata["error"] = str(exc)

        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "server_version": __version__,
            "log_level": settings.log_level,
            "url_scheme": settings.url_scheme,
            "navigation": {
                "authenticated": app.is_authenticated,
                "pending_url": app.router.pending.peek(),
                "pending_events": app.navigation.pending_event_count,
            },
            "companion": {
                **receiver.status(),
                "reachable": session.is_reachable,
                "updates": session.update_count,
                "last_send_error": sender.last_error,
            },
            "catalog": {"summary": catalog_summary, "error": catalog_error},
            "search": {**index_metadata, "indexed_count": indexed_count},
            "request_id": getattr(context, "request_id", None),
        }
        return json.dumps(payload)

    setattr(server, "app_controller", app)
    setattr(server, "companion_receiver", receiver)
    setattr(server, "companion_sender", sender)
    setattr(server, "companion_session", session)
    setattr(server, "search_index", search_index)
    setattr(server, "search_metadata", index_metadata)
    setattr(server, "tool_handles", handles)
    return server


def main() -> None:
    """Entry point for running the LMS companion server via CLI."""

    settings = get_settings()
    configure_logging(settings.log_level)

    server = create_server(settings)
    logging.getLogger(__name__).info(
        "Launching LMS companion server",
        extra={
            "version": __version__,
            "log_level": settings.log_level,
            "url_scheme": settings.url_scheme,
            "search_available": getattr(server, "search_metadata", {}).get("available"),
        },
    )
    server.run()


if __name__ == "__main__":
    main()
