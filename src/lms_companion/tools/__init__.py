"""Shortcut tool registration for the LMS companion server."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from fastmcp import Context, FastMCP

from ..app import AppController
from ..catalog import CatalogLoader
from ..companion import CompanionSender, CompanionSyncReceiver
from ..config import CompanionSettings
from ..links import (
    Destination,
    DestinationKind,
    SearchActivity,
    destination_from_search_identifier,
    url_for,
)
from ..search import ChromaSearchIndex, build_items, content_domains

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ToolHandles:
    open_url: Any
    open_search_result: Any
    open_destination: Any
    sign_in: Any
    sign_out: Any
    navigation_state: Any
    receive_companion_context: Any
    companion_status: Any
    push_companion_context: Any
    search_content: Any
    reindex_content: Any


def _parse_destination(kind: str, identifier: str | None) -> Destination:
    try:
        destination_kind = DestinationKind(kind.strip().lower())
    except ValueError as exc:
        raise ValueError(f"Unknown destination '{kind}'") from exc

    if not destination_kind.requires_identifier:
        return Destination(destination_kind)
    if not identifier:
        raise ValueError(f"Destination '{destination_kind.value}' requires an identifier")
    try:
        return Destination(destination_kind, UUID(identifier))
    except ValueError as exc:
        raise ValueError(f"Invalid identifier '{identifier}'") from exc


def register_tools(
    server: FastMCP,
    *,
    settings: CompanionSettings,
    app: AppController,
    receiver: CompanionSyncReceiver,
    sender: CompanionSender | None,
    catalog_loader: CatalogLoader,
    search_index: ChromaSearchIndex | None,
) -> ToolHandles:
    """Register the companion's shortcut tools on the server."""

    def _navigation_payload() -> dict[str, Any]:
        return {
            "authenticated": app.is_authenticated,
            "pending_url": app.router.pending.peek(),
            "state": app.navigation.snapshot(),
        }

    def _open_url(url: str, context: Context | None = None) -> dict[str, Any]:
        """Open a deep-link URL; deferred until sign-in when signed out."""

        handled = app.open_url(url)
        deferred = handled and not app.is_authenticated
        _emit_log(context, "info", "Opened deep link", extra={"url": url, "handled": handled})
        return {"url": url, "handled": handled, "deferred": deferred, **_navigation_payload()}

    def _open_search_result(identifier: str, context: Context | None = None) -> dict[str, Any]:
        """Continue a search result given its ``kind:uuid`` identifier."""

        handled = app.continue_activity(SearchActivity.for_identifier(identifier))
        _emit_log(
            context,
            "info",
            "Continued search result",
            extra={"identifier": identifier, "handled": handled},
        )
        return {"identifier": identifier, "handled": handled, **_navigation_payload()}

    def _open_destination(
        kind: str,
        identifier: str | None = None,
        context: Context | None = None,
    ) -> dict[str, Any]:
        """Navigate to a destination by kind, going through the deep-link path."""

        destination = _parse_destination(kind, identifier)
        url = url_for(destination, scheme=settings.url_scheme)
        return _open_url(url, context)

    def _sign_in(user_id: str, context: Context | None = None) -> dict[str, Any]:
        replayed = app.sign_in(user_id)
        _emit_log(context, "info", "User signed in", extra={"replayed_pending": replayed})
        return {"replayed_pending": replayed, **_navigation_payload()}

    def _sign_out(context: Context | None = None) -> dict[str, Any]:
        app.sign_out()
        if search_index is not None:
            search_index.deindex_all(content_domains(settings.search_domain))
        _emit_log(context, "info", "User signed out")
        return _navigation_payload()

    def _navigation_state(drain: bool = False, context: Context | None = None) -> dict[str, Any]:
        """Return the navigation state and, optionally, drain queued events."""

        payload = _navigation_payload()
        if drain:
            payload["events"] = [event.to_dict() for event in app.navigation.drain_events()]
        else:
            payload["pending_events"] = app.navigation.pending_event_count
        return payload

    def _receive_companion_context(
        payload: dict[str, Any],
        context: Context | None = None,
    ) -> dict[str, Any]:
        """Apply an application-context payload to the companion receiver."""

        applied = receiver.apply_context(payload)
        _emit_log(
            context,
            "debug",
            "Received companion context",
            extra={"applied_keys": sorted(applied)},
        )
        return {"applied_keys": sorted(applied), **receiver.status()}

    def _companion_status(context: Context | None = None) -> dict[str, Any]:
        return receiver.status()

    def _push_companion_context(context: Context | None = None) -> dict[str, Any]:
        """Project the loaded catalog and push it to the companion."""

        if sender is None:
            raise RuntimeError("Companion sender is unavailable")
        catalog = catalog_loader.load()
        sent = sender.send(catalog.assignments, catalog.courses, catalog.grades)
        _emit_log(
            context,
            "info" if sent else "warning",
            "Pushed companion context",
            extra={"sent": sent, "error": sender.last_error},
        )
        return {
            "sent": sent,
            "error": sender.last_error,
            "last_send": sender.last_send.isoformat() if sender.last_send else None,
            "companion": receiver.status(),
        }

    def _require_index() -> ChromaSearchIndex:
        if search_index is None:
            raise RuntimeError("Search index is unavailable; install persistence extras to enable it")
        return search_index

    def _search_content(
        query: str,
        limit: int = 10,
        context: Context | None = None,
    ) -> list[dict[str, Any]]:
        """Search indexed courses, assignments and quizzes."""

        hits = _require_index().search(query, limit=limit)
        results = []
        for hit in hits:
            entry = hit.to_dict()
            destination = destination_from_search_identifier(hit.identifier)
            entry["url"] = url_for(destination, scheme=settings.url_scheme) if destination else None
            results.append(entry)
        _emit_log(context, "debug", "Searched content", extra={"query": query, "count": len(results)})
        return results

    def _reindex_content(context: Context | None = None) -> dict[str, Any]:
        index = _require_index()
        catalog = catalog_loader.load()
        items = build_items(catalog, domain=settings.search_domain)
        count = index.reindex(items, content_domains(settings.search_domain))
        _emit_log(context, "info", "Reindexed content", extra={"count": count})
        return {"indexed": count, "catalog": catalog.summary()}

    tool_open_url = server.tool(
        name="open_url",
        description=(
            f"Open an LMS deep link such as {settings.url_scheme}://grades or "
            f"{settings.url_scheme}://course/<uuid>. Links opened while signed out are "
            "replayed after sign-in."
        ),
    )(_open_url)

    tool_open_search_result = server.tool(
        name="open_search_result",
        description="Open a search result by its identifier (course:<uuid>, assignment:<uuid>, quiz:<uuid>).",
    )(_open_search_result)

    tool_open_destination = server.tool(
        name="open_destination",
        description=(
            "Navigate to a destination kind (assignments, grades, schedule, tools, wellness, "
            "shareplay, recommendations, course, assignment, quiz) with an optional identifier."
        ),
    )(_open_destination)

    tool_sign_in = server.tool(
        name="sign_in",
        description="Mark the session signed in and replay any deferred deep link.",
    )(_sign_in)

    tool_sign_out = server.tool(
        name="sign_out",
        description="Sign out, clearing navigation state, the pending deep link and indexed content.",
    )(_sign_out)

    tool_navigation_state = server.tool(
        name="navigation_state",
        description="Show the current navigation state; pass drain=true to consume queued navigation events.",
    )(_navigation_state)

    tool_receive = server.tool(
        name="receive_companion_context",
        description="Apply an application-context payload (assignments, schedule, grades) on the companion side.",
    )(_receive_companion_context)

    tool_companion_status = server.tool(
        name="companion_status",
        description="Summarize the companion's synchronized collections and last sync time.",
    )(_companion_status)

    tool_push = server.tool(
        name="push_companion_context",
        description="Send the current catalog to the companion device.",
    )(_push_companion_context)

    tool_search = server.tool(
        name="search_content",
        description="Search indexed courses, assignments and quizzes; results include deep-link URLs.",
    )(_search_content)

    tool_reindex = server.tool(
        name="reindex_content",
        description="Rebuild the search index from the catalog.",
    )(_reindex_content)

    return ToolHandles(
        open_url=tool_open_url,
        open_search_result=tool_open_search_result,
        open_destination=tool_open_destination,
        sign_in=tool_sign_in,
        sign_out=tool_sign_out,
        navigation_state=tool_navigation_state,
        receive_companion_context=tool_receive,
        companion_status=tool_companion_status,
        push_companion_context=tool_push,
        search_content=tool_search,
        reindex_content=tool_reindex,
    )


__all__ = ["register_tools", "ToolHandles"]


def _emit_log(
    context: Context | None,
    level: str,
    message: str,
    *,
    extra: dict[str, Any] | None = None,
) -> None:
    """Best-effort logging that prefers the MCP context logger when available."""

    payload = extra or {}

    if context is not None:
        ctx_logger = getattr(context, "logger", None)
        if ctx_logger is not None:
            log_method = getattr(ctx_logger, level, None)
            if callable(log_method):
                log_method(message, extra=payload)
                return

    fallback = getattr(logger, level, logger.info)
    fallback(message, extra=payload)
