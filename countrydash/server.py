"""WSGI application, routing, static files and the server entry point."""

from __future__ import annotations

import argparse
import logging
import os
import threading

from werkzeug.security import safe_join
from werkzeug.serving import run_simple
from werkzeug.utils import redirect, send_file
from werkzeug.wrappers import Request, Response

from countrydash import notification_handlers, registration_handlers
from countrydash.cache_purge import start_cache_purge_loop
from countrydash.config import ERR_METHOD_NOT_ALLOWED
from countrydash.dashboard_handler import make_dashboard_handler
from countrydash.dashboard_service import RealDashboardService
from countrydash.status_handler import handle_service_status
from countrydash.store import DocumentStore, StoreError, close_store, init_store
from countrydash.util import default_data_path

logger = logging.getLogger(__name__)

_REGISTRATIONS = "/dashboard/v1/registrations"
_REGISTRATIONS_TREE = _REGISTRATIONS + "/"
_DASHBOARDS_TREE = "/dashboard/v1/dashboards/"
_NOTIFICATIONS_TREE = "/dashboard/v1/notifications/"
_STATUS_TREE = "/dashboard/v1/status/"
_ROOT = "/"

STATIC_DIR = "static"
STATIC_INDEX_FILE = "index.html"
DEFAULT_PORT = "8080"
ENV_PORT = "PORT"


def _method_not_allowed() -> Response:
    response = Response(
        ERR_METHOD_NOT_ALLOWED + "\n", status=405, content_type="text/plain; charset=utf-8"
    )
    response.headers["X-Content-Type-Options"] = "nosniff"
    return response


def _not_found() -> Response:
    return Response("404 page not found\n", status=404, content_type="text/plain; charset=utf-8")


def _id_after(path: str, prefix: str) -> str:
    return path.removeprefix(prefix).strip("/")


def registrations_dispatcher(request: Request) -> Response:
    """Route registration requests by method and whether an ID is given."""
    dashboard_id = _id_after(request.path, _REGISTRATIONS)
    if not dashboard_id:
        dashboard_id = request.args.get("id", "")

    if not dashboard_id:
        if request.method == "GET":
            return registration_handlers.get_all_registrations(request)
        if request.method == "POST":
            return registration_handlers.handle_register_dashboard(request)
        return _method_not_allowed()

    handlers = {
        "GET": registration_handlers.get_registration,
        "PUT": registration_handlers.update_dashboard_registration,
        "PATCH": registration_handlers.patch_dashboard_registration,
        "DELETE": registration_handlers.delete_dashboard_registration,
        "HEAD": registration_handlers.head_check_dashboard,
    }
    handler = handlers.get(request.method)
    if handler is None:
        return _method_not_allowed()
    return handler(request, dashboard_id)


def notifications_dispatcher(request: Request) -> Response:
    """Route webhook requests by method and whether an ID is given."""
    webhook_id = _id_after(request.path, _NOTIFICATIONS_TREE)

    if not webhook_id:
        if request.method == "POST":
            return notification_handlers.register_webhook(request)
        if request.method == "GET":
            return notification_handlers.get_all_webhooks(request)
        return _method_not_allowed()

    if request.method == "GET":
        return notification_handlers.get_webhook(request, webhook_id)
    if request.method == "DELETE":
        return notification_handlers.handle_delete_webhook(request, webhook_id)
    return _method_not_allowed()


def _serve_file(request: Request, path: str) -> Response:
    if os.path.isdir(path):
        path = os.path.join(path, STATIC_INDEX_FILE)
    if not os.path.isfile(path):
        return _not_found()
    return send_file(path, request.environ)


def serve_static_with_fallback(request: Request, directory: str | os.PathLike) -> Response:
    """Serve a file from ``directory``; unknown paths redirect to the home page."""
    directory = os.fspath(directory)
    if request.path == _ROOT:
        return _serve_file(request, os.path.join(directory, STATIC_INDEX_FILE))

    full_path = safe_join(directory, request.path.lstrip("/"))
    if full_path is None or not os.path.exists(full_path):
        return redirect(_ROOT, code=302)
    return _serve_file(request, full_path)


def _redirect_to_subtree(request: Request, prefix: str) -> Response:
    location = prefix
    if request.query_string:
        location += "?" + request.query_string.decode("latin-1")
    return redirect(location, code=301)


def create_app(static_dir: str | os.PathLike = STATIC_DIR):
    """Build the WSGI application with every route of the service."""
    directory = os.fspath(static_dir)
    dashboard_handler = make_dashboard_handler(RealDashboardService())
    subtrees = (
        (_REGISTRATIONS_TREE, registrations_dispatcher),
        (_DASHBOARDS_TREE, dashboard_handler),
        (_NOTIFICATIONS_TREE, notifications_dispatcher),
        (_STATUS_TREE, handle_service_status),
    )

    @Request.application
    def app(request: Request) -> Response:
        path = request.path
        if path == _REGISTRATIONS:
            return registrations_dispatcher(request)
        for prefix, handler in subtrees:
            if path.startswith(prefix):
                return handler(request)
        for prefix, _ in subtrees:
            if path + "/" == prefix:
                return _redirect_to_subtree(request, prefix)
        return serve_static_with_fallback(request, directory)

    return app


def database_initialization() -> DocumentStore:
    """Open the document store that every database operation uses."""
    return init_store(default_data_path())


def start_server() -> None:
    """Open the store, start the cache purge loop and serve HTTP until stopped."""
    try:
        database_initialization()
    except StoreError as exc:
        logger.critical("Could not initialize database: %s", exc)
        raise SystemExit(1) from exc

    stop = threading.Event()
    try:
        purger = threading.Thread(target=start_cache_purge_loop, args=(stop,), daemon=True)
        purger.start()

        port = os.environ.get(ENV_PORT, "")
        if not port:
            logger.info("$PORT not set. Defaulting to %s", DEFAULT_PORT)
            port = DEFAULT_PORT
        try:
            port_number = int(port)
        except ValueError as exc:
            logger.critical("Failed to start server: invalid port %r", port)
            raise SystemExit(1) from exc

        app = create_app()
        logger.info("Server running on port %s", port)
        try:
            run_simple("0.0.0.0", port_number, app, threaded=True)
        except OSError as exc:
            logger.critical("Failed to start server: %s", exc)
            raise SystemExit(1) from exc
    finally:
        stop.set()
        try:
            close_store()
        except StoreError as exc:
            logger.error("Error closing store: %s", exc)


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point: run the dashboard server."""
    parser = argparse.ArgumentParser(
        prog="countrydash",
        description="Country dashboard HTTP service. The port is read from $PORT.",
    )
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    start_server()
    return 0