# src/mission_control/server/data_server.py

"""
Minimal data server for the workspace document.

GET  /api/data    -> persisted document (500 if missing or unreadable)
POST /api/data    -> stamp meta.lastSync, write, reply {"success": true, "lastSync": ...}
GET  /api/export  -> persisted document as a timestamped attachment
"""

from __future__ import annotations

import json
import logging
import os
import threading
from datetime import UTC, datetime
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any

from ..config import get_settings
from ..logging_setup import setup_logging
from ..tasks.task_models import utc_now_iso

logger = logging.getLogger(__name__)

API_PREFIX = "/api"
MAX_PAYLOAD_SIZE = 10 * 1024 * 1024  # 10MB


def export_filename(now: datetime | None = None) -> str:
    stamp = utc_now_iso(now or datetime.now(UTC)).replace(":", "-").replace(".", "-")
    return f"mission-control-backup-{stamp}.json"


class DataFileStore:
    """The data file behind the API. Writes are serialized and atomic."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def read_text(self) -> str:
        return self._path.read_text(encoding="utf-8")

    def read(self) -> dict[str, Any]:
        doc = json.loads(self.read_text())
        if not isinstance(doc, dict):
            raise ValueError("data file does not hold a JSON object")
        return doc

    def write(self, doc: dict[str, Any], *, now: datetime | None = None) -> str:
        """Stamp meta.lastSync on the document, persist it and return the stamp."""
        meta = doc.get("meta")
        if not isinstance(meta, dict):
            meta = {}
            doc["meta"] = meta
        last_sync = utc_now_iso(now)
        meta["lastSync"] = last_sync

        data = json.dumps(doc, ensure_ascii=False, indent=2)
        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_text(data, encoding="utf-8")
            os.replace(tmp, self._path)
        return last_sync


def _json_response(handler: BaseHTTPRequestHandler, payload: dict[str, Any], status: int = 200) -> None:
    """Send JSON response with proper headers."""
    data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    handler.send_response(status)
    handler.send_header("Content-Type", "application/json")
    handler.send_header("Content-Length", str(len(data)))
    handler.send_header("Access-Control-Allow-Origin", "*")
    handler.end_headers()
    handler.wfile.write(data)


def _error_response(handler: BaseHTTPRequestHandler, message: str, status: int) -> None:
    _json_response(handler, {"error": message}, status)


class DataRequestHandler(BaseHTTPRequestHandler):
    # Set by make_server() on a per-server subclass.
    store: DataFileStore

    def _route(self) -> str:
        path = self.path.split("?", 1)[0]
        if not path.startswith(API_PREFIX):
            return ""
        return path[len(API_PREFIX):].rstrip("/")

    def do_OPTIONS(self) -> None:
        self.send_response(204)
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Methods", "GET, POST, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.end_headers()

    def do_GET(self) -> None:
        route = self._route()
        if route == "/data":
            try:
                doc = self.store.read()
            except (OSError, ValueError) as e:
                logger.error("Error reading data: %s", e)
                _error_response(self, "Failed to load data", 500)
                return
            _json_response(self, doc)
            return

        if route == "/export":
            try:
                data = self.store.read_text().encode("utf-8")
            except OSError as e:
                logger.error("Export failed: %s", e)
                _error_response(self, "Export failed", 500)
                return
            self.send_response(200)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Disposition", f"attachment; filename={export_filename()}")
            self.send_header("Content-Length", str(len(data)))
            self.send_header("Access-Control-Allow-Origin", "*")
            self.end_headers()
            self.wfile.write(data)
            return

        _error_response(self, "Not found", 404)

    def do_POST(self) -> None:
        if self._route() != "/data":
            _error_response(self, "Not found", 404)
            return

        try:
            length = int(self.headers.get("Content-Length", "0"))
        except ValueError:
            length = -1
        if length < 0:
            _error_response(self, "Invalid Content-Length", 400)
            return
        if length > MAX_PAYLOAD_SIZE:
            _error_response(self, "Payload too large", 413)
            return

        raw = self.rfile.read(length).decode("utf-8", errors="replace")
        try:
            body = json.loads(raw)
        except ValueError as e:
            logger.warning("Invalid JSON in POST /api/data: %s", e)
            _error_response(self, "Invalid JSON", 400)
            return
        if not isinstance(body, dict):
            _error_response(self, "Expected a JSON object", 400)
            return

        try:
            last_sync = self.store.write(body)
        except OSError as e:
            logger.error("Error writing data: %s", e)
            _error_response(self, "Failed to save data", 500)
            return

        logger.info("Saved tasks=%d lastSync=%s", len(body.get("tasks") or []), last_sync)
        _json_response(self, {"success": True, "lastSync": last_sync})

    def log_message(self, fmt: str, *args: Any) -> None:
        # Suppress default HTTP logging, we use structured logging
        return


def make_server(host: str, port: int, data_file: str | Path) -> ThreadingHTTPServer:
    """Build (but do not start) a server bound to host:port. Port 0 picks a free port."""
    handler = type("BoundDataRequestHandler", (DataRequestHandler,), {"store": DataFileStore(data_file)})
    return ThreadingHTTPServer((host, port), handler)


def main() -> None:
    settings = get_settings()
    level_name = str(settings.log_level).upper()
    setup_logging(
        log_dir=settings.data_dir,
        console_level=getattr(logging, level_name, logging.INFO),
        log_file_name="data_server.log",
        quiet_prefixes=(),
        max_bytes=5 * 1024 * 1024,
    )

    server = make_server(settings.server_host, settings.server_port, settings.server_data_file)
    host, port = server.server_address[:2]
    logger.info("Mission Control server running at http://%s:%s", host, port)
    logger.info("Data file: %s", settings.server_data_file)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Server interrupted")
    finally:
        server.server_close()


if __name__ == "__main__":
    main()
