from __future__ import annotations

import argparse
import logging
import sys

from .config import load_settings
from .server import create_app
from .services.container import get_services
from .services.store import StoreError

logger = logging.getLogger("docdrafts.main")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="docdrafts", description="Document drafts HTTP service")
    parser.add_argument("--host", help="interface to bind (DOCDRAFTS_HOST)")
    parser.add_argument("--port", type=int, help="TCP port to listen on (DOCDRAFTS_PORT)")
    parser.add_argument("--db", dest="db_path", help="SQLite database file (DOCDRAFTS_DB_PATH)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = load_settings()
    if args.host:
        settings.host = args.host
    if args.port is not None:
        settings.port = args.port
    if args.db_path:
        settings.db_path = args.db_path

    try:
        app = create_app(settings)
    except StoreError as exc:
        logger.critical("Failed to open drafts database %s: %s", settings.db_path, exc)
        return 1

    logger.info("Starting API server on %s:%s", settings.host, settings.port)
    try:
        app.run(host=settings.host, port=settings.port, debug=settings.debug, threaded=True)
    except OSError as exc:
        logger.critical("Failed to start API server: %s", exc)
        return 1
    finally:
        with app.app_context():
            get_services().store.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
