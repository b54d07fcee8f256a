"""Command-line entry point: watch store paths and log change notifications."""
from __future__ import annotations

import argparse
import logging
import threading
from pathlib import Path

from .config import ConfigError, load_config
from .notification import ResourceNotification
from .store import FileSystemResourceStore

logger = logging.getLogger("resourcestore")


class LoggingListener:
    """Listener that logs every notification it receives."""

    def __init__(self, level: int = logging.INFO):
        self._level = level

    def changed(self, notify: ResourceNotification) -> None:
        logger.log(self._level, "Changed: %s", ", ".join(notify.delta))


def main() -> None:
    parser = argparse.ArgumentParser(description="Watch a resource store for changes")
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to the YAML configuration file (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    config_path = Path(args.config)
    try:
        app_config = load_config(config_path)
    except ConfigError as exc:
        logging.error("%s", exc)
        raise SystemExit(2) from exc

    if not app_config.watch:
        logger.warning("No paths configured under 'watch'; nothing to do")
        return

    try:
        store = FileSystemResourceStore.from_config(app_config.store, app_config.watcher)
    except ValueError as exc:
        logging.error("%s", exc)
        raise SystemExit(2) from exc

    listener = LoggingListener()
    with store:
        for path in app_config.watch:
            store.add_listener(path, listener)
            logger.info("Watching %s (%s)", path, store.get(path).get_type().value)
        try:
            threading.Event().wait()
        except KeyboardInterrupt:
            logger.info("Interrupted by user")


if __name__ == "__main__":
    main()
