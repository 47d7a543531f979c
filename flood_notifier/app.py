"""Entry point that announces newly published flood notices in a Teams chat."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv
from pydantic import ValidationError

from .catalog_client import FileCatalogClient
from .config import Settings
from .credential_store import JsonFileCredentialStore
from .errors import ConfigError, FloodNotifierError
from .notifier import ChatNotifier
from .pipeline import Pipeline
from .seen_registry import SeenFileRegistry
from .token_refresher import TokenRefresher

logger = logging.getLogger("flood_notifier")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Notify a Teams chat about new files on the flood notice download page."
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List new files without recording them, refreshing the token or notifying",
    )
    parser.add_argument("--log-level", help="Console log level (overrides LOG_LEVEL)")
    parser.add_argument("--env-file", type=Path, help="Read settings from this .env file")
    return parser


def configure_logging(level: str, log_file: Path | None = None) -> None:
    console = logging.StreamHandler()
    console.setLevel(getattr(logging, level.upper(), logging.INFO))
    handlers: list[logging.Handler] = [console]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)
    logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT, handlers=handlers, force=True)
    # Keep library chatter out of the debug log.
    logging.getLogger("urllib3").setLevel(logging.INFO)


def load_settings(env_file: Path | None = None) -> Settings:
    if env_file is not None:
        if not env_file.exists():
            raise ConfigError(f"No env file found at {env_file}")
        load_dotenv(env_file, override=True)
    try:
        if env_file is not None:
            return Settings(_env_file=env_file)
        return Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings: {exc}") from exc


def build_pipeline(settings: Settings) -> Pipeline:
    return Pipeline(
        credentials=JsonFileCredentialStore(settings.secrets_file, settings.credentials_file),
        catalog=FileCatalogClient(settings),
        registry=SeenFileRegistry(settings.registry_db),
        refresher=TokenRefresher(settings),
        notifier=ChatNotifier(settings),
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Run the pipeline once and map its outcome onto a process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.env_file)
    except ConfigError as exc:
        configure_logging(args.log_level or "INFO")
        logger.error("%s", exc)
        return exc.exit_code

    configure_logging(args.log_level or settings.log_level, settings.log_file)
    logger.info("Logger initialized")

    pipeline = None
    try:
        pipeline = build_pipeline(settings)
        report = pipeline.run(dry_run=args.dry_run)
    except FloodNotifierError as exc:
        logger.error("Run failed (%s): %s", type(exc).__name__, exc)
        return exc.exit_code
    except Exception:
        logger.exception("Unexpected error during run")
        return 1
    finally:
        if pipeline is not None:
            pipeline.registry.close()

    logger.info(
        "Run complete: fetched=%s new=%s notified=%s refreshed=%s",
        report.fetched,
        len(report.new_files),
        len(report.notified),
        report.refreshed,
    )
    return 0
