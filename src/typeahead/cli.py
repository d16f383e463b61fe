"""CLI entry point for the Typeahead server."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typeahead.config.settings import Settings


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point for the Typeahead server."""
    parser = argparse.ArgumentParser(
        prog="typeahead",
        description="Typeahead — Autocomplete query engine",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Server bind address (overrides config)",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=None,
        help="Server port (overrides config)",
    )
    parser.add_argument(
        "--workers",
        "-w",
        type=int,
        default=None,
        help="Number of worker processes",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Typeahead {_get_version()}",
    )

    args = parser.parse_args(argv)

    settings = load_settings(args.config)

    # Apply CLI overrides
    if args.host:
        settings.server.host = args.host
    if args.port:
        settings.server.port = args.port
    if args.workers:
        settings.server.workers = args.workers
    if args.log_level:
        settings.observability.log_level = args.log_level

    import uvicorn

    from typeahead.api.app import create_app

    if args.reload or settings.server.workers > 1:
        # Import-string mode: each worker builds its own app from the config file.
        if args.config:
            os.environ["TYPEAHEAD_CONFIG"] = str(Path(args.config).resolve())
        uvicorn.run(
            "typeahead.api.app:create_app",
            factory=True,
            host=settings.server.host,
            port=settings.server.port,
            workers=1 if args.reload else settings.server.workers,
            reload=args.reload,
            log_level=settings.observability.log_level,
        )
        return

    uvicorn.run(
        create_app(settings),
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.observability.log_level,
    )


def load_settings(config: str | None) -> Settings:
    """Load settings from ``config`` or the environment, exiting on a missing file."""
    from typeahead.config.settings import Settings

    if not config:
        return Settings()

    config_path = Path(config)
    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)
        sys.exit(1)
    return Settings.from_yaml(config_path)


def _get_version() -> str:
    """Get the package version."""
    try:
        from typeahead import __version__

        return __version__
    except ImportError:
        return "unknown"


if __name__ == "__main__":
    main()
