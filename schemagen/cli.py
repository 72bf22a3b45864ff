# File: schemagen/cli.py
"""
SchemaGen - Command-Line Interface
===================================

Built with the standard-library ``argparse`` module.

Usage examples::

    # Connection flags
    python -m schemagen --host localhost --database shop --user root \\
        --password secret -o ./generated -n App

    # Settings from a YAML / JSON file, overridden by flags
    python -m schemagen -c schemagen.yaml -o ./out -v

    # Custom stubs
    python -m schemagen -c schemagen.yaml --templates ./stubs

The password can also be supplied through ``SCHEMAGEN_DB_PASSWORD``.

Exit codes:
    0 — success
    1 — configuration error
    2 — catalog connection error
    3 — introspection error
    4 — template error
    5 — generation (file system) error
    6 — input error (unreadable config file)
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence, Type

from schemagen.errors import (
    CatalogConnectionError,
    ConfigurationError,
    GenerationError,
    IntrospectionError,
    SchemaGenError,
    TemplateError,
)

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_CONFIGURATION_ERROR: int = 1
EXIT_CONNECTION_ERROR: int = 2
EXIT_INTROSPECTION_ERROR: int = 3
EXIT_TEMPLATE_ERROR: int = 4
EXIT_GENERATION_ERROR: int = 5
EXIT_INPUT_ERROR: int = 6

_EXIT_CODES: Dict[Type[SchemaGenError], int] = {
    ConfigurationError: EXIT_CONFIGURATION_ERROR,
    CatalogConnectionError: EXIT_CONNECTION_ERROR,
    IntrospectionError: EXIT_INTROSPECTION_ERROR,
    TemplateError: EXIT_TEMPLATE_ERROR,
    GenerationError: EXIT_GENERATION_ERROR,
}

PASSWORD_ENV_VAR: str = "SCHEMAGEN_DB_PASSWORD"


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root schemagen logger based on verbosity level.

    Args:
        verbosity: -1 = ERROR, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    elif verbosity == 0:
        level = logging.WARNING
    else:
        level = logging.ERROR

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("schemagen")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from schemagen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="schemagen",
        description=(
            "SchemaGen — PHP model & service generator.\n\n"
            "Reads a MySQL database's INFORMATION_SCHEMA, derives belongsTo / "
            "hasMany relationships from its foreign keys, and writes one model "
            "and one service class per table."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s --host localhost --database shop --user root "
            "--password secret -o ./out -n App\n"
            "  %(prog)s -c schemagen.yaml -o ./out -v\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"SchemaGen v{__version__}",
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        metavar="PATH",
        help="Settings file (JSON or YAML). Flags override its values.",
    )

    # --- Database ---
    db_group = parser.add_argument_group("database")
    db_group.add_argument("--host", type=str, default=None, help="Database host.")
    db_group.add_argument(
        "--database", type=str, default=None, metavar="NAME",
        help="Database (schema) to introspect.",
    )
    db_group.add_argument("--user", type=str, default=None, help="Database user.")
    db_group.add_argument(
        "--password", type=str, default=None,
        help=f"Database password (or set {PASSWORD_ENV_VAR}).",
    )
    db_group.add_argument(
        "--charset", type=str, default=None,
        help="Connection charset (default: utf8mb4).",
    )
    db_group.add_argument(
        "--port", type=int, default=None, help="Database port (default: 3306).",
    )

    # --- Output ---
    out_group = parser.add_argument_group("output")
    out_group.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="DIR",
        help="Output root; Models/ and Services/ are created inside it.",
    )
    out_group.add_argument(
        "-n", "--namespace",
        type=str,
        default=None,
        help="PHP namespace prefix for generated classes, e.g. 'App'.",
    )
    out_group.add_argument(
        "--templates",
        type=str,
        default=None,
        metavar="DIR",
        help="Directory with model.stub / service.stub overriding the bundled ones.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Config override builder
# ---------------------------------------------------------------------------


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Build a config override dictionary from CLI arguments."""
    overrides: Dict[str, Any] = {
        "db_host": args.host,
        "db_name": args.database,
        "db_user": args.user,
        "db_password": (
            args.password if args.password is not None
            else os.environ.get(PASSWORD_ENV_VAR)
        ),
        "output_directory": args.output,
        "namespace": args.namespace,
        "templates_directory": args.templates,
    }

    options: Dict[str, Any] = {}
    if args.charset is not None:
        options["charset"] = args.charset
    if args.port is not None:
        options["port"] = args.port
    if options:
        overrides["db_options"] = options

    return overrides


def _exit_code_for(exc: SchemaGenError) -> int:
    for error_type, code in _EXIT_CODES.items():
        if isinstance(exc, error_type):
            return code
    return EXIT_GENERATION_ERROR


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def run(argv: Optional[Sequence[str]] = None) -> int:
    """
    Parse arguments, run the pipeline and return the exit code.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    from schemagen.generator import CodeGenerator, build_config, load_config_file

    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.quiet:
        verbosity: int = -1
    else:
        verbosity = args.verbose
    _setup_logging(verbosity)

    raw: Dict[str, Any] = {}
    if args.config is not None:
        config_path: Path = Path(args.config).resolve()
        try:
            raw = load_config_file(config_path)
        except (FileNotFoundError, ValueError) as exc:
            logger.error("Failed to load config file: %s", exc)
            return EXIT_INPUT_ERROR
        logger.info("Loaded settings from %s.", config_path)

    try:
        config = build_config(raw, _build_config_overrides(args))
        report = CodeGenerator(config).generate()
    except SchemaGenError as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        return _exit_code_for(exc)

    if not args.quiet:
        print(report.summary())
    return EXIT_SUCCESS


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """Console-script entry point."""
    sys.exit(run(argv))


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "run",
    "EXIT_SUCCESS",
    "EXIT_CONFIGURATION_ERROR",
    "EXIT_CONNECTION_ERROR",
    "EXIT_INTROSPECTION_ERROR",
    "EXIT_TEMPLATE_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("schemagen.cli loaded.")
