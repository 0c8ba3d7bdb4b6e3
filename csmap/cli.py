"""CLI entrypoints for csmap commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError
from .logging import configure_logging, get_logger
from .orchestrator import Orchestrator


def _add_logging_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    # Subcommand copies use SUPPRESS so they do not reset a flag given before the command.
    def _default(value: object) -> object:
        return argparse.SUPPRESS if suppress_default else value

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=_default(False),
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=_default(False),
        help="Only log warnings and errors to stderr.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=_default(None),
        help="Also write DEBUG-level logs to this file.",
    )


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="csmap",
        description="Map the types, directories and dependencies of a Unity C# project.",
    )
    _add_logging_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze a project and emit the structure document as JSON.",
    )
    _add_logging_options(analyze_parser, suppress_default=True)
    analyze_parser.add_argument(
        "path",
        help="Path to the Unity project root or its Assets/ directory.",
    )
    analyze_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output file path (defaults to stdout).",
    )
    analyze_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a .csmap.yml file (defaults to the one inside PATH).",
    )
    analyze_parser.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        help="Number of threads used to parse files (overrides the config).",
    )
    analyze_parser.add_argument(
        "--compact",
        action="store_true",
        help="Write JSON without indentation.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service exposing project analysis.",
    )
    _add_logging_options(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for csmap commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose), quiet=bool(args.quiet), log_file=args.log_file
    )
    logger = get_logger("cli")

    if args.command == "analyze":
        orchestrator = Orchestrator(config_path=args.config)
        try:
            project = orchestrator.run_analysis(args.path, workers=args.workers)
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"Error: {exc}\n")
        except ConfigError as exc:
            parser.exit(1, f"Error: {exc}\n")
        except Exception as exc:  # pragma: no cover
            logger.debug("Analysis failed", exc_info=True)
            parser.exit(1, f"csmap analyze failed: {exc}\nRun with --verbose for more details.\n")

        document = project.to_json(indent=None if args.compact else 2)
        if args.output is None:
            sys.stdout.write(document + "\n")
        else:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(document, encoding="utf-8")
            logger.info("Output written to: %s", args.output)
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
