"""CLI entrypoints for gentoolkit generators."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Dict, List

from .config import CONFIG_FILENAME, GeneratorConfig, SessionConfig, load_config
from .errors import GentoolkitError
from .generators import available_generators, get_generator
from .loader import load_package, source_directory
from .logging import configure_logging, get_logger
from .session import GenerationSession


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: Dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_generator_options(parser: argparse.ArgumentParser, suffix: str) -> None:
    parser.add_argument(
        "-t",
        "--type",
        dest="types",
        default=None,
        help="Comma-separated list of type names; must be set here or in the config file.",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help=f"Output file name; default srcdir/<type>_{suffix}.go.",
    )
    parser.add_argument(
        "--suffix",
        default=None,
        help=f"Suffix used in derived output file names (defaults to '{suffix}').",
    )
    parser.add_argument(
        "--no-format",
        dest="format",
        action="store_false",
        default=None,
        help="Write generated code without running gofmt.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help=f"Path to a {CONFIG_FILENAME} file (defaults to the source directory).",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write logs to this file.",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        default=["."],
        help="One directory, or Go files that belong to a single package.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gentoolkit",
        description="Generate Go code for the fields of struct types.",
        epilog=(
            "examples:\n"
            "  gentoolkit getter --type T [directory]\n"
            "  gentoolkit getter --type T files...  # must be a single package"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="generator", required=True)

    for name, factory in available_generators().items():
        suffix = getattr(factory, "file_suffix", name)
        generator_parser = subparsers.add_parser(
            name,
            help=f"Run the {name} generator.",
        )
        _add_verbose_option(generator_parser, suppress_default=True)
        _add_generator_options(generator_parser, suffix)

    return parser


def main(argv: List[str] | None = None) -> None:
    """CLI entrypoint for gentoolkit generators."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    paths: List[str] = list(args.paths) or ["."]

    try:
        config_path = Path(args.config) if args.config else source_directory(paths)
        config = load_config(config_path)
    except GentoolkitError as exc:
        parser.exit(1, f"gentoolkit: {exc}\n")

    log_file = Path(args.log_file) if args.log_file else config.log_file
    configure_logging(
        verbose=bool(args.verbose), log_file=log_file, prefix=f"gentoolkit-{args.generator}"
    )
    logger = get_logger("cli")

    types = _split_types(args.types) if args.types else list(config.types)
    if not types:
        parser.error("--type is required (or set 'types' in the config file)")

    try:
        generator = get_generator(args.generator)
        session_config = _session_config(args, config, generator.name, generator.file_suffix)
        package = load_package(paths)
        logger.debug("Generating %s for %s in package %s", generator.name, ", ".join(types), package.name)
        session = GenerationSession(package, generator, session_config)
        written = session.run(types)
    except GentoolkitError as exc:
        parser.exit(1, f"gentoolkit: {exc}\n")
    except Exception as exc:
        logger.debug("Generation failed", exc_info=True)
        parser.exit(1, f"gentoolkit failed: {exc}\nRun with --verbose for more details.\n")

    for path in written:
        print(f"Generated {_relativize(path)}")


def _session_config(
    args: argparse.Namespace, config: GeneratorConfig, name: str, default_suffix: str
) -> SessionConfig:
    options = config.options_for(name)
    suffix = args.suffix or options.suffix or config.suffix or default_suffix
    if args.format is not None:
        format_output = bool(args.format)
    elif options.format is not None:
        format_output = options.format
    else:
        format_output = config.format
    output = Path(args.output) if args.output else config.output
    return SessionConfig(
        tool_name=f"gentoolkit-{name}",
        file_suffix=suffix,
        format_output=format_output,
        output=output,
    )


def _split_types(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
